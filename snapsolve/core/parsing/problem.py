import re
from typing import Any, Dict, Optional

from snapsolve.core.parsing.base import ResponseParser
from snapsolve.models.schema import ProblemInfo

_SECTION_ALIASES = {
    "problem_statement": r"problem(?:\s+statement)?|statement|description",
    "constraints": r"constraints?",
    "example_input": r"(?:example|sample)\s+input|input",
    "example_output": r"(?:example|sample)\s+output|output",
}

_HEADER_RE = re.compile(
    r"^[ \t#*>-]*(?P<name>"
    + "|".join(f"(?:{alias})" for alias in _SECTION_ALIASES.values())
    + r")[ \t]*\**[ \t]*:[ \t]*\**",
    re.IGNORECASE | re.MULTILINE,
)


def build_problem(data: Any) -> Optional[ProblemInfo]:
    if not isinstance(data, dict):
        return None
    statement = data.get("problem_statement")
    if not isinstance(statement, str) or not statement.strip():
        return None
    return ProblemInfo.model_validate(data)


def _section_key(header: str) -> Optional[str]:
    for key, alias in _SECTION_ALIASES.items():
        if re.fullmatch(alias, header.strip(), re.IGNORECASE):
            return key
    return None


def problem_from_text(text: str) -> Optional[ProblemInfo]:
    """Read ``Problem Statement:`` / ``Constraints:`` style sections."""
    matches = list(_HEADER_RE.finditer(text or ""))
    if not matches:
        return None

    sections: Dict[str, str] = {}
    for idx, match in enumerate(matches):
        key = _section_key(match.group("name"))
        end = matches[idx + 1].start() if idx + 1 < len(matches) else len(text)
        body = text[match.end() : end].strip()
        if key and body and key not in sections:
            sections[key] = body

    if not sections.get("problem_statement"):
        return None
    return ProblemInfo(**sections)


def problem_placeholder(text: str) -> ProblemInfo:
    statement = (text or "").strip() or "Failed to extract problem statement."
    return ProblemInfo(problem_statement=statement)


problem_parser: ResponseParser[ProblemInfo] = ResponseParser(
    schema="problem_info",
    build=build_problem,
    heuristic=problem_from_text,
    placeholder=problem_placeholder,
)
