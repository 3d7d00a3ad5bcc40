"""Coding-solution parsing and complexity normalization."""

import re
from typing import Any, List, Optional

from snapsolve.core.parsing.base import ResponseParser, first_fenced_block
from snapsolve.models.schema import SolutionResult

DEFAULT_TIME_COMPLEXITY = (
    "O(n) - Linear time complexity because we only iterate through the array once. "
    "Each element is processed exactly one time, and the hashmap lookups are O(1) "
    "operations."
)
DEFAULT_SPACE_COMPLEXITY = (
    "O(n) - Linear space complexity because we store elements in the hashmap. "
    "In the worst case, we might need to store all elements before finding the "
    "solution pair."
)
DEFAULT_THOUGHTS = ["Solution approach based on efficiency and readability"]

# One level of nested parentheses, e.g. O(n log(n)).
BIG_O_RE = re.compile(r"O\((?:[^()]|\([^()]*\))*\)", re.IGNORECASE)

_TIME_RE = re.compile(
    r"time\s+complexity\s*\**\s*:?\s*\**\s*(.+?)"
    r"(?=\n\s*\n|\n\s*(?:\d+\.\s*)?\**\s*space\s+complexity|\Z)",
    re.IGNORECASE | re.DOTALL,
)
_SPACE_RE = re.compile(
    r"space\s+complexity\s*\**\s*:?\s*\**\s*(.+?)(?=\n\s*\n|\n\s*\d+\.\s|\Z)",
    re.IGNORECASE | re.DOTALL,
)
_THOUGHTS_RE = re.compile(
    r"(?:thoughts|key\s+insights|reasoning|approach)\s*\**\s*:\s*\**"
    r"([\s\S]*?)(?=(?:\d+\.\s*)?\**\s*time\s+complexity|\Z)",
    re.IGNORECASE,
)
_BULLET_RE = re.compile(r"^[ \t]*(?:[-*•]|\d+\.)[ \t]*(.+)$", re.MULTILINE)


def normalize_complexity(text: Optional[str], default: str) -> str:
    """Coerce a complexity phrase into ``O(expr) - explanation`` form.

    Text without any Big-O token is prefixed with ``O(n)``; this is an
    estimate, not an analysis. Text that already explains itself (contains a
    dash or "because") is left untouched.
    """
    text = (text or "").strip()
    if not text:
        return default
    match = BIG_O_RE.search(text)
    if match is None:
        return f"O(n) - {text}"
    if "-" in text or "because" in text:
        return text
    notation = match.group(0)
    rest = (text[: match.start()] + text[match.end() :]).strip()
    return f"{notation} - {rest}" if rest else notation


def extract_thoughts(text: str) -> List[str]:
    match = _THOUGHTS_RE.search(text or "")
    if not match:
        return []
    section = match.group(1)
    # code blocks inside the section are not thoughts
    section = re.sub(r"```[\s\S]*?```", "", section)
    bullets = [b.strip().strip("*").strip() for b in _BULLET_RE.findall(section)]
    bullets = [b for b in bullets if b]
    if bullets:
        return bullets
    return [line.strip() for line in section.splitlines() if line.strip()]


def _complexity(pattern: "re.Pattern[str]", text: str) -> Optional[str]:
    match = pattern.search(text)
    if not match:
        return None
    value = match.group(1).strip().strip("*").strip()
    return value or None


def build_solution(data: Any) -> Optional[SolutionResult]:
    if not isinstance(data, dict):
        return None
    code = data.get("code")
    if not isinstance(code, str) or not code.strip():
        return None
    return SolutionResult(
        code=code,
        thoughts=data.get("thoughts") or DEFAULT_THOUGHTS,
        time_complexity=normalize_complexity(
            data.get("time_complexity"), DEFAULT_TIME_COMPLEXITY
        ),
        space_complexity=normalize_complexity(
            data.get("space_complexity"), DEFAULT_SPACE_COMPLEXITY
        ),
    )


def solution_from_text(text: str) -> Optional[SolutionResult]:
    """Code from the first fenced block, thoughts and complexities from prose."""
    code = first_fenced_block(text)
    if not code:
        return None
    return SolutionResult(
        code=code,
        thoughts=extract_thoughts(text) or DEFAULT_THOUGHTS,
        time_complexity=normalize_complexity(
            _complexity(_TIME_RE, text), DEFAULT_TIME_COMPLEXITY
        ),
        space_complexity=normalize_complexity(
            _complexity(_SPACE_RE, text), DEFAULT_SPACE_COMPLEXITY
        ),
    )


def solution_placeholder(text: str) -> SolutionResult:
    return SolutionResult(
        code=text or "",
        thoughts=DEFAULT_THOUGHTS,
        time_complexity=normalize_complexity(
            _complexity(_TIME_RE, text or ""), DEFAULT_TIME_COMPLEXITY
        ),
        space_complexity=normalize_complexity(
            _complexity(_SPACE_RE, text or ""), DEFAULT_SPACE_COMPLEXITY
        ),
    )


solution_parser: ResponseParser[SolutionResult] = ResponseParser(
    schema="solution",
    build=build_solution,
    heuristic=solution_from_text,
    placeholder=solution_placeholder,
)
