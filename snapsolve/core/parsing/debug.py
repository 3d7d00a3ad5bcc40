import re
from typing import Any, List, Optional

from snapsolve.core.parsing.base import ResponseParser, first_fenced_block
from snapsolve.models.schema import DebugResult

NO_CODE_TEXT = "// Debug mode - see analysis below"
DEFAULT_DEBUG_THOUGHTS = ["Debug analysis based on your screenshots"]
MAX_DEBUG_THOUGHTS = 5

# Plain-text section names promoted to markdown headings, first match each.
_SECTION_HEADINGS = (
    (re.compile(r"issues identified|problems found|bugs found", re.IGNORECASE), "## Issues Identified"),
    (re.compile(r"code improvements|improvements|suggested changes", re.IGNORECASE), "## Code Improvements"),
    (re.compile(r"optimizations|performance improvements", re.IGNORECASE), "## Optimizations"),
    (re.compile(r"explanation|detailed analysis", re.IGNORECASE), "## Explanation"),
)
_HEADING_RE = re.compile(r"^#{1,6}\s", re.MULTILINE)
_BULLET_RE = re.compile(r"^[ ]*(?:[-*•]|\d+\.)[ ]+([^\n]+)", re.MULTILINE)


def format_debug_analysis(text: str) -> str:
    if _HEADING_RE.search(text):
        return text
    formatted = text
    for pattern, heading in _SECTION_HEADINGS:
        formatted = pattern.sub(heading, formatted, count=1)
    return formatted


def debug_thoughts(analysis: str) -> List[str]:
    bullets = [b.strip() for b in _BULLET_RE.findall(analysis) if b.strip()]
    return bullets[:MAX_DEBUG_THOUGHTS] or list(DEFAULT_DEBUG_THOUGHTS)


def build_debug(data: Any) -> Optional[DebugResult]:
    if not isinstance(data, dict):
        return None
    analysis = data.get("debug_analysis")
    if not isinstance(analysis, str) or not analysis.strip():
        return None
    return DebugResult(
        code=data.get("code") or NO_CODE_TEXT,
        debug_analysis=analysis,
        thoughts=data.get("thoughts") or debug_thoughts(analysis),
    )


def debug_from_markdown(text: str) -> Optional[DebugResult]:
    """Debug replies are markdown; any non-blank reply is usable."""
    if not text or not text.strip():
        return None
    analysis = format_debug_analysis(text)
    return DebugResult(
        code=first_fenced_block(text) or NO_CODE_TEXT,
        debug_analysis=analysis,
        thoughts=debug_thoughts(analysis),
    )


def debug_placeholder(text: str) -> DebugResult:
    return DebugResult(
        code=NO_CODE_TEXT,
        debug_analysis=text or "",
        thoughts=list(DEFAULT_DEBUG_THOUGHTS),
    )


debug_parser: ResponseParser[DebugResult] = ResponseParser(
    schema="debug",
    build=build_debug,
    heuristic=debug_from_markdown,
    placeholder=debug_placeholder,
)
