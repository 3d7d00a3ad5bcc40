"""Ordered fallback chain that turns raw provider text into a schema object.

Strategies are tried top-down and the first one that returns a value wins:

1. ``DIRECT``      the whole text is JSON for the target schema
2. ``FENCED``      the first fenced code block is JSON for the target schema
3. ``BRACED``      the first balanced ``{...}`` substring is JSON for the schema
4. ``HEURISTIC``   schema-specific regular-expression extraction
5. ``PLACEHOLDER`` deterministic degraded result; never fails

A parser never raises on malformed input.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, Tuple, TypeVar

import structlog
from pydantic import ValidationError

from snapsolve.core.metrics import record_parse
from snapsolve.domain.exceptions import ParseError
from snapsolve.models.types import ParseStrategy

logger = structlog.get_logger(__name__)

T = TypeVar("T")

Strategy = Callable[[str], Optional[T]]

_TAGGED_FENCE_RE = re.compile(r"```[ \t]*[\w+#.-]*[ \t]*\r?\n([\s\S]*?)```")
_BARE_FENCE_RE = re.compile(r"```([\s\S]*?)```")


@dataclass(frozen=True)
class ParseOutcome(Generic[T]):
    """Parsed value plus the strategy tag that produced it."""

    value: T
    strategy: ParseStrategy

    @property
    def degraded(self) -> bool:
        return self.strategy == ParseStrategy.PLACEHOLDER


def first_fenced_block(text: str) -> Optional[str]:
    """Contents of the first ``` fenced block, language tag removed."""
    if not text:
        return None
    tagged = _TAGGED_FENCE_RE.search(text)
    bare = _BARE_FENCE_RE.search(text)
    if tagged and (bare is None or tagged.start() <= bare.start()):
        return tagged.group(1).strip()
    if bare:
        return bare.group(1).strip()
    return None


def first_balanced_object(text: str) -> Optional[str]:
    """First top-level ``{...}`` substring, skipping braces inside JSON strings."""
    if not text:
        return None
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for idx in range(start, len(text)):
            ch = text[idx]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return text[start : idx + 1]
        # unbalanced from this opening brace; try the next one
        start = text.find("{", start + 1)
    return None


def load_json(text: Optional[str]) -> Any:
    if text is None or not text.strip():
        raise ParseError("empty text")
    try:
        return json.loads(text.strip())
    except (json.JSONDecodeError, ValueError, RecursionError) as e:
        raise ParseError(f"invalid JSON: {e}") from e


class ResponseParser(Generic[T]):
    """Fallback chain for one target schema.

    ``build`` turns decoded JSON into the schema (or returns None when the
    shape is wrong), ``heuristic`` extracts from free text, and
    ``placeholder`` builds the degraded result from the raw text.
    """

    def __init__(
        self,
        schema: str,
        build: Callable[[Any], Optional[T]],
        heuristic: Strategy,
        placeholder: Callable[[str], T],
    ) -> None:
        self.schema = schema
        self._build = build
        self._placeholder = placeholder
        self.strategies: Tuple[Tuple[ParseStrategy, Strategy], ...] = (
            (ParseStrategy.DIRECT, self.parse_direct),
            (ParseStrategy.FENCED, self.parse_fenced),
            (ParseStrategy.BRACED, self.parse_braced),
            (ParseStrategy.HEURISTIC, heuristic),
        )

    def _from_json_text(self, text: Optional[str]) -> Optional[T]:
        try:
            data = load_json(text)
            return self._build(data)
        except (ParseError, ValidationError, TypeError, ValueError) as e:
            logger.debug("Strategy rejected input", schema=self.schema, reason=str(e))
            return None

    def parse_direct(self, text: str) -> Optional[T]:
        return self._from_json_text(text)

    def parse_fenced(self, text: str) -> Optional[T]:
        block = first_fenced_block(text)
        if block is None:
            return None
        return self._from_json_text(block)

    def parse_braced(self, text: str) -> Optional[T]:
        candidate = first_balanced_object(text)
        if candidate is None:
            return None
        return self._from_json_text(candidate)

    def parse(self, text: Optional[str]) -> ParseOutcome[T]:
        raw = text or ""
        for strategy, attempt in self.strategies:
            try:
                value = attempt(raw)
            except Exception as e:
                logger.warning(
                    "Parse strategy failed",
                    schema=self.schema,
                    strategy=strategy.value,
                    error=str(e),
                )
                value = None
            if value is not None:
                return self._finish(value, strategy)
        return self._finish(self._placeholder(raw), ParseStrategy.PLACEHOLDER)

    def _finish(self, value: T, strategy: ParseStrategy) -> ParseOutcome[T]:
        record_parse(self.schema, strategy.value)
        log = logger.warning if strategy == ParseStrategy.PLACEHOLDER else logger.info
        log("Response parsed", schema=self.schema, strategy=strategy.value)
        return ParseOutcome(value=value, strategy=strategy)
