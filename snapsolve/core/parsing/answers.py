import re
from typing import Any, Dict, List, Optional, Tuple

from snapsolve.core.parsing.base import ResponseParser
from snapsolve.models.schema import Answer, AnswerSet

_BLOCK_MARKER_RE = re.compile(r"(?:Question\s+(\d+)\s*:|Q(\d+)\s*:)", re.IGNORECASE)
_CORRECT_RE = re.compile(r"correct\s+answer\s*(?:is|:)\s*\**\s*\(?([A-D])\b", re.IGNORECASE)
_EXPLANATION_RE = re.compile(
    r"explanation\s*(?::|is)([\s\S]*?)(?=analysis|key\s+concepts|$)", re.IGNORECASE
)
_KEY_CONCEPTS_RE = re.compile(
    r"key\s+concepts\s*(?::|are|include)\s*([\s\S]*?)(?:\n\s*\n|$)", re.IGNORECASE
)


def build_answers(data: Any) -> Optional[AnswerSet]:
    items = data.get("answers") if isinstance(data, dict) else data
    if not isinstance(items, list):
        return None
    if not all(isinstance(item, dict) for item in items):
        return None
    return AnswerSet(answers=[Answer.model_validate(item) for item in items])


def extract_analysis(block: str) -> Dict[str, str]:
    """Per-option lines such as ``A: correct because ...`` or ``B - wrong``."""
    analysis: Dict[str, str] = {}
    for option in "ABCD":
        match = re.search(
            rf"^[ \t*-]*{option}[ \t]*(?::|-)[ \t]*([^\n]+)", block, re.MULTILINE
        )
        if match and match.group(1).strip():
            analysis[option] = match.group(1).strip()
    return analysis


def extract_key_concepts(block: str) -> List[str]:
    match = _KEY_CONCEPTS_RE.search(block)
    if not match:
        return []
    return [c.strip(" -*\t") for c in re.split(r"[,\n]", match.group(1)) if c.strip(" -*\t")]


def _answer_blocks(text: str) -> List[Tuple[str, str]]:
    markers = list(_BLOCK_MARKER_RE.finditer(text))
    if not markers:
        return [("1", text)]
    blocks = []
    for idx, match in enumerate(markers):
        end = markers[idx + 1].start() if idx + 1 < len(markers) else len(text)
        number = match.group(1) or match.group(2)
        blocks.append((number, text[match.end() : end]))
    return blocks


def answers_from_text(text: str) -> Optional[AnswerSet]:
    """Read ``Question N:`` blocks with ``correct answer is X`` style verdicts.

    Returns None when no block names a correct answer, so the caller falls
    through to the placeholder.
    """
    if not text or not _CORRECT_RE.search(text):
        return None

    answers: List[Answer] = []
    for number, block in _answer_blocks(text):
        if not block.strip():
            continue
        correct = _CORRECT_RE.search(block)
        explanation = _EXPLANATION_RE.search(block)
        answers.append(
            Answer(
                question_number=number,
                correct_answer=correct.group(1).upper() if correct else "?",
                explanation=(
                    explanation.group(1).strip()
                    if explanation and explanation.group(1).strip()
                    else "No explanation provided"
                ),
                analysis=extract_analysis(block),
                key_concepts=extract_key_concepts(block),
            )
        )
    return AnswerSet(answers=answers) if answers else None


def answers_placeholder(text: str) -> AnswerSet:
    return AnswerSet(
        answers=[
            Answer(
                question_number="1",
                correct_answer="?",
                explanation=(text or "").strip() or "No explanation provided",
            )
        ]
    )


answer_parser: ResponseParser[AnswerSet] = ResponseParser(
    schema="answer_set",
    build=build_answers,
    heuristic=answers_from_text,
    placeholder=answers_placeholder,
)
