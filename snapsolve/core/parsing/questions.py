"""MCQ question extraction: JSON shapes, option splitting and text heuristics."""

import re
from typing import Any, Dict, List, Optional, Pattern, Tuple

from snapsolve.core.parsing.base import ResponseParser
from snapsolve.models.schema import Question, QuestionSet

EXTRACTION_FAILED_TEXT = (
    "Failed to extract question text properly. Please check screenshots or try again."
)

# Tried in order; the first style that yields at least one option wins.
OPTION_PATTERNS: Tuple[Tuple[str, Pattern[str]], ...] = (
    (
        "upper",
        re.compile(
            r"(?:^|(?<=\s))([A-D])[.)][ \t]*(\S.*?)(?=[ \t]+[A-D][.)][ \t]|[ \t]*$)",
            re.MULTILINE,
        ),
    ),
    (
        "lower",
        re.compile(
            r"(?:^|(?<=\s))([a-d])[.)][ \t]*(\S.*?)(?=[ \t]+[a-d][.)][ \t]|[ \t]*$)",
            re.MULTILINE,
        ),
    ),
    (
        "digit",
        re.compile(
            r"(?:^|(?<=\s))([1-4])[.)][ \t]+(\S.*?)(?=[ \t]+[1-4][.)][ \t]|[ \t]*$)",
            re.MULTILINE,
        ),
    ),
    (
        "option",
        re.compile(
            r"(?:option|choice)[ \t]*([A-D])[ \t]*[:.)][ \t]*(\S.*?)"
            r"(?=[ \t]+(?:option|choice)[ \t]*[A-D][ \t]*[:.)]|[ \t]*$)",
            re.MULTILINE | re.IGNORECASE,
        ),
    ),
)

_QUESTION_START_RE = re.compile(
    r"^[ \t*#]*(?:Q(?:uestion)?[ \t]*)?(\d+)[ \t]*[.):][ \t]*",
    re.IGNORECASE | re.MULTILINE,
)
_BLANK_LINE_RE = re.compile(r"\n[ \t]*\n")


def option_letter(key: str) -> str:
    """Map ``1``-``4`` to ``A``-``D`` and upper-case single letters."""
    key = key.strip()
    if re.fullmatch(r"[1-4]", key):
        return chr(64 + int(key))
    if len(key) == 1 and key.isalpha() and key.islower():
        return key.upper()
    return key


def extract_options_from_text(text: str) -> Tuple[str, Dict[str, str]]:
    """Split embedded option markers out of a question's text.

    Returns the question text with the matched option spans removed and the
    options keyed ``A``-``D``. Without option markers, a multi-line text is
    read as a question line followed by up to four option lines; a single
    line is returned as is with an empty map.
    """
    if not text:
        return text or "", {}

    for _, pattern in OPTION_PATTERNS:
        matches = list(pattern.finditer(text))
        if not matches:
            continue

        options: Dict[str, str] = {}
        for match in matches:
            options.setdefault(option_letter(match.group(1)), match.group(2).strip())

        remaining = text
        for match in reversed(matches):
            remaining = remaining[: match.start()] + remaining[match.end() :]
        question_text = re.sub(r"[ \t]+", " ", remaining)
        question_text = re.sub(r"\s*\n\s*", "\n", question_text).strip()
        return question_text, options

    # no markers: first line is the question, the next lines are A-D
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    if len(lines) > 1:
        return lines[0], {chr(65 + i): line for i, line in enumerate(lines[1:5])}
    return text, {}


def build_questions(data: Any) -> Optional[QuestionSet]:
    items = data.get("questions") if isinstance(data, dict) else data
    if not isinstance(items, list) or not items:
        return None
    if not all(isinstance(item, dict) for item in items):
        return None
    return QuestionSet(questions=[Question.model_validate(item) for item in items])


def _question_starts(text: str) -> List["re.Match[str]"]:
    """Numbered lines that open a new question.

    A number that does not increase on the last accepted start is a digit
    option of the open question, and so is every numbered line after it
    until a blank line.
    """
    starts: List["re.Match[str]"] = []
    last_number = 0
    in_options = False
    prev_end = 0
    for match in _QUESTION_START_RE.finditer(text):
        number = int(match.group(1))
        if _BLANK_LINE_RE.search(text, prev_end, match.start()):
            in_options = False
        prev_end = match.end()
        if starts and (in_options or number <= last_number):
            in_options = True
            continue
        starts.append(match)
        last_number = number
    return starts


def _question_blocks(text: str) -> List[Tuple[str, str]]:
    starts = _question_starts(text)
    blocks: List[Tuple[str, str]] = []
    for idx, match in enumerate(starts):
        end = starts[idx + 1].start() if idx + 1 < len(starts) else len(text)
        body = text[match.end() : end].strip()
        if body:
            blocks.append((match.group(1), body))
    return blocks


def questions_from_text(text: str) -> Optional[QuestionSet]:
    """Recover questions from numbered blocks or blank-line separated blocks."""
    if not text or not text.strip():
        return None

    questions: List[Question] = []
    for number, body in _question_blocks(text):
        question_text, options = extract_options_from_text(body)
        questions.append(
            Question(question_number=number, question_text=question_text, options=options)
        )
    if questions and any(q.options for q in questions):
        return QuestionSet(questions=questions)

    questions = []
    blocks = [b.strip() for b in re.split(r"\n\s*\n", text) if b.strip()]
    for block in blocks:
        question_text, options = extract_options_from_text(block)
        if options:
            questions.append(
                Question(
                    question_number=str(len(questions) + 1),
                    question_text=question_text,
                    options=options,
                )
            )
    return QuestionSet(questions=questions) if questions else None


def questions_placeholder(text: str) -> QuestionSet:
    return QuestionSet(
        questions=[Question(question_number="1", question_text=EXTRACTION_FAILED_TEXT)]
    )


question_parser: ResponseParser[QuestionSet] = ResponseParser(
    schema="question_set",
    build=build_questions,
    heuristic=questions_from_text,
    placeholder=questions_placeholder,
)
