"""Reconcile parsed MCQ data with the extracted questions.

Every function here returns new objects and never raises; missing data stays
missing (empty string or empty map).
"""

from typing import Dict, List, Optional

import structlog

from snapsolve.core.parsing.questions import extract_options_from_text, option_letter
from snapsolve.models.schema import Answer, AnswerSet, Question, QuestionSet

logger = structlog.get_logger(__name__)


def normalize_option_key(key: str) -> str:
    """``1``-``4`` become ``A``-``D``, lowercase letters are upper-cased."""
    return option_letter(str(key))


def normalize_option_map(options: Optional[Dict[str, str]]) -> Dict[str, str]:
    normalized: Dict[str, str] = {}
    for key, value in (options or {}).items():
        normalized.setdefault(normalize_option_key(key), value)
    return normalized


class AnswerNormalizer:
    """Post-processing for MCQ question sets and answer sets."""

    def normalize_questions(self, question_set: QuestionSet) -> QuestionSet:
        questions: List[Question] = []
        for idx, question in enumerate(question_set.questions):
            number = question.question_number.strip() or str(idx + 1)
            text = question.question_text
            options = question.options
            if not options and text:
                text, options = extract_options_from_text(text)
                if options:
                    logger.debug(
                        "Inferred options from question text",
                        question_number=number,
                        count=len(options),
                    )
            questions.append(
                Question(
                    question_number=number,
                    question_text=text,
                    options=normalize_option_map(options),
                )
            )
        return QuestionSet(questions=questions)

    def normalize_answers(
        self, answer_set: AnswerSet, question_set: Optional[QuestionSet] = None
    ) -> AnswerSet:
        questions = question_set.questions if question_set else []
        answers: List[Answer] = []
        for idx, answer in enumerate(answer_set.answers):
            source = questions[idx] if idx < len(questions) else None
            updates = {
                "question_number": answer.question_number.strip()
                or (source.question_number if source else "")
                or str(idx + 1),
                "options": normalize_option_map(answer.options),
                "analysis": normalize_option_map(answer.analysis),
                "correct_answer": self._normalize_correct(answer.correct_answer),
            }
            if source is not None:
                if not answer.question_text:
                    updates["question_text"] = source.question_text
                if not answer.options:
                    updates["options"] = normalize_option_map(source.options)
            answers.append(answer.model_copy(update=updates))
        return AnswerSet(answers=answers)

    @staticmethod
    def _normalize_correct(value: str) -> str:
        value = (value or "").strip()
        if not value:
            return value
        # "A, C" style multi-answers keep their separators
        parts = [normalize_option_key(p.strip()) for p in value.split(",")]
        return ", ".join(p for p in parts if p)
