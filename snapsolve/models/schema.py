from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


def _as_text(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return value


def _as_text_map(value: Any) -> Any:
    if value is None:
        return {}
    if isinstance(value, dict):
        return {str(k): "" if v is None else str(v) for k, v in value.items()}
    if isinstance(value, list):
        # ["A. foo", "B. bar"] style lists keep their positional letters
        return {chr(65 + i): str(v) for i, v in enumerate(value) if i < 26}
    return value


# --- Extraction results ---


class ProblemInfo(BaseModel):
    """A coding problem read from the screenshots."""

    problem_statement: str = ""
    constraints: Optional[str] = None
    example_input: Optional[str] = None
    example_output: Optional[str] = None

    @field_validator(
        "problem_statement",
        "constraints",
        "example_input",
        "example_output",
        mode="before",
    )
    @classmethod
    def _coerce_text(cls, v: Any) -> Any:
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, list):
            return "\n".join(str(item) for item in v)
        return str(v)


class Question(BaseModel):
    """One multiple-choice question with its lettered options."""

    question_number: str = ""
    question_text: str = ""
    options: Dict[str, str] = Field(default_factory=dict)

    @field_validator("question_number", "question_text", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> Any:
        return "" if v is None else _as_text(v)

    @field_validator("options", mode="before")
    @classmethod
    def _coerce_options(cls, v: Any) -> Any:
        return _as_text_map(v)


class QuestionSet(BaseModel):
    """Ordered batch of extracted MCQ questions."""

    questions: List[Question] = Field(default_factory=list)


# --- Synthesis results ---


class Answer(BaseModel):
    """The model's verdict for a single MCQ question."""

    question_number: str = ""
    question_text: str = ""
    options: Dict[str, str] = Field(default_factory=dict)
    correct_answer: str = ""
    explanation: str = ""
    analysis: Dict[str, str] = Field(default_factory=dict)
    key_concepts: List[str] = Field(default_factory=list)

    @field_validator(
        "question_number", "question_text", "correct_answer", "explanation", mode="before"
    )
    @classmethod
    def _coerce_text(cls, v: Any) -> Any:
        return "" if v is None else _as_text(v)

    @field_validator("options", "analysis", mode="before")
    @classmethod
    def _coerce_map(cls, v: Any) -> Any:
        return _as_text_map(v)

    @field_validator("key_concepts", mode="before")
    @classmethod
    def _coerce_concepts(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, str):
            return [c.strip() for c in v.split(",") if c.strip()]
        if isinstance(v, list):
            return [str(c) for c in v]
        return v


class AnswerSet(BaseModel):
    answers: List[Answer] = Field(default_factory=list)


class SolutionResult(BaseModel):
    """Final answer shown in the solutions view (coding or MCQ)."""

    code: str
    thoughts: List[str] = Field(default_factory=list)
    time_complexity: str
    space_complexity: str
    answers: Optional[List[Answer]] = None
    is_mcq: bool = False

    @field_validator("thoughts", mode="before")
    @classmethod
    def _coerce_thoughts(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, str):
            return [line.strip() for line in v.splitlines() if line.strip()]
        return v


class DebugResult(BaseModel):
    """Result of the debug/refine stage."""

    code: str
    debug_analysis: str
    thoughts: List[str] = Field(default_factory=list)
    time_complexity: str = "N/A - Debug mode"
    space_complexity: str = "N/A - Debug mode"


# --- Collaborator data ---


class TextNote(BaseModel):
    """Free-text note the user attached for the debug stage."""

    id: str
    text: str
