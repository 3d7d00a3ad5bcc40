from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from snapsolve.core.lifecycle import CancellationToken
from snapsolve.domain.exceptions import UnknownProviderError
from snapsolve.models.schema import (
    DebugResult,
    ProblemInfo,
    QuestionSet,
    SolutionResult,
    TextNote,
)
from snapsolve.models.types import Mode, PipelineKind, ProviderKind, StagePurpose


class ProviderConfig(BaseModel):
    """Resolved settings snapshot for one pipeline run.

    Read from the config store when a run starts and never mutated afterwards,
    even if the store's live value changes mid-run.
    """

    model_config = ConfigDict(frozen=True)

    provider: str = ProviderKind.OPENAI.value
    api_key: Optional[str] = None
    mode: Mode = Mode.CODING
    language: str = "python"
    models: Dict[str, str] = Field(default_factory=dict)

    def provider_kind(self) -> ProviderKind:
        try:
            return ProviderKind((self.provider or "").strip().lower())
        except ValueError:
            raise UnknownProviderError(self.provider) from None

    def model_for(self, purpose: StagePurpose, default: str) -> str:
        """Model name for a stage; MCQ stages fall back to their coding counterparts."""
        candidates: List[str] = []
        if self.mode == Mode.MCQ and purpose == StagePurpose.EXTRACTION:
            candidates.append("mcq_extraction")
        if self.mode == Mode.MCQ and purpose == StagePurpose.SOLUTION:
            candidates.append("mcq_solution")
        candidates.append(purpose.value)
        for key in candidates:
            name = (self.models.get(key) or "").strip()
            if name:
                return name
        return default

    def redacted_key(self) -> str:
        if not self.api_key:
            return "<unset>"
        return self.api_key[:5] + "..."


class ImagePayload(BaseModel):
    """One screenshot ready to send to a provider."""

    model_config = ConfigDict(frozen=True)

    path: str
    media_type: str = "image/png"
    data: str  # base64


class PipelineRequest(BaseModel):
    """State shared by the steps of one in-flight pipeline run."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    kind: PipelineKind
    config: ProviderConfig
    token: CancellationToken
    images: List[ImagePayload] = Field(default_factory=list)

    # filled in by the steps
    problem: Optional[ProblemInfo] = None
    questions: Optional[QuestionSet] = None
    notes: List[TextNote] = Field(default_factory=list)
    solution: Optional[SolutionResult] = None
    debug: Optional[DebugResult] = None

    def problem_text(self) -> str:
        """Problem statement, or the question texts in MCQ mode."""
        if self.questions is not None and self.questions.questions:
            return "\n".join(
                f"{q.question_number}. {q.question_text}" for q in self.questions.questions
            )
        if self.problem is not None:
            return self.problem.problem_statement
        return ""
