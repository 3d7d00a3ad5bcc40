# snapsolve/models/types.py

from enum import Enum


class ProviderKind(str, Enum):
    """Supported AI backends."""

    OPENAI = "openai"
    GEMINI = "gemini"
    ANTHROPIC = "anthropic"

    @property
    def display_name(self) -> str:
        return {
            ProviderKind.OPENAI: "OpenAI",
            ProviderKind.GEMINI: "Gemini",
            ProviderKind.ANTHROPIC: "Claude",
        }[self]


class Mode(str, Enum):
    """What kind of answer the user wants from the screenshots."""

    CODING = "coding"
    MCQ = "mcq"


class StagePurpose(str, Enum):
    """Pipeline stage a provider call belongs to. Selects model and system prompt."""

    EXTRACTION = "extraction"
    SOLUTION = "solution"
    DEBUGGING = "debugging"


class PipelineKind(str, Enum):
    PRIMARY = "primary"
    DEBUG = "debug"


class ViewState(str, Enum):
    QUEUE = "queue"
    SOLUTIONS = "solutions"


class ProcessingEvent(str, Enum):
    """Event names sent to the UI-facing event sink."""

    EXTRACTION_STARTED = "extraction-started"
    PROGRESS = "progress"
    PROBLEM_EXTRACTED = "problem-extracted"
    SOLUTION_SUCCESS = "solution-success"
    SOLUTION_ERROR = "solution-error"
    DEBUG_STARTED = "debug-started"
    DEBUG_SUCCESS = "debug-success"
    DEBUG_ERROR = "debug-error"
    NO_SCREENSHOTS = "no-screenshots"
    API_KEY_INVALID = "api-key-invalid"


class ParseStrategy(str, Enum):
    """Which step of the response-parser fallback chain produced a result."""

    DIRECT = "direct"
    FENCED = "fenced"
    BRACED = "braced"
    HEURISTIC = "heuristic"
    PLACEHOLDER = "placeholder"


class PipelineStatus(str, Enum):
    """How a pipeline run settled."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"
    NO_INPUT = "no_input"
