from abc import ABC, abstractmethod
from typing import List

from snapsolve.models.schema import TextNote


class NoteStore(ABC):
    """Free-text notes the user attaches to a debug run."""

    @abstractmethod
    def list_notes(self) -> List[TextNote]: ...
