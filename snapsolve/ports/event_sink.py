"""UI-facing event port."""

from abc import ABC, abstractmethod
from typing import Any, Dict


class EventSink(ABC):
    @abstractmethod
    async def emit(self, event: str, payload: Dict[str, Any]) -> None:
        """Deliver one processing event to the UI."""
