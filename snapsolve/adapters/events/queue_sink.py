import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from snapsolve.ports.event_sink import EventSink


def sse_event(event: str, data: Dict[str, Any]) -> str:
    """Serialize one event in SSE wire format."""
    return (
        f"event: {event}\n" + "data: " + json.dumps(data, ensure_ascii=False) + "\n\n"
    )


@dataclass(frozen=True)
class EmittedEvent:
    name: str
    payload: Dict[str, Any] = field(default_factory=dict)

    def to_sse(self) -> str:
        return sse_event(self.name, self.payload)


class QueueEventSink(EventSink):
    """Puts every event on an asyncio queue and keeps a history for inspection."""

    def __init__(self, queue: Optional[asyncio.Queue] = None) -> None:
        self.queue: asyncio.Queue = queue if queue is not None else asyncio.Queue()
        self._history: List[EmittedEvent] = []

    async def emit(self, event: str, payload: Dict[str, Any]) -> None:
        item = EmittedEvent(name=event, payload=payload)
        self._history.append(item)
        await self.queue.put(item)

    def events(self, name: Optional[str] = None) -> List[EmittedEvent]:
        if name is None:
            return list(self._history)
        return [e for e in self._history if e.name == name]

    def names(self) -> List[str]:
        return [e.name for e in self._history]

    def clear(self) -> None:
        self._history.clear()
