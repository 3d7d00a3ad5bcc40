from typing import Any, Dict, Optional, Union

import structlog

from snapsolve.models.types import ProcessingEvent
from snapsolve.ports.event_sink import EventSink

logger = structlog.get_logger(__name__)


class EventEmitter:
    """Event sender shared by the orchestrator and its steps."""

    def __init__(self, sink: EventSink):
        self.sink = sink

    async def emit(
        self, event: Union[ProcessingEvent, str], data: Optional[Dict[str, Any]] = None
    ):
        name = event.value if isinstance(event, ProcessingEvent) else event
        logger.debug("Emitting event", event=name)
        await self.sink.emit(name, data or {})

    async def progress(self, message: str, percent: int):
        await self.emit(
            ProcessingEvent.PROGRESS,
            {"message": message, "progress": max(0, min(100, int(percent)))},
        )
