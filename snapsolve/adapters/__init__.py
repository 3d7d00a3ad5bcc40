"""In-process implementations of the collaborator ports."""

from snapsolve.adapters.config import InMemoryConfigStore
from snapsolve.adapters.events import EmittedEvent, QueueEventSink
from snapsolve.adapters.storage import FileScreenshotStore, InMemoryNoteStore

__all__ = [
    "EmittedEvent",
    "FileScreenshotStore",
    "InMemoryConfigStore",
    "InMemoryNoteStore",
    "QueueEventSink",
]
