from snapsolve.ports.config_store import ConfigListener, ConfigStore
from snapsolve.ports.event_sink import EventSink
from snapsolve.ports.note_store import NoteStore
from snapsolve.ports.screenshot_store import ScreenshotStore

__all__ = ["ConfigListener", "ConfigStore", "EventSink", "NoteStore", "ScreenshotStore"]
