from snapsolve.adapters.storage.notes import InMemoryNoteStore
from snapsolve.adapters.storage.screenshots import FileScreenshotStore

__all__ = ["FileScreenshotStore", "InMemoryNoteStore"]
