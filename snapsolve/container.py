"""Dependency container that wires the orchestrator to its collaborators."""

from typing import Optional

from snapsolve.adapters.config import InMemoryConfigStore
from snapsolve.adapters.events import QueueEventSink
from snapsolve.adapters.storage import FileScreenshotStore, InMemoryNoteStore
from snapsolve.core.config import Settings, settings as default_settings
from snapsolve.core.logging import setup_logging
from snapsolve.core.pipeline import ProcessingOrchestrator
from snapsolve.ports.config_store import ConfigStore
from snapsolve.ports.event_sink import EventSink
from snapsolve.ports.note_store import NoteStore
from snapsolve.ports.screenshot_store import ScreenshotStore


class Container:
    """Builds each collaborator once, on first use.

    Embedders pass their own store or sink implementations; anything left
    out gets the in-process default.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        screenshots: Optional[ScreenshotStore] = None,
        config_store: Optional[ConfigStore] = None,
        notes: Optional[NoteStore] = None,
        events: Optional[EventSink] = None,
        configure_logging: bool = True,
    ):
        self.settings = settings or default_settings
        self._screenshots = screenshots
        self._config_store = config_store
        self._notes = notes
        self._events = events
        self._orchestrator: Optional[ProcessingOrchestrator] = None
        if configure_logging:
            setup_logging(self.settings)

    def screenshots(self) -> ScreenshotStore:
        if self._screenshots is None:
            self._screenshots = FileScreenshotStore()
        return self._screenshots

    def config_store(self) -> ConfigStore:
        if self._config_store is None:
            self._config_store = InMemoryConfigStore.from_settings(self.settings)
        return self._config_store

    def notes(self) -> NoteStore:
        if self._notes is None:
            self._notes = InMemoryNoteStore()
        return self._notes

    def events(self) -> EventSink:
        if self._events is None:
            self._events = QueueEventSink()
        return self._events

    def orchestrator(self) -> ProcessingOrchestrator:
        if self._orchestrator is None:
            self._orchestrator = ProcessingOrchestrator(
                screenshots=self.screenshots(),
                config_store=self.config_store(),
                notes=self.notes(),
                events=self.events(),
                settings=self.settings,
            )
        return self._orchestrator
