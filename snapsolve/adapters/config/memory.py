from typing import Any, Callable, List, Optional

import structlog

from snapsolve.core.config import Settings, settings as default_settings
from snapsolve.models.context import ProviderConfig
from snapsolve.models.types import Mode
from snapsolve.ports.config_store import ConfigListener, ConfigStore

logger = structlog.get_logger(__name__)


class InMemoryConfigStore(ConfigStore):
    """Holds the current snapshot and notifies listeners after each update."""

    def __init__(self, config: Optional[ProviderConfig] = None) -> None:
        self._config = config or ProviderConfig()
        self._listeners: List[ConfigListener] = []

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "InMemoryConfigStore":
        settings = settings or default_settings
        return cls(
            ProviderConfig(
                provider=settings.default_provider,
                api_key=settings.api_key,
                mode=Mode(settings.default_mode),
                language=settings.default_language,
            )
        )

    def load(self) -> ProviderConfig:
        return self._config

    def update(self, **changes: Any) -> ProviderConfig:
        data = self._config.model_dump()
        data.update(changes)
        self._config = ProviderConfig.model_validate(data)
        logger.info(
            "Config updated",
            fields=sorted(changes),
            provider=self._config.provider,
            mode=self._config.mode.value,
        )
        for listener in list(self._listeners):
            listener(self._config)
        return self._config

    def on_change(self, listener: ConfigListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
