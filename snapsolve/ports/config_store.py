"""Persisted provider configuration port."""

from abc import ABC, abstractmethod
from typing import Callable

from snapsolve.models.context import ProviderConfig

ConfigListener = Callable[[ProviderConfig], None]


class ConfigStore(ABC):
    @abstractmethod
    def load(self) -> ProviderConfig:
        """Current snapshot."""

    @abstractmethod
    def on_change(self, listener: ConfigListener) -> Callable[[], None]:
        """Call ``listener`` with each new snapshot after it is persisted.

        Returns a function that removes the listener.
        """
