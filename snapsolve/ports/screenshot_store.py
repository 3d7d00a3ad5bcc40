"""Screenshot queue port."""

from abc import ABC, abstractmethod
from typing import List


class ScreenshotStore(ABC):
    """Ordered primary and debug screenshot queues."""

    @abstractmethod
    def list_primary(self) -> List[str]:
        """Primary queue paths in capture order."""

    @abstractmethod
    def list_debug(self) -> List[str]:
        """Debug queue paths in capture order."""

    @abstractmethod
    async def read_bytes(self, path: str) -> bytes:
        """Image bytes. Raises ScreenshotNotFoundError when the file is gone."""

    @abstractmethod
    def clear_debug_queue(self) -> None: ...
