import asyncio
import os
from typing import Iterable, List, Optional

import structlog

from snapsolve.domain.exceptions import ScreenshotNotFoundError
from snapsolve.ports.screenshot_store import ScreenshotStore

logger = structlog.get_logger(__name__)


class FileScreenshotStore(ScreenshotStore):
    """Screenshot queues backed by files on disk."""

    def __init__(
        self,
        primary: Optional[Iterable[str]] = None,
        debug: Optional[Iterable[str]] = None,
    ) -> None:
        self._primary: List[str] = list(primary or [])
        self._debug: List[str] = list(debug or [])

    def add_primary(self, path: str) -> None:
        self._primary.append(path)

    def add_debug(self, path: str) -> None:
        self._debug.append(path)

    def list_primary(self) -> List[str]:
        return list(self._primary)

    def list_debug(self) -> List[str]:
        return list(self._debug)

    def clear_primary_queue(self) -> None:
        self._primary.clear()

    def clear_debug_queue(self) -> None:
        if self._debug:
            logger.info("Debug queue cleared", count=len(self._debug))
        self._debug.clear()

    async def read_bytes(self, path: str) -> bytes:
        if not os.path.exists(path):
            raise ScreenshotNotFoundError(path)
        return await asyncio.to_thread(_read_file, path)


def _read_file(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()
