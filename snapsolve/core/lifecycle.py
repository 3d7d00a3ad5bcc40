"""Cancellation tokens and the per-kind request slots that own them."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Dict, Optional, Tuple, TypeVar
from uuid import uuid4

import structlog

from snapsolve.domain.exceptions import CanceledError
from snapsolve.models.types import PipelineKind

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class CancellationToken:
    """One-shot cancellation flag for a single pipeline run.

    Once canceled a token stays canceled; a new run always gets a new token.
    """

    def __init__(self, kind: PipelineKind) -> None:
        self.kind = kind
        self.id = uuid4().hex[:8]
        self._event = asyncio.Event()

    @property
    def canceled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> bool:
        """Cancel the token. Returns False if it was already canceled."""
        if self._event.is_set():
            return False
        self._event.set()
        return True

    def raise_if_canceled(self) -> None:
        if self._event.is_set():
            raise CanceledError()

    async def guard(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` unless the token is canceled first.

        On cancellation the underlying task is cancelled right away, which
        aborts an in-flight HTTP request instead of waiting for its timeout.
        """
        if self.canceled:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise CanceledError()

        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            done, _ = await asyncio.wait(
                {task, waiter}, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            waiter.cancel()

        if task in done:
            return task.result()

        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        logger.debug("In-flight request aborted", kind=self.kind.value, token=self.id)
        raise CanceledError()

    def __repr__(self) -> str:
        state = "canceled" if self.canceled else "live"
        return f"<CancellationToken {self.kind.value}:{self.id} {state}>"


class RequestLifecycleManager:
    """Holds at most one live token per pipeline kind."""

    def __init__(self) -> None:
        self._slots: Dict[PipelineKind, Optional[CancellationToken]] = {
            kind: None for kind in PipelineKind
        }

    def begin(
        self, kind: PipelineKind
    ) -> Tuple[CancellationToken, Callable[[], None]]:
        """Issue a new token for ``kind``, canceling the previous one if live.

        Returns the token and a disposer that frees the slot, but only while
        the slot still holds this token.
        """
        previous = self._slots.get(kind)
        if previous is not None:
            previous.cancel()
            logger.info(
                "Superseded in-flight request", kind=kind.value, token=previous.id
            )

        token = CancellationToken(kind)
        self._slots[kind] = token

        def dispose() -> None:
            if self._slots.get(kind) is token:
                self._slots[kind] = None

        return token, dispose

    def cancel(self, kind: PipelineKind) -> bool:
        token = self._slots.get(kind)
        if token is None:
            return False
        self._slots[kind] = None
        token.cancel()
        logger.info("Canceled request", kind=kind.value, token=token.id)
        return True

    def cancel_all(self) -> bool:
        """Cancel both slots. Returns True if anything was live."""
        canceled = False
        for kind in PipelineKind:
            canceled = self.cancel(kind) or canceled
        return canceled

    def active(self, kind: PipelineKind) -> Optional[CancellationToken]:
        return self._slots.get(kind)

    def is_current(self, token: CancellationToken) -> bool:
        return self._slots.get(token.kind) is token and not token.canceled
