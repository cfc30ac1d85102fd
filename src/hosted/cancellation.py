"""Cooperative cancellation signal threaded through every hosted suspend point."""

from __future__ import annotations

__all__ = ["CancellationSource", "CancellationToken"]

import asyncio
from typing import TYPE_CHECKING

from hosted.errors import CancellationSourceDisposedError

if TYPE_CHECKING:
    from datetime import timedelta


class CancellationToken:
    """Read-only view of a :class:`CancellationSource`.

    Callbacks receive the token and are expected to observe it themselves when long-running;
    nothing in ``hosted`` interrupts a callback that is already executing.
    """

    __slots__ = ("_event",)

    def __init__(self, event: asyncio.Event) -> None:
        """Wrap *event*, which is set once cancellation is requested."""
        self._event = event

    @classmethod
    def none(cls) -> CancellationToken:
        """Return a token that is never cancelled."""
        return cls(asyncio.Event())

    @property
    def is_cancellation_requested(self) -> bool:
        """Return ``True`` once the owning source has been cancelled."""
        return self._event.is_set()

    def raise_if_cancellation_requested(self) -> None:
        """Raise :class:`asyncio.CancelledError` when cancellation has been requested."""
        if self._event.is_set():
            raise asyncio.CancelledError

    async def wait(self) -> None:
        """Suspend until cancellation is requested."""
        await self._event.wait()

    async def sleep(self, delay: timedelta) -> bool:
        """Suspend for *delay* unless cancellation is requested first.

        :returns: ``True`` when woken by cancellation, ``False`` when the delay elapsed.
        """
        if self._event.is_set():
            return True
        try:
            await asyncio.wait_for(self._event.wait(), timeout=delay.total_seconds())
        except asyncio.TimeoutError:
            return False
        return True


class CancellationSource:
    """Owner of a single cooperative cancellation signal."""

    __slots__ = ("_disposed", "_event", "_token")

    def __init__(self) -> None:
        """Create a source whose token is not cancelled yet."""
        self._event = asyncio.Event()
        self._token = CancellationToken(self._event)
        self._disposed = False

    @property
    def token(self) -> CancellationToken:
        """Return the token observed by background work."""
        return self._token

    @property
    def is_cancellation_requested(self) -> bool:
        """Return ``True`` once :meth:`cancel` has been called."""
        return self._event.is_set()

    @property
    def is_disposed(self) -> bool:
        """Return ``True`` once :meth:`dispose` has been called."""
        return self._disposed

    def cancel(self) -> None:
        """Signal cancellation to every holder of :attr:`token`.

        :raises CancellationSourceDisposedError: If the source was already disposed.
        """
        if self._disposed:
            msg = "Cannot cancel a disposed cancellation source"
            raise CancellationSourceDisposedError(msg)
        self._event.set()

    def dispose(self) -> None:
        """Release the source; the token keeps reporting its last state."""
        self._disposed = True
