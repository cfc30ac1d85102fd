"""Asyncio timer used to drive periodic services and deferred delayed callbacks."""

from __future__ import annotations

__all__ = ["Timer"]

import asyncio
import inspect
from typing import TYPE_CHECKING, Any

from hosted.durations import ensure_non_negative, ensure_positive
from hosted.errors import TimerDisposedError
from hosted.logging import WithLogger

if TYPE_CHECKING:
    from datetime import timedelta

    from hosted.hosted_types import TTimerCallback


class Timer(WithLogger):
    """Invoke ``callback(state)`` after *due_time* and then every *period*.

    Ticks are placed on an absolute grid (``start + due_time + n * period``) measured with the
    event loop clock, so a slow tick does not push the following ones back. Slots missed while
    the loop was busy are skipped instead of being fired in a burst.

    The timer does not serialise ticks: when the callback returns an awaitable it is scheduled as
    a task and the timer moves on. Such tasks are available through :attr:`pending` until they
    finish; their failures are logged and never stop the timer.

    Must be armed from within a running event loop.
    """

    def __init__(
        self,
        callback: TTimerCallback,
        state: Any = None,
        due_time: timedelta | None = None,
        period: timedelta | None = None,
    ) -> None:
        """Create the timer and arm it when *due_time* is provided.

        :param callback: Callable receiving *state* on each tick; may return an awaitable.
        :param state: Opaque value passed to *callback*.
        :param due_time: Delay before the first tick; ``None`` leaves the timer disarmed.
        :param period: Interval between ticks; ``None`` fires only once.
        """
        self._callback = callback
        self._state = state
        self._runner: asyncio.Task[None] | None = None
        self._pending: set[asyncio.Task[Any]] = set()
        self._disposed = False
        self.change(due_time, period)

    @property
    def pending(self) -> frozenset[asyncio.Task[Any]]:
        """Return tick tasks that have been started but not finished yet."""
        return frozenset(self._pending)

    @property
    def is_armed(self) -> bool:
        """Return ``True`` while further ticks are scheduled."""
        return self._runner is not None and not self._runner.done()

    @property
    def is_disposed(self) -> bool:
        """Return ``True`` once :meth:`dispose` has been called."""
        return self._disposed

    def change(self, due_time: timedelta | None, period: timedelta | None = None) -> None:
        """Re-arm the timer, or disarm it when *due_time* is ``None``.

        Disarming keeps the timer usable; in-flight tick tasks are left running.

        :raises TimerDisposedError: If the timer was disposed.
        :raises HostedConfigError: If *due_time* is negative or *period* is not positive.
        """
        if self._disposed:
            msg = "Cannot change a disposed timer"
            raise TimerDisposedError(msg)

        self._disarm()
        if due_time is None:
            return

        due_time = ensure_non_negative(due_time, "due_time")
        if period is not None:
            period = ensure_positive(period, "period")
        self._runner = asyncio.get_running_loop().create_task(self._run(due_time, period))

    def dispose(self) -> None:
        """Disarm and release the timer. Safe to call multiple times."""
        self._disarm()
        self._disposed = True

    def _disarm(self) -> None:
        if self._runner is not None:
            self._runner.cancel()
            self._runner = None

    async def _run(self, due_time: timedelta, period: timedelta | None) -> None:
        loop = asyncio.get_running_loop()
        next_at = loop.time() + due_time.total_seconds()
        while True:
            await asyncio.sleep(max(0.0, next_at - loop.time()))
            self._fire()
            if period is None:
                return

            step = period.total_seconds()
            next_at += step
            now = loop.time()
            if next_at < now:
                missed = int((now - next_at) // step) + 1
                self._logger.debug("Timer skipped %d missed tick(s)", missed)
                next_at += missed * step

    def _fire(self) -> None:
        try:
            result = self._callback(self._state)
        except Exception:
            self._logger.exception("Timer callback failed")
            return

        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._pending.add(task)
            task.add_done_callback(self._on_tick_done)

    def _on_tick_done(self, task: asyncio.Task[Any]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._logger.error("Timer tick failed", exc_info=exc)
