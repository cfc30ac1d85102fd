"""Hosted service that runs its work repeatedly on a fixed period."""

from __future__ import annotations

__all__ = ["TimedHostedService"]

from abc import abstractmethod
from typing import TYPE_CHECKING, Any

from hosted.durations import ensure_non_negative, ensure_positive
from hosted.service.base import AbstractHostedService
from hosted.timer import Timer

if TYPE_CHECKING:
    import asyncio
    from datetime import timedelta

    from hosted.cancellation import CancellationToken


class TimedHostedService(AbstractHostedService):
    """Arm a timer that calls :meth:`_on_work` after *due_time* and then every *period*.

    The timer does not wait for one tick to finish before firing the next; implementations whose
    work may outlast *period* must guard against overlap themselves.
    """

    def __init__(self, due_time: timedelta | float, period: timedelta | float) -> None:
        """Initialise the service.

        :param due_time: Delay before the first tick, zero or positive.
        :param period: Interval between ticks, strictly positive.
        :raises HostedConfigError: If either interval is out of range.
        """
        super().__init__()
        self._due_time = ensure_non_negative(due_time, "due_time")
        self._period = ensure_positive(period, "period")
        self._timer: Timer | None = None

    @property
    def due_time(self) -> timedelta:
        """Return the validated initial delay."""
        return self._due_time

    @property
    def period(self) -> timedelta:
        """Return the validated tick period."""
        return self._period

    async def _on_background(self, stopping_token: CancellationToken) -> None:
        if self._timer is not None:
            self._timer.dispose()
        self._timer = Timer(self._on_work_internal, stopping_token, self._due_time, self._period)

    async def stop(self, timeout: float | None = None) -> None:
        """Disarm the timer, then wait for in-flight ticks like the base service does."""
        if self._timer is not None and not self._timer.is_disposed:
            self._timer.change(None, None)
        await super().stop(timeout)

    def _pending_work(self) -> set[asyncio.Task[Any]]:
        if self._timer is None:
            return set()
        return set(self._timer.pending)

    def _on_dispose(self) -> None:
        if self._timer is not None:
            self._timer.dispose()
            self._timer = None

    def _on_work_internal(self, state: CancellationToken) -> Any:
        return self._on_work(state)

    @abstractmethod
    async def _on_work(self, stopping_token: CancellationToken) -> None:
        """Run the work for one tick."""
