"""Callbacks that keep their own effective period on top of the host schedule."""

from __future__ import annotations

__all__ = [
    "AbstractDelayedCallback",
    "DeferringCallbackProtocol",
    "DelayGatedCallbackProtocol",
    "DelayedOneTimedCallback",
    "DelayedTimedCallback",
]

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from hosted.callbacks.callback import (
    OneTimedCallback,
    OneTimedScopedCallback,
    TimedCallback,
    TimedScopedCallback,
)
from hosted.durations import ensure_positive
from hosted.logging import WithLogger
from hosted.timer import Timer
from hosted.utils import utc_now

if TYPE_CHECKING:
    import asyncio
    from datetime import datetime, timedelta

    from hosted.cancellation import CancellationToken


@runtime_checkable
class DelayGatedCallbackProtocol(Protocol):
    """Callback that decides on its own whether enough time passed to run."""

    @property
    def last_invoke_time(self) -> datetime | None:
        """Return the UTC time of the last run attempt that was let through the gate."""

    def has_last_invoke(self) -> bool:
        """Return ``True`` once a last invoke time is recorded."""

    def set_last_invoke(self, last_invoke_time: datetime) -> None:
        """Record *last_invoke_time* as the moment the callback last ran."""

    async def invoke_delayed(self, stopping_token: CancellationToken) -> bool:
        """Run the action if the delay interval elapsed and report whether it ran."""


@runtime_checkable
class DeferringCallbackProtocol(Protocol):
    """Callback that may postpone a held-back run instead of dropping it."""

    @property
    def has_deferred_invoke(self) -> bool:
        """Return ``True`` while a deferred run is armed or executing."""

    @property
    def pending(self) -> frozenset[asyncio.Task[Any]]:
        """Return deferred runs that have started but not finished yet."""

    def cancel_deferred(self) -> None:
        """Disarm a deferred run that has not started yet."""


class AbstractDelayedCallback(WithLogger, ABC):
    """Gate :meth:`_invoke` behind a per-callback delay interval.

    ``last_invoke_time`` starts unset, which means the first attempt always runs unless the
    owning service seeded it first through :meth:`set_last_invoke`.
    """

    def __init__(self, delay_interval: timedelta | float) -> None:
        """Initialise the callback.

        :param delay_interval: Minimum time between two runs of :meth:`_invoke`.
        :raises HostedConfigError: If *delay_interval* is not positive or too large.
        """
        self._delay_interval = ensure_positive(delay_interval, "delay_interval")
        self._last_invoke_time: datetime | None = None

    @property
    def delay_interval(self) -> timedelta:
        """Return the minimum time between two runs."""
        return self._delay_interval

    @property
    def last_invoke_time(self) -> datetime | None:
        """Return the UTC time of the last run, ``None`` if it never ran nor was seeded."""
        return self._last_invoke_time

    def has_last_invoke(self) -> bool:
        """Return ``True`` once a last invoke time is recorded."""
        return self._last_invoke_time is not None

    def set_last_invoke(self, last_invoke_time: datetime) -> None:
        """Record *last_invoke_time* as the moment the callback last ran."""
        self._last_invoke_time = last_invoke_time

    async def invoke(self, stopping_token: CancellationToken) -> None:
        """Run through the delay gate."""
        await self.invoke_delayed(stopping_token)

    async def invoke_delayed(self, stopping_token: CancellationToken) -> bool:
        """Run :meth:`_invoke` when the delay interval elapsed since the last run.

        :returns: ``True`` if the action ran, ``False`` if it was held back.
        """
        now = utc_now()
        if self._last_invoke_time is not None:
            elapsed = now - self._last_invoke_time
            if elapsed < self._delay_interval:
                return await self._on_not_elapsed(stopping_token, self._delay_interval - elapsed)

        self._last_invoke_time = now
        await self._invoke(stopping_token)
        return True

    @abstractmethod
    async def _on_not_elapsed(self, stopping_token: CancellationToken, remaining: timedelta) -> bool:
        """Handle an attempt made *remaining* before the delay interval elapses."""

    @abstractmethod
    async def _invoke(self, stopping_token: CancellationToken) -> None:
        """Perform the callback action."""


class DelayedTimedCallback(AbstractDelayedCallback, TimedCallback, TimedScopedCallback):
    """Delayed callback for timed services; held-back attempts are retried on the next tick."""

    async def _on_not_elapsed(self, stopping_token: CancellationToken, remaining: timedelta) -> bool:
        self._logger.debug("%s held back for another %s", type(self).__name__, remaining)
        return False


class DelayedOneTimedCallback(AbstractDelayedCallback, OneTimedCallback, OneTimedScopedCallback):
    """Delayed callback for one-timed services.

    The owning service runs only once, so a held-back attempt arms a one-time timer for the
    remaining time instead of being dropped.
    """

    def __init__(self, delay_interval: timedelta | float) -> None:
        """Initialise the callback with no deferred run armed."""
        super().__init__(delay_interval)
        self._deferred: Timer | None = None

    @property
    def has_deferred_invoke(self) -> bool:
        """Return ``True`` while a deferred run is armed or executing."""
        return self._deferred is not None

    @property
    def pending(self) -> frozenset[asyncio.Task[Any]]:
        """Return the deferred run while it executes."""
        if self._deferred is None:
            return frozenset()
        return self._deferred.pending

    def cancel_deferred(self) -> None:
        """Disarm the deferred run unless it is already executing."""
        if self._deferred is None or self._deferred.pending:
            return
        self._logger.debug("%s deferred run cancelled", type(self).__name__)
        self._deferred.dispose()
        self._deferred = None

    async def _on_not_elapsed(self, stopping_token: CancellationToken, remaining: timedelta) -> bool:
        if self._deferred is None:
            self._logger.debug("%s deferred by %s", type(self).__name__, remaining)
            self._deferred = Timer(self._deferred_invoke, stopping_token, remaining)
        return False

    async def _deferred_invoke(self, stopping_token: CancellationToken) -> None:
        try:
            if stopping_token.is_cancellation_requested:
                return
            self._last_invoke_time = utc_now()
            await self._invoke(stopping_token)
        finally:
            if self._deferred is not None:
                self._deferred.dispose()
                self._deferred = None
