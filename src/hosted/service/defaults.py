"""Default hosted services executing callbacks resolved from a provider."""

from __future__ import annotations

__all__ = ["DefaultOneTimedHostedService", "DefaultTimedHostedService"]

import asyncio
from typing import TYPE_CHECKING, Any

from typing_extensions import assert_never

from hosted.callbacks.callback import OneTimedScopedCallback, TimedScopedCallback
from hosted.common import OverlapBehaviorEnum
from hosted.orchestrator.orchestrator import CallbackOrchestrator
from hosted.service.one_timed import OneTimedHostedService
from hosted.service.timed import TimedHostedService
from hosted.utils import utc_now

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime, timedelta

    from hosted.callbacks.callback import CallbackProtocol
    from hosted.cancellation import CancellationToken
    from hosted.provider.provider import ScopeFactoryProtocol


class DefaultOneTimedHostedService(OneTimedHostedService):
    """Run every one-timed callback once after *delay*.

    Its last invoke time is the construction time, so delayed callbacks count their interval
    from the moment the service was built.
    """

    def __init__(
        self,
        callbacks: Iterable[CallbackProtocol] | None,
        scope_factory: ScopeFactoryProtocol,
        delay: timedelta | float,
        *,
        diagnostic: bool = False,
    ) -> None:
        """Initialise the service.

        :param callbacks: Long-lived one-timed callbacks.
        :param scope_factory: Source of scopes resolving :class:`OneTimedScopedCallback` instances.
        :param delay: Time to wait after start.
        :param diagnostic: Surface scope teardown errors instead of skipping scoped callbacks.
        """
        super().__init__(delay)
        self._orchestrator = CallbackOrchestrator(callbacks, scope_factory, diagnostic=diagnostic)
        self._last_invoke_time = utc_now()

    @property
    def orchestrator(self) -> CallbackOrchestrator:
        """Return the orchestrator running the callbacks."""
        return self._orchestrator

    def get_last_invoke_time(self) -> datetime:
        """Return the UTC time the service was created."""
        return self._last_invoke_time

    async def _on_timed_background(self, stopping_token: CancellationToken) -> None:
        await self._orchestrator.invoke_callbacks(OneTimedScopedCallback, self, stopping_token)

    async def stop(self, timeout: float | None = None) -> None:
        """Disarm deferred callback runs, then wait for in-flight work like the base service does."""
        self._orchestrator.cancel_deferred()
        await super().stop(timeout)

    def _pending_work(self) -> set[asyncio.Task[Any]]:
        return self._orchestrator.pending_deferrals()

    def _on_dispose(self) -> None:
        super()._on_dispose()
        self._orchestrator.dispose()


class DefaultTimedHostedService(TimedHostedService):
    """Run every timed callback on each tick, never two ticks at once.

    A single-permit lock is held for the whole orchestration of a tick. Depending on
    *overlap_behavior* a tick fired while the previous one still runs either waits for the
    lock or is dropped.
    """

    def __init__(  # noqa: PLR0913
        self,
        callbacks: Iterable[CallbackProtocol] | None,
        scope_factory: ScopeFactoryProtocol,
        due_time: timedelta | float,
        period: timedelta | float,
        *,
        overlap_behavior: OverlapBehaviorEnum = OverlapBehaviorEnum.Queue,
        diagnostic: bool = False,
    ) -> None:
        """Initialise the service.

        :param callbacks: Long-lived timed callbacks.
        :param scope_factory: Source of scopes resolving :class:`TimedScopedCallback` instances.
        :param due_time: Delay before the first tick.
        :param period: Interval between ticks.
        :param overlap_behavior: Whether an overlapping tick waits or is skipped.
        :param diagnostic: Surface scope teardown errors instead of skipping scoped callbacks.
        """
        super().__init__(due_time, period)
        self._orchestrator = CallbackOrchestrator(callbacks, scope_factory, diagnostic=diagnostic)
        self._lock = asyncio.Lock()
        self._overlap_behavior = overlap_behavior
        self._last_invoke_time = utc_now()
        self.tick_count = 0

    @property
    def orchestrator(self) -> CallbackOrchestrator:
        """Return the orchestrator running the callbacks."""
        return self._orchestrator

    def get_last_invoke_time(self) -> datetime:
        """Return the UTC time the last tick completed, or the creation time before that."""
        return self._last_invoke_time

    async def _on_work(self, stopping_token: CancellationToken) -> None:
        match self._overlap_behavior:
            case OverlapBehaviorEnum.Skip if self._lock.locked():
                self._logger.debug("Previous tick still running; skipping this one")
                return
            case OverlapBehaviorEnum.Skip | OverlapBehaviorEnum.Queue:
                pass
            case _:
                assert_never(self._overlap_behavior)

        async with self._lock:
            if stopping_token.is_cancellation_requested:
                return
            self.tick_count += 1
            await self._orchestrator.invoke_callbacks(TimedScopedCallback, self, stopping_token)
            self._last_invoke_time = utc_now()

    def _on_dispose(self) -> None:
        super()._on_dispose()
        self._orchestrator.dispose()
