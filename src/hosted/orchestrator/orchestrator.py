"""Invocation of long-lived and scoped callbacks on behalf of a hosted service."""

from __future__ import annotations

__all__ = ["CallbackOrchestrator"]

import asyncio
from typing import TYPE_CHECKING, Any

from hosted.callbacks.delayed import DeferringCallbackProtocol, DelayGatedCallbackProtocol
from hosted.errors import ScopeUnavailableError
from hosted.logging import WithLogger
from hosted.orchestrator.cache import LastInvokeCache, callback_key

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from hosted.callbacks.callback import CallbackProtocol, LastInvokeSourceProtocol
    from hosted.cancellation import CancellationToken
    from hosted.provider.provider import ScopeFactoryProtocol


class CallbackOrchestrator(WithLogger):
    """Run the callbacks of one hosted service for a single tick.

    Long-lived callbacks are fixed at construction. Scoped callbacks are resolved from a fresh
    scope on every call; their delay-gating state would die with each instance, so it is kept
    in a :class:`LastInvokeCache` keyed by callback type.
    """

    def __init__(
        self,
        callbacks: Iterable[CallbackProtocol] | None,
        scope_factory: ScopeFactoryProtocol,
        *,
        diagnostic: bool = False,
    ) -> None:
        """Initialise the orchestrator.

        :param callbacks: Long-lived callbacks, invoked in the given order.
        :param scope_factory: Source of scopes resolving the scoped callbacks.
        :param diagnostic: Re-raise :class:`ScopeUnavailableError` instead of skipping the
            scoped set, to surface shutdown-ordering bugs.
        """
        self._callbacks: tuple[CallbackProtocol, ...] = tuple(callbacks or ())
        self._scope_factory = scope_factory
        self._diagnostic = diagnostic
        self._last_invoke_cache = LastInvokeCache()
        self._deferring: list[DeferringCallbackProtocol] = []

    @property
    def callbacks(self) -> tuple[CallbackProtocol, ...]:
        """Return the long-lived callbacks."""
        return self._callbacks

    @property
    def last_invoke_cache(self) -> LastInvokeCache:
        """Return the per-type last invoke times of scoped callbacks."""
        return self._last_invoke_cache

    async def invoke_callbacks(
        self,
        scoped_kind: type,
        owner: LastInvokeSourceProtocol,
        stopping_token: CancellationToken,
    ) -> None:
        """Invoke the long-lived and the scoped callbacks concurrently.

        Waits for both sets; the first failure, if any, is raised afterwards.

        :param scoped_kind: Base class selecting which scoped callbacks to resolve.
        :param owner: Service whose last invoke time seeds callbacks that never ran.
        :param stopping_token: Checked before every callback invocation.
        """
        results = await asyncio.gather(
            self._invoke_long_lived(owner, stopping_token),
            self._invoke_scoped(scoped_kind, owner, stopping_token),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result

    async def _invoke_long_lived(
        self, owner: LastInvokeSourceProtocol, stopping_token: CancellationToken
    ) -> None:
        for callback in self._callbacks:
            if stopping_token.is_cancellation_requested:
                return
            if isinstance(callback, DelayGatedCallbackProtocol) and not callback.has_last_invoke():
                callback.set_last_invoke(owner.get_last_invoke_time())
            await callback.invoke(stopping_token)
            self._track_deferred(callback)

    async def _invoke_scoped(
        self, scoped_kind: type, owner: LastInvokeSourceProtocol, stopping_token: CancellationToken
    ) -> None:
        try:
            async with self._scope_factory.create_scope() as scope:
                for callback in scope.get_services(scoped_kind):
                    if stopping_token.is_cancellation_requested:
                        return
                    await self._invoke_scoped_callback(callback, owner, stopping_token)
        except ScopeUnavailableError:
            if self._diagnostic:
                raise
            self._logger.debug("Callback scope unavailable; scoped callbacks skipped or not released")

    async def _invoke_scoped_callback(
        self, callback: Any, owner: LastInvokeSourceProtocol, stopping_token: CancellationToken
    ) -> None:
        key = callback_key(callback)
        last_invoke_time = self._last_invoke_cache.get_or_seed(key, owner.get_last_invoke_time())
        if not isinstance(callback, DelayGatedCallbackProtocol):
            await callback.invoke(stopping_token)
            return

        callback.set_last_invoke(last_invoke_time)
        ran = await callback.invoke_delayed(stopping_token)
        # Attempt time, not completion time.
        attempted_at: datetime | None = callback.last_invoke_time
        if ran and attempted_at is not None:
            self._last_invoke_cache.record(key, attempted_at)
        self._track_deferred(callback)

    def _track_deferred(self, callback: Any) -> None:
        if (
            isinstance(callback, DeferringCallbackProtocol)
            and callback.has_deferred_invoke
            and callback not in self._deferring
        ):
            self._deferring.append(callback)

    @property
    def has_deferred_invoke(self) -> bool:
        """Return ``True`` while any callback run by this orchestrator has a deferred run."""
        return any(callback.has_deferred_invoke for callback in self._deferring)

    def pending_deferrals(self) -> set[asyncio.Task[Any]]:
        """Return deferred callback runs that are executing right now."""
        self._deferring = [c for c in self._deferring if c.has_deferred_invoke]
        return {task for callback in self._deferring for task in callback.pending}

    def cancel_deferred(self) -> None:
        """Disarm deferred callback runs that have not started yet."""
        for callback in self._deferring:
            callback.cancel_deferred()
        self._deferring = [c for c in self._deferring if c.has_deferred_invoke]

    def dispose(self) -> None:
        """Disarm pending deferred runs and forget the recorded last invoke times."""
        self.cancel_deferred()
        self._last_invoke_cache.clear()
