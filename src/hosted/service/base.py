"""Lifecycle engine shared by every hosted service."""

from __future__ import annotations

__all__ = ["AbstractHostedService", "HostedServiceProtocol"]

from abc import ABC, abstractmethod
import asyncio
import contextlib
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from hosted.cancellation import CancellationSource
from hosted.common import DEFAULT_STOP_TIMEOUT, ServiceState
from hosted.errors import CancellationSourceDisposedError, HostedServiceDisposedError
from hosted.logging import WithLogger

if TYPE_CHECKING:
    from hosted.cancellation import CancellationToken


@runtime_checkable
class HostedServiceProtocol(Protocol):
    """Interface the host uses to drive a background service."""

    @property
    def state(self) -> ServiceState:
        """Return the current lifecycle state."""

    async def start(self) -> None:
        """Begin the background execution."""

    async def stop(self, timeout: float | None = None) -> None:
        """Request cancellation and wait for in-flight work, bounded by *timeout* seconds."""

    def dispose(self) -> None:
        """Release resources held by the service."""


class AbstractHostedService(HostedServiceProtocol, WithLogger, ABC):
    """Manage start, stop and dispose around a single in-flight background task.

    Subclasses implement :meth:`_on_background`. The coroutine receives a cancellation token
    that is signalled by :meth:`stop` and :meth:`dispose`; it is expected to observe it.
    """

    def __init__(self) -> None:
        """Initialise the service in the ``Created`` state."""
        self._cancellation = CancellationSource()
        self._executing_task: asyncio.Task[None] | None = None
        self._state = ServiceState.Created
        self.stop_timeout: float | None = DEFAULT_STOP_TIMEOUT

    @property
    def state(self) -> ServiceState:
        """Return the current lifecycle state."""
        return self._state

    @property
    def is_running(self) -> bool:
        """Return ``True`` while the service is started and not asked to stop."""
        return self._state is ServiceState.Running

    @abstractmethod
    async def _on_background(self, stopping_token: CancellationToken) -> None:
        """Run the background logic until it completes or *stopping_token* is cancelled."""

    def _pending_work(self) -> set[asyncio.Task[Any]]:
        """Return extra tasks :meth:`stop` has to wait for besides the background task."""
        return set()

    def _on_dispose(self) -> None:
        """Release subclass resources; called first by :meth:`dispose`."""

    async def start(self) -> None:
        """Start the background execution.

        Returns once the execution either completed synchronously or is underway. A failure of
        an execution that completes during start is raised here.

        :raises HostedServiceDisposedError: If the service was disposed.
        """
        if self._state is ServiceState.Disposed:
            msg = f"{type(self).__name__} is disposed and cannot be started"
            raise HostedServiceDisposedError(msg)
        if self._cancellation.is_cancellation_requested:
            return

        task = asyncio.ensure_future(self._on_background(self._cancellation.token))
        self._executing_task = task
        self._state = ServiceState.Running
        self._logger.info("%s started", type(self).__name__)

        # Give the background coroutine its first step.
        await asyncio.sleep(0)
        if task.done():
            await task
        else:
            task.add_done_callback(self._report_failure)

    async def stop(self, timeout: float | None = None) -> None:
        """Signal cancellation and wait for in-flight work.

        :param timeout: Upper bound in seconds; ``None`` falls back to :attr:`stop_timeout`.
            The call returns when the bound is reached even if the work did not cooperate.
        """
        if self._executing_task is None:
            return

        executing = self._executing_task
        self._executing_task = None
        if self._state is ServiceState.Running:
            self._state = ServiceState.StopRequested

        try:
            self._cancellation.cancel()
        except CancellationSourceDisposedError:
            pass
        finally:
            wait_for = {executing, *self._pending_work()}
            _, not_done = await asyncio.wait(
                wait_for, timeout=self.stop_timeout if timeout is None else timeout
            )
            if not_done:
                self._logger.warning(
                    "%s did not stop within timeout; %d task(s) still running",
                    type(self).__name__,
                    len(not_done),
                )

        if self._state is ServiceState.StopRequested:
            self._state = ServiceState.Stopped
        self._logger.info("%s stopped", type(self).__name__)

    def dispose(self) -> None:
        """Release subclass resources, force cancellation and forget the background task."""
        self._on_dispose()
        with contextlib.suppress(CancellationSourceDisposedError):
            self._cancellation.cancel()
        self._cancellation.dispose()
        self._executing_task = None
        self._state = ServiceState.Disposed

    def _report_failure(self, task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._logger.error("%s background execution failed", type(self).__name__, exc_info=exc)
