"""Hosted service that runs its work once, after a fixed delay."""

from __future__ import annotations

__all__ = ["OneTimedHostedService"]

from abc import abstractmethod
from typing import TYPE_CHECKING

from hosted.durations import ensure_positive
from hosted.service.base import AbstractHostedService

if TYPE_CHECKING:
    from datetime import timedelta

    from hosted.cancellation import CancellationToken


class OneTimedHostedService(AbstractHostedService):
    """Wait *delay* once after start, then run :meth:`_on_timed_background` exactly one time.

    Subclass it and implement :meth:`_on_timed_background`::

        class WarmUpCache(OneTimedHostedService):
            def __init__(self) -> None:
                super().__init__(timedelta(seconds=10))

            async def _on_timed_background(self, stopping_token: CancellationToken) -> None:
                ...

    If the service is stopped before the delay elapses the work never runs.
    """

    def __init__(self, delay: timedelta | float) -> None:
        """Initialise the service.

        :param delay: Time to wait after start, as ``timedelta`` or seconds.
        :raises HostedConfigError: If *delay* is not positive or too large.
        """
        super().__init__()
        self._delay = ensure_positive(delay, "delay")

    @property
    def delay(self) -> timedelta:
        """Return the validated delay."""
        return self._delay

    async def _on_background(self, stopping_token: CancellationToken) -> None:
        if await stopping_token.sleep(self._delay):
            self._logger.debug("%s cancelled before its delay elapsed", type(self).__name__)
            return
        await self._on_timed_background(stopping_token)

    @abstractmethod
    async def _on_timed_background(self, stopping_token: CancellationToken) -> None:
        """Run the one-time work once the delay has elapsed."""
