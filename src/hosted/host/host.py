"""Host registering hosted services and driving their lifecycle."""

from __future__ import annotations

__all__ = ["Host"]

import asyncio
from typing import TYPE_CHECKING, Any

from hosted.common import ServiceLifetime
from hosted.context import initialize_provider, initialize_settings
from hosted.durations import ensure_non_negative, ensure_positive
from hosted.logging import WithLogger
from hosted.service.factory import (
    GenericHostedServiceFactory,
    HostedServiceFactory,
    OneTimedHostedServiceFactory,
    TimedHostedServiceFactory,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import timedelta

    from typing_extensions import Unpack

    from hosted.provider.provider import CallbackProviderProtocol
    from hosted.service.base import AbstractHostedService
    from hosted.settings import HostedSettingsKwargs


class Host(WithLogger):
    """Register hosted services and start, stop and dispose them together.

    Example::

        host = Host()

        @host.register(ServiceLifetime.Scoped)
        class Cleanup(DelayedTimedCallback):
            def __init__(self) -> None:
                super().__init__(timedelta(minutes=5))

            async def _invoke(self, stopping_token: CancellationToken) -> None:
                ...

        host.add_timed_hosted_service(due_time=0, period=timedelta(seconds=30))
        host.run()
    """

    def __init__(
        self,
        provider: CallbackProviderProtocol | None = None,
        **settings: Unpack[HostedSettingsKwargs],
    ) -> None:
        """Initialize the host with the given settings and callback provider."""
        self._settings = initialize_settings(**settings)
        self._provider = provider or initialize_provider(self._settings)
        self._factories: list[HostedServiceFactory[Any]] = []
        self._services: list[AbstractHostedService] = []
        self._stop_requested: asyncio.Event | None = None

    @property
    def provider(self) -> CallbackProviderProtocol:
        """Return the provider resolving callbacks."""
        return self._provider

    @property
    def services(self) -> list[AbstractHostedService]:
        """Return services built by :meth:`start`, in registration order."""
        return list(self._services)

    @property
    def is_running(self) -> bool:
        """Return ``True`` while any service is running."""
        return any(service.is_running for service in self._services)

    def register(
        self, lifetime: ServiceLifetime = ServiceLifetime.Singleton
    ) -> Callable[[type], type]:
        """Return a class decorator registering a callback in the provider with *lifetime*."""
        return self._provider.register(lifetime)

    def add_hosted_service(self, factory: HostedServiceFactory[Any]) -> None:
        """Register *factory*; its service is built when the host starts."""
        self._factories.append(factory)

    def add_one_timed_hosted_service(
        self,
        delay: timedelta | float,
        service_cls: type[AbstractHostedService] | None = None,
    ) -> None:
        """Register a service running once after *delay*.

        Without *service_cls* the default service runs every one-timed callback of the provider;
        otherwise *service_cls* is instantiated with *delay*.

        :raises HostedConfigError: If *delay* is not positive or too large.
        """
        delay = ensure_positive(delay, "delay")
        if service_cls is None:
            self.add_hosted_service(
                OneTimedHostedServiceFactory(delay, diagnostic=self._settings.diagnostic)
            )
        else:
            self.add_hosted_service(GenericHostedServiceFactory(service_cls, delay))

    def add_timed_hosted_service(
        self,
        due_time: timedelta | float,
        period: timedelta | float,
        service_cls: type[AbstractHostedService] | None = None,
    ) -> None:
        """Register a service running after *due_time* and then every *period*.

        Without *service_cls* the default service runs every timed callback of the provider;
        otherwise *service_cls* is instantiated with *due_time* and *period*.

        :raises HostedConfigError: If either interval is out of range.
        """
        due_time = ensure_non_negative(due_time, "due_time")
        period = ensure_positive(period, "period")
        if service_cls is None:
            self.add_hosted_service(
                TimedHostedServiceFactory(
                    due_time,
                    period,
                    overlap_behavior=self._settings.overlap_behavior,
                    diagnostic=self._settings.diagnostic,
                )
            )
        else:
            self.add_hosted_service(GenericHostedServiceFactory(service_cls, due_time, period))

    async def start(self) -> None:
        """Build every registered service and start them in registration order."""
        for factory in self._factories:
            service = factory.create(self._provider)
            service.stop_timeout = self._settings.stop_timeout
            self._services.append(service)
            await service.start()
        self._factories.clear()
        self._logger.info("Host started %d hosted service(s)", len(self._services))

    async def stop(self, timeout: float | None = None) -> None:
        """Stop services in reverse registration order.

        :param timeout: Bound in seconds for each service; defaults to ``stop_timeout``.
        """
        for service in reversed(self._services):
            await service.stop(timeout)
        self._logger.info("Host stopped")

    def dispose(self) -> None:
        """Dispose every service, then the provider."""
        for service in reversed(self._services):
            service.dispose()
        self._provider.dispose()

    def request_stop(self) -> None:
        """Ask :meth:`run_async` to stop the host."""
        if self._stop_requested is not None:
            self._stop_requested.set()

    async def run_async(self, stop_event: asyncio.Event | None = None) -> None:
        """Start the host, wait until *stop_event* is set, then stop and dispose it."""
        self._stop_requested = stop_event or asyncio.Event()
        await self.start()
        try:
            await self._stop_requested.wait()
        finally:
            await self.stop()
            self.dispose()

    def run(self) -> None:
        """Run the host in a new event loop until :meth:`request_stop` or ``KeyboardInterrupt``."""
        try:
            asyncio.run(self.run_async())
        except KeyboardInterrupt:
            self._logger.info("Host interrupted")
