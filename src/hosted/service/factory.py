"""Factories building hosted services from a callback provider."""

from __future__ import annotations

__all__ = [
    "GenericHostedServiceFactory",
    "HostedServiceFactory",
    "OneTimedHostedServiceFactory",
    "TimedHostedServiceFactory",
]

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from hosted.callbacks.callback import OneTimedCallback, TimedCallback
from hosted.common import OverlapBehaviorEnum
from hosted.durations import ensure_non_negative, ensure_positive
from hosted.service.base import AbstractHostedService
from hosted.service.defaults import DefaultOneTimedHostedService, DefaultTimedHostedService

if TYPE_CHECKING:
    from datetime import timedelta

    from hosted.provider.provider import CallbackProviderProtocol

THostedService = TypeVar("THostedService", bound=AbstractHostedService)


class HostedServiceFactory(ABC, Generic[THostedService]):
    """Build a hosted service once the host has its provider."""

    @abstractmethod
    def create(self, provider: CallbackProviderProtocol) -> THostedService:
        """Create the hosted service using *provider* to resolve callbacks."""


class OneTimedHostedServiceFactory(HostedServiceFactory[DefaultOneTimedHostedService]):
    """Factory of :class:`DefaultOneTimedHostedService`.

    The delay is validated here so a misconfigured service is never registered.
    """

    def __init__(self, delay: timedelta | float, *, diagnostic: bool = False) -> None:
        """Store the validated *delay*."""
        self.delay = ensure_positive(delay, "delay")
        self.diagnostic = diagnostic

    def create(self, provider: CallbackProviderProtocol) -> DefaultOneTimedHostedService:
        """Resolve long-lived one-timed callbacks now; scoped ones are resolved per run."""
        return DefaultOneTimedHostedService(
            provider.get_callbacks(OneTimedCallback),
            provider,
            self.delay,
            diagnostic=self.diagnostic,
        )


class TimedHostedServiceFactory(HostedServiceFactory[DefaultTimedHostedService]):
    """Factory of :class:`DefaultTimedHostedService`."""

    def __init__(
        self,
        due_time: timedelta | float,
        period: timedelta | float,
        *,
        overlap_behavior: OverlapBehaviorEnum = OverlapBehaviorEnum.Queue,
        diagnostic: bool = False,
    ) -> None:
        """Store the validated *due_time* and *period*."""
        self.due_time = ensure_non_negative(due_time, "due_time")
        self.period = ensure_positive(period, "period")
        self.overlap_behavior = overlap_behavior
        self.diagnostic = diagnostic

    def create(self, provider: CallbackProviderProtocol) -> DefaultTimedHostedService:
        """Resolve long-lived timed callbacks now; scoped ones are resolved per tick."""
        return DefaultTimedHostedService(
            provider.get_callbacks(TimedCallback),
            provider,
            self.due_time,
            self.period,
            overlap_behavior=self.overlap_behavior,
            diagnostic=self.diagnostic,
        )


class GenericHostedServiceFactory(HostedServiceFactory[THostedService]):
    """Instantiate a user-defined hosted service class with fixed constructor arguments."""

    def __init__(self, service_cls: type[THostedService], *args: Any, **kwargs: Any) -> None:
        """Store *service_cls* and the arguments passed to it on :meth:`create`."""
        if not (isinstance(service_cls, type) and issubclass(service_cls, AbstractHostedService)):
            msg = f"{service_cls!r} is not a subclass of AbstractHostedService"
            raise TypeError(msg)
        self.service_cls = service_cls
        self.args = args
        self.kwargs = kwargs

    def create(self, provider: CallbackProviderProtocol) -> THostedService:  # noqa: ARG002
        """Instantiate the service class; *provider* is not used."""
        return self.service_cls(*self.args, **self.kwargs)
