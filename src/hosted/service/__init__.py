"""Hosted services: lifecycle engine, one-timed and timed schedulers, defaults and factories."""

from .base import AbstractHostedService, HostedServiceProtocol
from .defaults import DefaultOneTimedHostedService, DefaultTimedHostedService
from .factory import (
    GenericHostedServiceFactory,
    HostedServiceFactory,
    OneTimedHostedServiceFactory,
    TimedHostedServiceFactory,
)
from .one_timed import OneTimedHostedService
from .timed import TimedHostedService

__all__ = [
    "AbstractHostedService",
    "DefaultOneTimedHostedService",
    "DefaultTimedHostedService",
    "GenericHostedServiceFactory",
    "HostedServiceFactory",
    "HostedServiceProtocol",
    "OneTimedHostedService",
    "OneTimedHostedServiceFactory",
    "TimedHostedService",
    "TimedHostedServiceFactory",
]
