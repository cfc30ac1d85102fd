"""Public interface for the ``hosted`` background services package."""

from __future__ import annotations

from .callbacks import (
    DelayedOneTimedCallback,
    DelayedTimedCallback,
    OneTimedCallback,
    OneTimedScopedCallback,
    TimedCallback,
    TimedScopedCallback,
)
from .cancellation import CancellationSource, CancellationToken
from .common import OverlapBehaviorEnum, ServiceLifetime, ServiceState
from .host import Host
from .provider import InMemoryCallbackProvider
from .service import (
    DefaultOneTimedHostedService,
    DefaultTimedHostedService,
    OneTimedHostedService,
    TimedHostedService,
)

__all__ = [
    "CancellationSource",
    "CancellationToken",
    "DefaultOneTimedHostedService",
    "DefaultTimedHostedService",
    "DelayedOneTimedCallback",
    "DelayedTimedCallback",
    "Host",
    "InMemoryCallbackProvider",
    "OneTimedCallback",
    "OneTimedHostedService",
    "OneTimedScopedCallback",
    "OverlapBehaviorEnum",
    "ServiceLifetime",
    "ServiceState",
    "TimedCallback",
    "TimedHostedService",
    "TimedScopedCallback",
]
