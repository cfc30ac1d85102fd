"""Callback contracts and delay-gated callback bases."""

from .callback import (
    CallbackProtocol,
    HostedCallback,
    HostedScopedCallback,
    LastInvokeSourceProtocol,
    OneTimedCallback,
    OneTimedScopedCallback,
    TimedCallback,
    TimedScopedCallback,
)
from .delayed import (
    AbstractDelayedCallback,
    DeferringCallbackProtocol,
    DelayedOneTimedCallback,
    DelayedTimedCallback,
    DelayGatedCallbackProtocol,
)

__all__ = [
    "AbstractDelayedCallback",
    "CallbackProtocol",
    "DeferringCallbackProtocol",
    "DelayGatedCallbackProtocol",
    "DelayedOneTimedCallback",
    "DelayedTimedCallback",
    "HostedCallback",
    "HostedScopedCallback",
    "LastInvokeSourceProtocol",
    "OneTimedCallback",
    "OneTimedScopedCallback",
    "TimedCallback",
    "TimedScopedCallback",
]
