"""Contracts implemented by callbacks executed from hosted services.

A default hosted service resolves two sets of callbacks on every run:

* long-lived callbacks (singleton or transient registrations) that subclass
  :class:`OneTimedCallback` or :class:`TimedCallback`;
* scoped callbacks (scoped registrations) that subclass :class:`OneTimedScopedCallback` or
  :class:`TimedScopedCallback`, created fresh for every run.
"""

from __future__ import annotations

__all__ = [
    "CallbackProtocol",
    "HostedCallback",
    "HostedScopedCallback",
    "LastInvokeSourceProtocol",
    "OneTimedCallback",
    "OneTimedScopedCallback",
    "TimedCallback",
    "TimedScopedCallback",
]

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import datetime

    from hosted.cancellation import CancellationToken


@runtime_checkable
class CallbackProtocol(Protocol):
    """Anything a hosted service can invoke."""

    async def invoke(self, stopping_token: CancellationToken) -> None:
        """Run the callback action."""


@runtime_checkable
class LastInvokeSourceProtocol(Protocol):
    """Hosted service exposing when it last ran its callbacks."""

    def get_last_invoke_time(self) -> datetime:
        """Return the UTC time of the last background execution."""


class HostedCallback(ABC):
    """Base for long-lived callbacks."""

    @abstractmethod
    async def invoke(self, stopping_token: CancellationToken) -> None:
        """Run the callback action."""


class HostedScopedCallback(ABC):
    """Base for callbacks resolved from a fresh scope on every run."""

    @abstractmethod
    async def invoke(self, stopping_token: CancellationToken) -> None:
        """Run the callback action."""


class OneTimedCallback(HostedCallback):
    """Long-lived callback executed by the default one-timed hosted service."""


class OneTimedScopedCallback(HostedScopedCallback):
    """Scoped callback executed by the default one-timed hosted service."""


class TimedCallback(HostedCallback):
    """Long-lived callback executed on every tick of the default timed hosted service."""


class TimedScopedCallback(HostedScopedCallback):
    """Scoped callback executed on every tick of the default timed hosted service."""
