"""Some common constants and enums which may be used in any modules."""

from __future__ import annotations

from typing import Final

from hosted.py_compatibility import StrEnum

HOSTED_ENV_PREFIX: Final[str] = "HOSTED"
DEFAULT_STOP_TIMEOUT: Final[float] = 5.0


class ProviderEnum(StrEnum):
    """Enum of known callback providers."""

    InMemoryCallbackProvider = "InMemoryCallbackProvider"


class ServiceLifetime(StrEnum):
    """Lifetime of a callback registration inside a provider."""

    Singleton = "Singleton"
    """One instance shared for the whole provider lifetime."""
    Transient = "Transient"
    """A new instance every time the callback is resolved."""
    Scoped = "Scoped"
    """A new instance per scope; resolved fresh on every hosted service tick."""


class ServiceState(StrEnum):
    """Lifecycle states of a hosted service."""

    Created = "Created"
    Running = "Running"
    StopRequested = "StopRequested"
    Stopped = "Stopped"
    Disposed = "Disposed"


class OverlapBehaviorEnum(StrEnum):
    """What a timed service does with a tick while the previous one is still running."""

    Queue = "Queue"
    """Wait for the running tick to finish, then run."""
    Skip = "Skip"
    """Drop the tick."""
