"""Module containing hosted-service related errors."""


class HostedError(Exception):
    """Base class for all errors raised by ``hosted``."""


class HostedConfigError(HostedError, ValueError):
    """Raised when a configuration value (duration, setting, env var) is invalid."""


class ScopeUnavailableError(HostedError, RuntimeError):
    """Raised when a callback scope cannot be created because its provider is torn down."""


class CancellationSourceDisposedError(HostedError, RuntimeError):
    """Raised when a disposed cancellation source is asked to cancel."""


class TimerDisposedError(HostedError, RuntimeError):
    """Raised when a disposed timer is re-armed."""


class HostedServiceDisposedError(HostedError, RuntimeError):
    """Raised when a disposed hosted service is started again."""


class HostedApplicationError(HostedError, AssertionError):
    """Raised when a hosted development error occurred.

    Used for future-proofing of some functions to ensure code is working as expected during the development phase.
    """


class InvalidSpecifiedTypeError(HostedError, TypeError):
    """Raised when a specified type by settings is invalid."""
