"""Validation of timer intervals accepted by hosted services and delayed callbacks."""

from __future__ import annotations

__all__ = ["MAX_DURATION", "ensure_non_negative", "ensure_positive", "to_timedelta"]

from datetime import timedelta
from typing import Final

from hosted.errors import HostedConfigError

MAX_DURATION: Final[timedelta] = timedelta(milliseconds=2**31 - 1)
"""Exclusive upper bound for any interval; the largest signed 32-bit millisecond count."""


def to_timedelta(value: timedelta | float, name: str) -> timedelta:
    """Normalise *value* to ``timedelta``; plain numbers are treated as seconds.

    :param value: Interval as ``timedelta`` or a number of seconds.
    :param name: Argument name reported in error messages.
    :raises HostedConfigError: If *value* is neither a number nor a ``timedelta``.
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        msg = f"The argument {name} must be a timedelta or a number of seconds, got {value!r}"
        raise HostedConfigError(msg)
    return timedelta(seconds=value)


def ensure_positive(value: timedelta | float, name: str) -> timedelta:
    """Return *value* as ``timedelta`` if it is strictly positive and representable.

    :raises HostedConfigError: If *value* is zero, negative or too large.
    """
    interval = to_timedelta(value, name)
    if interval <= timedelta(0):
        msg = f"The argument {name} must be a positive value!"
        raise HostedConfigError(msg)
    return _ensure_not_too_large(interval, name)


def ensure_non_negative(value: timedelta | float, name: str) -> timedelta:
    """Return *value* as ``timedelta`` if it is zero or positive and representable.

    :raises HostedConfigError: If *value* is negative or too large.
    """
    interval = to_timedelta(value, name)
    if interval < timedelta(0):
        msg = f"The argument {name} must be a non negative value!"
        raise HostedConfigError(msg)
    return _ensure_not_too_large(interval, name)


def _ensure_not_too_large(interval: timedelta, name: str) -> timedelta:
    if interval >= MAX_DURATION:
        msg = f"The argument {name} is too large!"
        raise HostedConfigError(msg)
    return interval
