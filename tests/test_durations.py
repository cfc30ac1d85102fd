"""Tests for interval validation."""

from __future__ import annotations

from datetime import timedelta

import pytest

from hosted.durations import MAX_DURATION, ensure_non_negative, ensure_positive, to_timedelta
from hosted.errors import HostedConfigError


def test_numbers_are_seconds() -> None:
    """Plain ints and floats should be read as seconds."""
    assert to_timedelta(2, "delay") == timedelta(seconds=2)
    assert to_timedelta(0.25, "delay") == timedelta(milliseconds=250)


@pytest.mark.parametrize("value", [True, "10", None])
def test_to_timedelta_rejects_other_types(value: object) -> None:
    """Booleans, strings and None are not intervals."""
    with pytest.raises(HostedConfigError, match="delay"):
        to_timedelta(value, "delay")  # type: ignore[arg-type]


@pytest.mark.parametrize("value", [timedelta(0), 0, timedelta(seconds=-1), -0.5])
def test_ensure_positive_rejects_zero_and_negative(value: timedelta | float) -> None:
    """Zero is rejected rather than treated as "fire immediately"."""
    with pytest.raises(HostedConfigError, match="must be a positive value"):
        ensure_positive(value, "delay")


def test_ensure_positive_rejects_too_large() -> None:
    """Intervals at or beyond the representable bound are rejected."""
    with pytest.raises(HostedConfigError, match="period is too large"):
        ensure_positive(MAX_DURATION, "period")
    assert ensure_positive(MAX_DURATION - timedelta(milliseconds=1), "period") < MAX_DURATION


def test_ensure_non_negative_accepts_zero() -> None:
    """Due time may be zero."""
    assert ensure_non_negative(0, "due_time") == timedelta(0)


def test_ensure_non_negative_rejects_negative_and_too_large() -> None:
    """Negative or unrepresentable due times are configuration errors."""
    with pytest.raises(HostedConfigError, match="non negative"):
        ensure_non_negative(-1, "due_time")
    with pytest.raises(HostedConfigError, match="too large"):
        ensure_non_negative(MAX_DURATION + timedelta(days=1), "due_time")


def test_config_error_is_value_error() -> None:
    """Configuration errors can be caught as ValueError by callers."""
    with pytest.raises(ValueError):
        ensure_positive(0, "delay")
