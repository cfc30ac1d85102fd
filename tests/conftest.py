"""Shared fixtures for the ``hosted`` test suite."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest


class FakeClock:
    """Controllable replacement for :func:`hosted.utils.utc_now`."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock(monkeypatch: pytest.MonkeyPatch) -> FakeClock:
    """Freeze UTC time in every module that reads it; advance it explicitly."""
    fake = FakeClock(datetime(2024, 1, 1, tzinfo=timezone.utc))
    for module in (
        "hosted.callbacks.delayed",
        "hosted.service.defaults",
    ):
        monkeypatch.setattr(f"{module}.utc_now", fake)
    return fake
