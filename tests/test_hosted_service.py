"""Tests for the lifecycle engine and the one-timed and timed schedulers."""

from __future__ import annotations

import asyncio
from datetime import timedelta
import logging

import pytest

from hosted.cancellation import CancellationToken
from hosted.common import ServiceState
from hosted.errors import HostedConfigError, HostedServiceDisposedError
from hosted.service.base import AbstractHostedService
from hosted.service.one_timed import OneTimedHostedService
from hosted.service.timed import TimedHostedService


class CountingOneTimed(OneTimedHostedService):
    """One-timed service counting its runs."""

    def __init__(self, delay: timedelta | float) -> None:
        super().__init__(delay)
        self.runs = 0

    async def _on_timed_background(self, stopping_token: CancellationToken) -> None:
        self.runs += 1


class CountingTimed(TimedHostedService):
    """Timed service recording tick overlap."""

    def __init__(self, due_time: timedelta | float, period: timedelta | float, work: float = 0) -> None:
        super().__init__(due_time, period)
        self.ticks = 0
        self.work = work

    async def _on_work(self, stopping_token: CancellationToken) -> None:
        self.ticks += 1
        await asyncio.sleep(self.work)


class StubbornService(AbstractHostedService):
    """Service ignoring its cancellation token."""

    async def _on_background(self, stopping_token: CancellationToken) -> None:
        await asyncio.sleep(10)


class ImmediateFailure(AbstractHostedService):
    """Service whose background work fails synchronously."""

    async def _on_background(self, stopping_token: CancellationToken) -> None:
        msg = "failed at start"
        raise RuntimeError(msg)


def test_one_timed_fires_once_after_delay() -> None:
    """Work runs exactly once and not before the delay."""
    service = CountingOneTimed(timedelta(milliseconds=50))

    async def main() -> None:
        await service.start()
        assert service.state is ServiceState.Running
        await asyncio.sleep(0.02)
        assert service.runs == 0
        await asyncio.sleep(0.1)
        assert service.runs == 1
        await asyncio.sleep(0.1)
        await service.stop()

    asyncio.run(main())
    assert service.runs == 1
    assert service.state is ServiceState.Stopped


def test_one_timed_cancelled_before_delay_never_fires() -> None:
    """Stopping during the delay prevents the work from ever running."""
    service = CountingOneTimed(timedelta(milliseconds=100))

    async def main() -> None:
        await service.start()
        await asyncio.sleep(0.01)
        await service.stop(timeout=1)
        await asyncio.sleep(0.15)

    asyncio.run(main())
    assert service.runs == 0


@pytest.mark.parametrize("delay", [0, timedelta(0), timedelta(days=30)])
def test_one_timed_rejects_invalid_delay(delay: timedelta | float) -> None:
    """Zero and too large delays fail at construction."""
    with pytest.raises(HostedConfigError):
        CountingOneTimed(delay)


def test_timed_rejects_invalid_intervals() -> None:
    """Negative due time and non-positive period fail at construction."""
    with pytest.raises(HostedConfigError):
        CountingTimed(-1, 1)
    with pytest.raises(HostedConfigError):
        CountingTimed(0, 0)
    with pytest.raises(HostedConfigError):
        CountingTimed(0, -1)


def test_timed_ticks_on_period_and_stops() -> None:
    """Ticks follow due time then period; none fire after stop."""
    service = CountingTimed(0, timedelta(milliseconds=30))

    async def main() -> None:
        await service.start()
        await asyncio.sleep(0.1)
        await service.stop()
        ticks = service.ticks
        await asyncio.sleep(0.1)
        assert service.ticks == ticks

    asyncio.run(main())
    assert 3 <= service.ticks <= 5


def test_timed_due_time_delays_first_tick() -> None:
    """No tick happens before the due time."""
    service = CountingTimed(timedelta(milliseconds=80), timedelta(milliseconds=20))

    async def main() -> None:
        await service.start()
        await asyncio.sleep(0.04)
        assert service.ticks == 0
        await asyncio.sleep(0.08)
        assert service.ticks >= 1
        await service.stop()

    asyncio.run(main())


def test_timed_stop_waits_for_in_flight_tick() -> None:
    """Stop returns after the running tick finishes."""
    service = CountingTimed(0, timedelta(milliseconds=10), work=0.05)

    async def main() -> None:
        await service.start()
        await asyncio.sleep(0.005)
        await service.stop(timeout=1)
        assert not service._timer.pending  # noqa: SLF001

    asyncio.run(main())


def test_stop_is_bounded_by_timeout(caplog: pytest.LogCaptureFixture) -> None:
    """Work ignoring cancellation does not block stop beyond the timeout."""
    service = StubbornService()

    async def main() -> float:
        loop = asyncio.get_running_loop()
        await service.start()
        started = loop.time()
        await service.stop(timeout=0.05)
        return loop.time() - started

    with caplog.at_level(logging.WARNING):
        elapsed = asyncio.run(main())

    assert elapsed < 1
    assert "did not stop within timeout" in caplog.text


def test_synchronous_failure_is_raised_from_start() -> None:
    """Background work that fails during start surfaces to the caller."""
    with pytest.raises(RuntimeError, match="failed at start"):
        asyncio.run(ImmediateFailure().start())


def test_stop_without_start_is_noop() -> None:
    """Stopping a service that never started does nothing."""
    service = CountingOneTimed(1)
    asyncio.run(service.stop())
    assert service.state is ServiceState.Created


def test_dispose_is_idempotent_and_terminal() -> None:
    """Dispose can be repeated and a disposed service cannot start."""
    service = CountingTimed(0, 1)

    async def main() -> None:
        await service.start()
        service.dispose()
        service.dispose()
        assert service.state is ServiceState.Disposed
        with pytest.raises(HostedServiceDisposedError):
            await service.start()

    asyncio.run(main())


def test_dispose_cancels_pending_one_timed_work() -> None:
    """Dispose forces cancellation of the delay."""
    service = CountingOneTimed(timedelta(milliseconds=50))

    async def main() -> None:
        await service.start()
        service.dispose()
        await asyncio.sleep(0.1)

    asyncio.run(main())
    assert service.runs == 0


def test_start_after_stop_is_noop() -> None:
    """Once cancellation was requested, start does not schedule new work."""
    service = CountingOneTimed(timedelta(milliseconds=10))

    async def main() -> None:
        await service.start()
        await service.stop()
        await service.start()
        await asyncio.sleep(0.05)

    asyncio.run(main())
    assert service.runs == 0
