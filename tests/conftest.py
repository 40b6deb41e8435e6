"""Shared test fixtures: a hand-driven clock and scheduler."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

import pytest

from pokipomo.core.config import TimerConfig
from pokipomo.focus.models import FocusSession
from pokipomo.focus.timer import FocusTimer


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@dataclass
class _Job:
    callback: Callable[[], None]
    interval: float
    repeating: bool
    due: float


class FakeScheduler:
    """Scheduler that fires jobs as `advance` moves the clock forward."""

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.elapsed = 0.0
        self.jobs: dict[str, _Job] = {}

    def schedule_repeating(self, key: str, interval: float, callback: Callable[[], None]) -> None:
        self.jobs[key] = _Job(callback, interval, True, self.elapsed + interval)

    def schedule_once(self, key: str, delay: float, callback: Callable[[], None]) -> None:
        self.jobs[key] = _Job(callback, delay, False, self.elapsed + delay)

    def cancel(self, key: str) -> None:
        self.jobs.pop(key, None)

    def cancel_all(self) -> None:
        self.jobs.clear()

    def is_scheduled(self, key: str) -> bool:
        return key in self.jobs

    def advance(self, seconds: float) -> None:
        target = self.elapsed + seconds
        while True:
            due = [(job.due, key) for key, job in self.jobs.items() if job.due <= target]
            if not due:
                break
            when, key = min(due)
            self.clock.advance(when - self.elapsed)
            self.elapsed = when
            job = self.jobs[key]
            if job.repeating:
                job.due += job.interval
            else:
                del self.jobs[key]
            job.callback()
        self.clock.advance(target - self.elapsed)
        self.elapsed = target


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 3, 2, 9, 0, 0))


@pytest.fixture
def scheduler(clock: FakeClock) -> FakeScheduler:
    return FakeScheduler(clock)


@pytest.fixture
def timer(clock: FakeClock, scheduler: FakeScheduler) -> FocusTimer:
    """Timer with the default 15/25/45 options and 25 minutes selected."""
    t = FocusTimer(TimerConfig(), clock=clock, scheduler=scheduler)
    yield t
    t.close()


def make_session(ended_at: datetime, minutes: int = 25, **kwargs) -> FocusSession:
    return FocusSession(
        duration=minutes * 60,
        started_at=ended_at - timedelta(minutes=minutes),
        ended_at=ended_at,
        **kwargs,
    )
