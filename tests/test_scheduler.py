"""Tests for the asyncio-backed scheduler."""

import asyncio

from pokipomo.core.config import TimerConfig
from pokipomo.focus.models import TimerState
from pokipomo.focus.scheduler import AsyncioScheduler
from pokipomo.focus.timer import FocusTimer


async def test_repeating_job_runs_until_cancelled():
    scheduler = AsyncioScheduler()
    calls = []
    scheduler.schedule_repeating("job", 0.01, lambda: calls.append(1))
    await asyncio.sleep(0.055)
    scheduler.cancel("job")
    count = len(calls)
    assert count >= 2
    assert not scheduler.is_scheduled("job")

    await asyncio.sleep(0.03)
    assert len(calls) == count


async def test_once_job_runs_once():
    scheduler = AsyncioScheduler()
    calls = []
    scheduler.schedule_once("job", 0.01, lambda: calls.append(1))
    assert scheduler.is_scheduled("job")
    await asyncio.sleep(0.05)
    assert calls == [1]
    assert not scheduler.is_scheduled("job")


async def test_rescheduling_a_key_replaces_the_job():
    scheduler = AsyncioScheduler()
    calls = []
    scheduler.schedule_once("job", 0.01, lambda: calls.append("old"))
    scheduler.schedule_once("job", 0.02, lambda: calls.append("new"))
    await asyncio.sleep(0.05)
    assert calls == ["new"]


async def test_cancel_all():
    scheduler = AsyncioScheduler()
    calls = []
    scheduler.schedule_once("a", 0.01, lambda: calls.append("a"))
    scheduler.schedule_repeating("b", 0.01, lambda: calls.append("b"))
    scheduler.cancel_all()
    await asyncio.sleep(0.03)
    assert calls == []


async def test_failing_callback_keeps_repeating():
    scheduler = AsyncioScheduler()
    calls = []

    def flaky():
        calls.append(1)
        raise RuntimeError("boom")

    scheduler.schedule_repeating("job", 0.01, flaky)
    await asyncio.sleep(0.045)
    scheduler.cancel_all()
    assert len(calls) >= 2


async def test_job_can_cancel_itself():
    scheduler = AsyncioScheduler()
    calls = []

    def once_then_stop():
        calls.append(1)
        scheduler.cancel("job")

    scheduler.schedule_repeating("job", 0.01, once_then_stop)
    await asyncio.sleep(0.05)
    assert calls == [1]


async def test_timer_runs_on_event_loop(monkeypatch):
    """A one-minute session with one-millisecond seconds completes on the loop."""
    real_sleep = asyncio.sleep

    async def fast_sleep(delay, *args, **kwargs):
        await real_sleep(delay / 1000, *args, **kwargs)

    monkeypatch.setattr("pokipomo.focus.scheduler.asyncio.sleep", fast_sleep)

    timer = FocusTimer(TimerConfig(duration_options=[1], default_minutes=1))
    done = asyncio.Event()
    timer.on_session_complete = lambda session: done.set()
    timer.start()
    await asyncio.wait_for(done.wait(), timeout=5)

    assert timer.state == TimerState.COMPLETED
    assert timer.sessions[0].duration == 60
    timer.close()
