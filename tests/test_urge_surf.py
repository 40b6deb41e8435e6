"""Tests for the urge-surf hold, alone and through the focus timer."""

from pokipomo.focus.models import TimerState, UrgeSurfMode, UrgeSurfPhase
from pokipomo.focus.timer import TICK_JOB
from pokipomo.focus.urge_surf import COUNTDOWN_JOB, UrgeSurfIntervention


def test_begin_starts_holding(scheduler):
    modes = []
    surf = UrgeSurfIntervention(scheduler, on_change=modes.append)
    assert surf.begin() is True
    assert surf.mode == UrgeSurfMode.holding(10)
    assert surf.countdown == 10
    assert scheduler.is_scheduled(COUNTDOWN_JOB)
    assert modes == [UrgeSurfMode.holding(10)]


def test_countdown_reaches_allow_exit(scheduler):
    modes = []
    surf = UrgeSurfIntervention(scheduler, on_change=modes.append)
    surf.begin()
    scheduler.advance(9)
    assert surf.mode == UrgeSurfMode.holding(1)

    scheduler.advance(1)
    assert surf.mode.phase == UrgeSurfPhase.ALLOW_EXIT
    assert surf.countdown == 0
    assert not scheduler.is_scheduled(COUNTDOWN_JOB)
    assert [m.seconds_remaining for m in modes[:10]] == list(range(10, 0, -1))


def test_begin_only_from_inactive(scheduler):
    surf = UrgeSurfIntervention(scheduler)
    surf.begin()
    scheduler.advance(3)
    assert surf.begin() is False
    assert surf.countdown == 7

    surf.allow_exit()
    assert surf.begin() is False


def test_allow_exit_early(scheduler):
    surf = UrgeSurfIntervention(scheduler)
    surf.begin()
    scheduler.advance(2)
    surf.allow_exit()
    assert surf.mode == UrgeSurfMode.allow_exit()
    assert surf.countdown == 0
    assert not scheduler.is_scheduled(COUNTDOWN_JOB)


def test_complete_cycle_while_holding(scheduler):
    surf = UrgeSurfIntervention(scheduler)
    surf.begin()
    scheduler.advance(4)
    surf.complete_cycle()
    assert surf.mode == UrgeSurfMode.inactive()
    assert surf.countdown == 10
    assert not scheduler.is_scheduled(COUNTDOWN_JOB)


def test_complete_cycle_after_allow_exit(scheduler):
    surf = UrgeSurfIntervention(scheduler)
    surf.begin()
    scheduler.advance(10)
    surf.complete_cycle()
    assert surf.mode.phase == UrgeSurfPhase.INACTIVE
    assert surf.countdown == 10


def test_custom_hold_length(scheduler):
    surf = UrgeSurfIntervention(scheduler, hold_seconds=3)
    surf.begin()
    scheduler.advance(3)
    assert surf.mode.phase == UrgeSurfPhase.ALLOW_EXIT


def test_timer_hold_does_not_touch_session(timer, scheduler):
    timer.start()
    scheduler.advance(60)
    timer.begin_urge_surf_hold()
    scheduler.advance(4)
    timer.complete_urge_surf_cycle()

    assert timer.urge_surf_mode.phase == UrgeSurfPhase.INACTIVE
    assert timer.urge_surf_countdown == 10
    assert timer.state == TimerState.RUNNING
    assert timer.remaining_time == 1500 - 64
    assert scheduler.is_scheduled(TICK_JOB)
    assert timer.sessions == ()


def test_timer_publishes_urge_surf_changes(timer, scheduler):
    seen = []
    timer.on_urge_surf_change = seen.append
    timer.start()
    timer.begin_urge_surf_hold()
    scheduler.advance(10)

    assert seen[0] == UrgeSurfMode.holding(10)
    assert seen[-1] == UrgeSurfMode.allow_exit()
    assert timer.snapshot().urge_surf_countdown == 0
