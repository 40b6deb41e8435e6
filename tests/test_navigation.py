"""Tests for focus/navigation.py: leaving a running session via urge-surf."""

import pytest

from pokipomo.focus.models import UrgeSurfPhase
from pokipomo.focus.navigation import NavigationCoordinator, Tab


@pytest.fixture
def navigation(timer):
    return NavigationCoordinator(timer)


def test_free_navigation_when_not_running(navigation):
    assert navigation.select_tab(Tab.PROGRESS) is True
    assert navigation.selected_tab == Tab.PROGRESS
    assert navigation.select_tab(Tab.FOCUS) is True


def test_leaving_running_session_starts_hold(navigation, timer):
    timer.start()
    assert navigation.select_tab(Tab.PROGRESS) is False
    assert navigation.selected_tab == Tab.FOCUS
    assert navigation.pending_tab == Tab.PROGRESS
    assert timer.urge_surf_mode.phase == UrgeSurfPhase.HOLDING


def test_hold_expiry_completes_navigation(navigation, timer, scheduler):
    changes = []
    navigation.on_tab_change = changes.append
    timer.start()
    navigation.select_tab(Tab.PROGRESS)
    scheduler.advance(10)

    assert navigation.selected_tab == Tab.PROGRESS
    assert navigation.pending_tab is None
    assert changes == [Tab.PROGRESS]
    assert timer.urge_surf_mode.phase == UrgeSurfPhase.INACTIVE
    assert timer.urge_surf_countdown == 10


def test_exit_anyway(navigation, timer):
    timer.start()
    navigation.select_tab(Tab.WELCOME)
    timer.allow_exit_during_urge_surf()
    assert navigation.selected_tab == Tab.WELCOME
    assert timer.urge_surf_mode.phase == UrgeSurfPhase.INACTIVE


def test_staying_drops_pending_tab(navigation, timer, scheduler):
    timer.start()
    navigation.select_tab(Tab.PROGRESS)
    scheduler.advance(3)
    timer.complete_urge_surf_cycle()

    assert navigation.selected_tab == Tab.FOCUS
    assert navigation.pending_tab is None
    scheduler.advance(20)
    assert navigation.selected_tab == Tab.FOCUS


def test_allow_exit_without_target_resets_cycle(navigation, timer):
    timer.start()
    timer.begin_urge_surf_hold()
    timer.allow_exit_during_urge_surf()
    assert navigation.selected_tab == Tab.FOCUS
    assert timer.urge_surf_mode.phase == UrgeSurfPhase.INACTIVE


def test_timer_keeps_running_after_leaving(navigation, timer, scheduler):
    timer.start()
    navigation.select_tab(Tab.PROGRESS)
    timer.allow_exit_during_urge_surf()
    scheduler.advance(5)
    assert timer.remaining_time == 1495


def test_listeners_see_allow_exit_before_hand_off(navigation, timer, scheduler):
    phases = []
    timer.subscribe(lambda snapshot: phases.append(snapshot.urge_surf_mode.phase))
    timer.start()
    navigation.select_tab(Tab.PROGRESS)
    scheduler.advance(10)

    assert UrgeSurfPhase.ALLOW_EXIT in phases
    assert phases.index(UrgeSurfPhase.ALLOW_EXIT) < len(phases) - 1
    assert phases[-1] == UrgeSurfPhase.INACTIVE
    assert navigation.selected_tab == Tab.PROGRESS
