"""Tab navigation guarded by the urge-surf hold."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable

from pokipomo.focus.models import TimerState, UrgeSurfMode, UrgeSurfPhase
from pokipomo.focus.timer import FocusTimer

logger = logging.getLogger(__name__)


class Tab(str, Enum):
    """Top-level screens of the app."""

    WELCOME = "welcome"
    ONBOARDING = "onboarding"
    FOCUS = "focus"
    PROGRESS = "progress"


class NavigationCoordinator:
    """Holds back navigation away from a running session until urge-surf allows it.

    Leaving the focus tab while the timer runs parks the destination and
    begins the hold. When the timer reports `allow_exit` the parked
    destination is applied and the cycle is completed; when it returns to
    `inactive` the destination is dropped.
    """

    def __init__(self, timer: FocusTimer, selected_tab: Tab = Tab.FOCUS):
        self.timer = timer
        self._selected_tab = selected_tab
        self._pending_tab: Tab | None = None

        self.on_tab_change: Callable[[Tab], None] | None = None

        timer.on_urge_surf_change = self._handle_urge_surf_change

    @property
    def selected_tab(self) -> Tab:
        return self._selected_tab

    @property
    def pending_tab(self) -> Tab | None:
        return self._pending_tab

    def select_tab(self, tab: Tab) -> bool:
        """Switch tabs. Returns False when the switch is deferred behind the hold."""
        if (
            self._selected_tab == Tab.FOCUS
            and tab != Tab.FOCUS
            and self.timer.state == TimerState.RUNNING
        ):
            self._pending_tab = tab
            self.timer.begin_urge_surf_hold()
            logger.debug(f"Navigation to {tab.value} waiting on urge-surf")
            return False

        self._set_tab(tab)
        return True

    def _handle_urge_surf_change(self, mode: UrgeSurfMode) -> None:
        if mode.phase == UrgeSurfPhase.ALLOW_EXIT:
            destination = self._pending_tab
            self._pending_tab = None
            if destination is not None:
                self._set_tab(destination)
            self.timer.complete_urge_surf_cycle()
        elif mode.phase == UrgeSurfPhase.INACTIVE:
            self._pending_tab = None

    def _set_tab(self, tab: Tab) -> None:
        if tab == self._selected_tab:
            return
        self._selected_tab = tab
        logger.info(f"Navigated to {tab.value}")
        if self.on_tab_change:
            try:
                self.on_tab_change(tab)
            except Exception as e:
                logger.error(f"Error in on_tab_change callback: {e}")
