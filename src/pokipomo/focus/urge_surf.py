"""Urge-surf intervention: a short supportive hold before leaving a session."""

from __future__ import annotations

import logging
from typing import Callable

from pokipomo.focus.models import UrgeSurfMode, UrgeSurfPhase
from pokipomo.focus.scheduler import Scheduler

logger = logging.getLogger(__name__)

COUNTDOWN_JOB = "urge-surf-countdown"


class UrgeSurfIntervention:
    """Countdown state machine guarding exit from a running session.

    It only reports mode changes. Whoever navigates watches for
    `allow_exit`, finishes (or drops) its pending navigation, and calls
    `complete_cycle()` to return to `inactive`.

    Usage:
        surf = UrgeSurfIntervention(scheduler, on_change=print)
        surf.begin()          # holding(10)
        surf.allow_exit()     # user leaves anyway
        surf.complete_cycle() # back to inactive
    """

    def __init__(
        self,
        scheduler: Scheduler,
        hold_seconds: int = 10,
        on_change: Callable[[UrgeSurfMode], None] | None = None,
    ):
        self.hold_seconds = hold_seconds
        self._scheduler = scheduler
        self._on_change = on_change
        self._mode = UrgeSurfMode.inactive()
        self._countdown = hold_seconds
        self._closed = False

    @property
    def mode(self) -> UrgeSurfMode:
        return self._mode

    @property
    def countdown(self) -> int:
        return self._countdown

    def begin(self) -> bool:
        """Start the hold. Only allowed from `inactive`; returns False otherwise."""
        if self._mode.phase != UrgeSurfPhase.INACTIVE:
            logger.debug(f"Urge-surf hold ignored in {self._mode.phase.value}")
            return False

        self._countdown = self.hold_seconds
        self._scheduler.cancel(COUNTDOWN_JOB)
        if not self._closed:
            self._scheduler.schedule_repeating(COUNTDOWN_JOB, 1, self.handle_tick)
        self._set_mode(UrgeSurfMode.holding(self._countdown))
        logger.info(f"Urge-surf hold started ({self.hold_seconds}s)")
        return True

    def handle_tick(self) -> None:
        """Advance the countdown by one second."""
        if not self._mode.is_holding:
            return

        if self._countdown <= 1:
            self._countdown = 0
            self._scheduler.cancel(COUNTDOWN_JOB)
            self._set_mode(UrgeSurfMode.allow_exit())
        else:
            self._countdown -= 1
            self._set_mode(UrgeSurfMode.holding(self._countdown))

    def allow_exit(self) -> None:
        """Let the user leave right away."""
        self._scheduler.cancel(COUNTDOWN_JOB)
        self._countdown = 0
        self._set_mode(UrgeSurfMode.allow_exit())

    def complete_cycle(self) -> None:
        """Return to `inactive`, either after leaving or when the user stays."""
        self._scheduler.cancel(COUNTDOWN_JOB)
        self._countdown = self.hold_seconds
        self._set_mode(UrgeSurfMode.inactive())

    def close(self) -> None:
        self._closed = True
        self._scheduler.cancel(COUNTDOWN_JOB)

    def _set_mode(self, mode: UrgeSurfMode) -> None:
        self._mode = mode
        if self._on_change:
            self._on_change(mode)
