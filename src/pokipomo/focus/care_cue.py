"""Ambient care cue: a throttled encouragement message during long inactivity."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from pokipomo.focus.scheduler import Scheduler

logger = logging.getLogger(__name__)

TOAST_JOB = "care-cue-toast"


@dataclass
class CareCueThresholds:
    """Timing for the care cue."""

    delay_seconds: float = 5 * 60
    toast_seconds: float = 3.0
    message: str = "Deep breath. You've got this."


class AmbientCareCue:
    """Fires a one-shot message when the user has been quiet too long.

    The cue fires only when both the time since the last interaction and the
    time since the previous cue reach the delay. The message clears itself
    after `toast_seconds`; a clear only removes the message it was scheduled
    for, so a newer message is never wiped by an older timer.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        thresholds: CareCueThresholds | None = None,
        on_change: Callable[[], None] | None = None,
    ):
        self.thresholds = thresholds or CareCueThresholds()
        self._scheduler = scheduler
        self._on_change = on_change

        self._last_interaction: datetime | None = None
        self._last_cue: datetime | None = None
        self._message: str | None = None
        self._message_token = 0
        self._closed = False

    @property
    def message(self) -> str | None:
        """Currently visible message, if any."""
        return self._message

    @property
    def last_interaction(self) -> datetime | None:
        return self._last_interaction

    @property
    def last_cue(self) -> datetime | None:
        return self._last_cue

    def register_interaction(self, now: datetime) -> None:
        self._last_interaction = now

    def reset(self, now: datetime) -> None:
        """Forget the previous cue and restart the inactivity clock."""
        self._last_cue = None
        self._last_interaction = now

    def evaluate(self, now: datetime) -> bool:
        """Check the inactivity window and fire the cue if due.

        Returns True when a message was published.
        """
        if self._last_interaction is None:
            return False

        delay = self.thresholds.delay_seconds
        since_interaction = (now - self._last_interaction).total_seconds()
        if self._last_cue is None:
            since_cue = float("inf")
        else:
            since_cue = (now - self._last_cue).total_seconds()

        if since_interaction >= delay and since_cue > delay:
            self.show(self.thresholds.message)
            self._last_cue = now
            return True
        return False

    def show(self, message: str) -> None:
        """Publish a message and schedule its removal."""
        self._message_token += 1
        token = self._message_token
        self._message = message
        logger.info(f"Care cue: {message}")

        if not self._closed:
            self._scheduler.schedule_once(
                TOAST_JOB, self.thresholds.toast_seconds, lambda: self._expire(token)
            )
        self._notify()

    def close(self) -> None:
        """Cancel the pending auto-clear. Later messages are never scheduled."""
        self._closed = True
        self._scheduler.cancel(TOAST_JOB)

    def _expire(self, token: int) -> None:
        if token != self._message_token or self._message is None:
            return
        self._message = None
        self._notify()

    def _notify(self) -> None:
        if self._on_change:
            self._on_change()
