"""Focus timer state machine with urge-surf guard and progress metrics."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable

from pokipomo.core.config import TimerConfig
from pokipomo.focus.care_cue import AmbientCareCue, CareCueThresholds
from pokipomo.focus.ledger import SessionLedger
from pokipomo.focus.metrics import (
    Streak,
    advance_streak,
    describe_daily_progress,
    format_clock,
    format_minutes,
)
from pokipomo.focus.models import (
    DurationOption,
    FocusSession,
    PokiMood,
    SessionOutcome,
    TimerState,
    UrgeSurfMode,
)
from pokipomo.focus.scheduler import AsyncioScheduler, Scheduler
from pokipomo.focus.urge_surf import UrgeSurfIntervention

logger = logging.getLogger(__name__)

TICK_JOB = "session-tick"


@dataclass(frozen=True)
class FocusTimerSnapshot:
    """Published state of the focus timer at one instant."""

    remaining_time: int
    state: TimerState
    total_focus_seconds: int
    streak_count: int
    todays_completed_sessions: int
    sessions: tuple[FocusSession, ...]
    urge_surf_mode: UrgeSurfMode
    urge_surf_countdown: int
    toast_message: str | None
    show_reflection_prompt: bool
    selected_duration: DurationOption
    pending_reflection_session_id: str | None = None

    @property
    def formatted_remaining_time(self) -> str:
        return format_clock(self.remaining_time)

    @property
    def formatted_total_focus_time(self) -> str:
        return format_minutes(self.total_focus_seconds)

    @property
    def daily_goal_progress_description(self) -> str:
        return describe_daily_progress(self.todays_completed_sessions)

    @property
    def has_pending_reflection(self) -> bool:
        return self.pending_reflection_session_id is not None

    @property
    def mood(self) -> PokiMood:
        if self.state == TimerState.RUNNING:
            return PokiMood.SLEEPING
        if self.state == TimerState.COMPLETED:
            return PokiMood.CELEBRATORY
        return PokiMood.AWAKE


class FocusTimer:
    """Session timer with an urge-surf guard, a session ledger and a care cue.

    All mutation happens on one event loop: intents are plain synchronous
    calls, and the scheduler drives `handle_tick` once per second while a
    session runs.

    Usage:
        timer = FocusTimer(TimerConfig(default_minutes=25))
        timer.on_session_complete = lambda s: print(f"{s.formatted_duration} done")
        unsubscribe = timer.subscribe(lambda snap: print(snap.formatted_remaining_time))

        timer.start()
        # ... ticks run on the event loop ...
        timer.pause()
        timer.start()  # resumes without resetting the countdown
        timer.close()
    """

    def __init__(
        self,
        config: TimerConfig | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
        scheduler: Scheduler | None = None,
    ):
        self.config = config or TimerConfig()
        self._clock = clock or datetime.now
        self._scheduler = scheduler or AsyncioScheduler()

        self.duration_options: tuple[DurationOption, ...] = tuple(
            DurationOption(minutes) for minutes in self.config.duration_options
        )
        self._selected = DurationOption(self.config.default_minutes)
        self._remaining = self._selected.seconds
        self._state = TimerState.IDLE

        self._ledger = SessionLedger()
        self._total_focus_seconds = 0
        self._todays_completed = 0
        self._streak = Streak()
        self._pending_reflection_id: str | None = None
        self._show_reflection_prompt = False
        self._session_start: datetime | None = None

        self._urge_surf = UrgeSurfIntervention(
            self._scheduler,
            hold_seconds=self.config.urge_surf_seconds,
            on_change=self._handle_urge_surf_change,
        )
        self._care_cue = AmbientCareCue(
            self._scheduler,
            CareCueThresholds(
                delay_seconds=self.config.care_cue_delay_seconds,
                toast_seconds=self.config.toast_seconds,
                message=self.config.care_cue_message,
            ),
            on_change=self._publish,
        )

        self._listeners: list[Callable[[FocusTimerSnapshot], None]] = []
        self._closed = False

        # Callbacks
        self.on_tick: Callable[[int], None] | None = None
        self.on_session_complete: Callable[[FocusSession], None] | None = None
        self.on_urge_surf_change: Callable[[UrgeSurfMode], None] | None = None

    # Published state
    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def remaining_time(self) -> int:
        return self._remaining

    @property
    def selected_duration(self) -> DurationOption:
        return self._selected

    @property
    def total_focus_seconds(self) -> int:
        return self._total_focus_seconds

    @property
    def streak_count(self) -> int:
        return self._streak.count

    @property
    def streak_anchor(self) -> datetime | None:
        return self._streak.anchor

    @property
    def todays_completed_sessions(self) -> int:
        return self._todays_completed

    @property
    def sessions(self) -> tuple[FocusSession, ...]:
        return self._ledger.snapshot()

    @property
    def urge_surf_mode(self) -> UrgeSurfMode:
        return self._urge_surf.mode

    @property
    def urge_surf_countdown(self) -> int:
        return self._urge_surf.countdown

    @property
    def toast_message(self) -> str | None:
        return self._care_cue.message

    @property
    def show_reflection_prompt(self) -> bool:
        return self._show_reflection_prompt

    @property
    def pending_reflection_session_id(self) -> str | None:
        return self._pending_reflection_id

    def snapshot(self) -> FocusTimerSnapshot:
        """Immutable copy of all published state."""
        return FocusTimerSnapshot(
            remaining_time=self._remaining,
            state=self._state,
            total_focus_seconds=self._total_focus_seconds,
            streak_count=self._streak.count,
            todays_completed_sessions=self._todays_completed,
            sessions=self._ledger.snapshot(),
            urge_surf_mode=self._urge_surf.mode,
            urge_surf_countdown=self._urge_surf.countdown,
            toast_message=self._care_cue.message,
            show_reflection_prompt=self._show_reflection_prompt,
            selected_duration=self._selected,
            pending_reflection_session_id=self._pending_reflection_id,
        )

    def subscribe(
        self, listener: Callable[[FocusTimerSnapshot], None]
    ) -> Callable[[], None]:
        """Call `listener` with a fresh snapshot after every change.

        Returns a function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # Intents
    def start(self) -> None:
        """Start a new session, or resume a paused one."""
        if self._state == TimerState.RUNNING:
            return

        # Coming from idle/completed starts a fresh countdown
        if self._state in (TimerState.IDLE, TimerState.COMPLETED):
            self._remaining = self._selected.seconds

        now = self._clock()
        self._state = TimerState.RUNNING
        self._session_start = now
        self._care_cue.reset(now)
        self._start_ticking()

        logger.info(f"Focus session running: {format_clock(self._remaining)} left")
        self._publish()

    def pause(self) -> None:
        if self._state != TimerState.RUNNING:
            logger.debug(f"Pause ignored in {self._state.value}")
            return

        self._scheduler.cancel(TICK_JOB)
        self._state = TimerState.PAUSED
        self._care_cue.register_interaction(self._clock())

        logger.info(f"Focus session paused at {format_clock(self._remaining)}")
        self._publish()

    def stop_and_reset(self) -> None:
        """Return to idle with a full countdown, whatever the current state."""
        self._scheduler.cancel(TICK_JOB)
        self._state = TimerState.IDLE
        self._remaining = self._selected.seconds
        self._session_start = None
        self._care_cue.reset(self._clock())

        logger.info("Focus timer reset")
        self._publish()

    def reset_to_defaults(self) -> None:
        default = next(
            (o for o in self.duration_options if o.minutes == self.config.default_minutes),
            self.duration_options[0],
        )
        self._selected = default
        self.stop_and_reset()

    def select_duration(self, option: DurationOption) -> None:
        """Choose the session length. A running or paused session keeps its countdown."""
        self._selected = option
        if self._state in (TimerState.IDLE, TimerState.COMPLETED):
            self._remaining = option.seconds
        self._care_cue.register_interaction(self._clock())
        self._publish()

    def save_reflection(self, text: str) -> None:
        """Attach reflection text to the session awaiting it."""
        session_id = self._pending_reflection_id
        if session_id is None or not self._ledger.update_reflection(session_id, text.strip()):
            logger.debug("No pending reflection to save")
        self._pending_reflection_id = None
        self._show_reflection_prompt = False
        self._publish()

    def discard_reflection(self) -> None:
        self._pending_reflection_id = None
        self._show_reflection_prompt = False
        self._publish()

    def start_another_session(self) -> None:
        self.stop_and_reset()
        self.start()

    def begin_urge_surf_hold(self) -> None:
        """Start the supportive hold when the user tries to leave mid-session."""
        if self._state != TimerState.RUNNING:
            logger.debug(f"Urge-surf hold ignored in {self._state.value}")
            return
        self._urge_surf.begin()

    def allow_exit_during_urge_surf(self) -> None:
        self._urge_surf.allow_exit()

    def complete_urge_surf_cycle(self) -> None:
        self._urge_surf.complete_cycle()

    def restore(
        self,
        sessions: Iterable[FocusSession],
        streak_count: int = 0,
        streak_anchor: datetime | None = None,
    ) -> None:
        """Seed the ledger and streak from a store before the first session."""
        self._ledger.restore(sessions)
        self._streak = Streak(count=streak_count, anchor=streak_anchor)
        self._todays_completed = self._ledger.count_completed_on(self._clock())
        self._publish()

    def close(self) -> None:
        """Cancel every timer and delayed action and drop all listeners."""
        self._closed = True
        self._scheduler.cancel(TICK_JOB)
        self._urge_surf.close()
        self._care_cue.close()
        self._scheduler.cancel_all()
        self._listeners.clear()
        logger.debug("Focus timer closed")

    # Ticking
    def handle_tick(self) -> None:
        """Advance the countdown by one second. Driven by the scheduler."""
        if self._state != TimerState.RUNNING:
            return

        if self._remaining <= 0:
            self._complete_session()
            return

        self._remaining = max(0, self._remaining - 1)
        self._care_cue.evaluate(self._clock())

        if self.on_tick:
            try:
                self.on_tick(self._remaining)
            except Exception as e:
                logger.error(f"Error in on_tick callback: {e}")

        if self._remaining == 0:
            self._complete_session()
        else:
            self._publish()

    def _start_ticking(self) -> None:
        self._scheduler.cancel(TICK_JOB)
        if not self._closed:
            self._scheduler.schedule_repeating(TICK_JOB, 1, self.handle_tick)

    def _complete_session(self) -> None:
        self._scheduler.cancel(TICK_JOB)
        self._state = TimerState.COMPLETED

        end_date = self._clock()
        start_date = self._session_start or end_date

        session = FocusSession(
            duration=self._selected.seconds,
            started_at=start_date,
            ended_at=end_date,
            outcome=SessionOutcome.COMPLETED,
        )
        self._ledger.append(session)
        self._pending_reflection_id = session.id
        self._show_reflection_prompt = True

        self._total_focus_seconds += self._selected.seconds
        self._todays_completed = self._ledger.count_completed_on(end_date)
        self._streak = advance_streak(self._streak, end_date)

        self._remaining = 0
        self._session_start = None

        logger.info(
            f"Focus session complete: {session.formatted_duration}, "
            f"streak {self._streak.count}, {self._todays_completed} today"
        )

        if self.on_session_complete:
            try:
                self.on_session_complete(session)
            except Exception as e:
                logger.error(f"Error in on_session_complete callback: {e}")

        self._publish()

    # Notifications
    def _handle_urge_surf_change(self, mode: UrgeSurfMode) -> None:
        # Listeners see each phase before the callback can move past it.
        self._publish()
        if self.on_urge_surf_change:
            try:
                self.on_urge_surf_change(mode)
            except Exception as e:
                logger.error(f"Error in on_urge_surf_change callback: {e}")

    def _publish(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"Error in state listener: {e}")
