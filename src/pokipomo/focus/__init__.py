"""Focus timer core: session state machine, urge-surf guard, ledger and metrics."""

from pokipomo.focus.models import (
    DurationOption,
    FocusSession,
    PokiMood,
    SessionOutcome,
    TimerState,
    UrgeSurfMode,
    UrgeSurfPhase,
)
from pokipomo.focus.ledger import SessionLedger
from pokipomo.focus.metrics import Streak, advance_streak, count_sessions_on_day
from pokipomo.focus.scheduler import AsyncioScheduler, Scheduler
from pokipomo.focus.timer import FocusTimer, FocusTimerSnapshot
from pokipomo.focus.navigation import NavigationCoordinator, Tab

__all__ = [
    "DurationOption",
    "FocusSession",
    "PokiMood",
    "SessionOutcome",
    "TimerState",
    "UrgeSurfMode",
    "UrgeSurfPhase",
    "SessionLedger",
    "Streak",
    "advance_streak",
    "count_sessions_on_day",
    "AsyncioScheduler",
    "Scheduler",
    "FocusTimer",
    "FocusTimerSnapshot",
    "NavigationCoordinator",
    "Tab",
]
