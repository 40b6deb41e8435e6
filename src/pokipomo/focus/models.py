"""Data model for focus sessions and timer phases."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class SessionOutcome(str, Enum):
    """How a focus session ended."""

    COMPLETED = "completed"
    ABANDONED = "abandoned"  # Reserved, nothing produces it yet


class TimerState(str, Enum):
    """Authoritative phase of the active session."""

    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


class UrgeSurfPhase(str, Enum):
    """Phase of a navigation-away attempt during a running session."""

    INACTIVE = "inactive"
    HOLDING = "holding"
    ALLOW_EXIT = "allow_exit"


class PokiMood(str, Enum):
    """Mascot mood derived from the timer state."""

    SLEEPING = "sleeping"
    AWAKE = "awake"
    CELEBRATORY = "celebratory"


@dataclass(frozen=True)
class UrgeSurfMode:
    """Urge-surf mode. seconds_remaining only means something while holding."""

    phase: UrgeSurfPhase = UrgeSurfPhase.INACTIVE
    seconds_remaining: int = 0

    @classmethod
    def inactive(cls) -> UrgeSurfMode:
        return cls(UrgeSurfPhase.INACTIVE)

    @classmethod
    def holding(cls, seconds_remaining: int) -> UrgeSurfMode:
        return cls(UrgeSurfPhase.HOLDING, seconds_remaining)

    @classmethod
    def allow_exit(cls) -> UrgeSurfMode:
        return cls(UrgeSurfPhase.ALLOW_EXIT)

    @property
    def is_holding(self) -> bool:
        return self.phase == UrgeSurfPhase.HOLDING


@dataclass(frozen=True)
class DurationOption:
    """A selectable session length. Options are identified by their minutes."""

    minutes: int

    @property
    def id(self) -> int:
        return self.minutes

    @property
    def seconds(self) -> int:
        return self.minutes * 60

    @property
    def label(self) -> str:
        return f"{self.minutes} min"


@dataclass
class FocusSession:
    """A finished focus session.

    `duration` is the planned length in seconds at the time the session
    started, not the wall time between `started_at` and `ended_at`. Only
    `reflection` changes after creation.
    """

    duration: int
    started_at: datetime
    ended_at: datetime
    outcome: SessionOutcome = SessionOutcome.COMPLETED
    reflection: str = ""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self) -> None:
        if self.ended_at < self.started_at:
            raise ValueError("Session cannot end before it starts")

    @property
    def formatted_duration(self) -> str:
        """Planned length as whole minutes."""
        return f"{self.duration // 60} min"

    @classmethod
    def from_db_row(cls, row: dict[str, Any]) -> FocusSession:
        """Create from database row."""
        return cls(
            id=row["id"],
            duration=int(row["duration_seconds"]),
            reflection=row.get("reflection") or "",
            started_at=datetime.fromisoformat(row["started_at"]),
            ended_at=datetime.fromisoformat(row["ended_at"]),
            outcome=SessionOutcome(row.get("outcome", "completed")),
        )

    def to_db_dict(self) -> dict[str, Any]:
        """Convert to dictionary for database storage."""
        return {
            "id": self.id,
            "duration_seconds": self.duration,
            "reflection": self.reflection,
            "started_at": self.started_at.isoformat(),
            "ended_at": self.ended_at.isoformat(),
            "outcome": self.outcome.value,
        }
