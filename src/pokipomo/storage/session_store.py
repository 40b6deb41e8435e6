"""Loads and saves the session ledger and streak anchor."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime

from pokipomo.focus.metrics import Streak
from pokipomo.focus.models import FocusSession
from pokipomo.storage.database import Database

logger = logging.getLogger(__name__)

_UPSERT = """
INSERT INTO focus_sessions (id, duration_seconds, reflection, started_at, ended_at, outcome)
VALUES (:id, :duration_seconds, :reflection, :started_at, :ended_at, :outcome)
ON CONFLICT(id) DO UPDATE SET reflection = excluded.reflection
"""


class SessionStore:
    """Persistence for what the focus timer keeps in memory.

    Sessions are immutable apart from their reflection, so saving an existing
    id only updates the reflection column.
    """

    STREAK_COUNT_KEY = "streak_count"
    STREAK_ANCHOR_KEY = "streak_anchor"

    def __init__(self, db: Database):
        self.db = db

    async def save_session(self, session: FocusSession) -> None:
        await self.db.execute(_UPSERT, session.to_db_dict())

    async def save_sessions(self, sessions: Iterable[FocusSession]) -> None:
        rows = [session.to_db_dict() for session in sessions]
        if rows:
            await self.db.execute_many(_UPSERT, rows)
            logger.debug(f"Saved {len(rows)} sessions")

    async def load_sessions(self) -> list[FocusSession]:
        rows = await self.db.fetch_all(
            "SELECT * FROM focus_sessions ORDER BY ended_at, created_at"
        )
        sessions = []
        for row in rows:
            try:
                sessions.append(FocusSession.from_db_row(row))
            except (KeyError, ValueError) as e:
                logger.warning(f"Skipping unreadable session {row.get('id')}: {e}")
        return sessions

    async def save_streak(self, streak: Streak) -> None:
        await self.db.set_state(self.STREAK_COUNT_KEY, streak.count)
        if streak.anchor is not None:
            await self.db.set_state(self.STREAK_ANCHOR_KEY, streak.anchor.isoformat())

    async def load_streak(self) -> Streak:
        count = await self.db.get_state(self.STREAK_COUNT_KEY)
        anchor = await self.db.get_state(self.STREAK_ANCHOR_KEY)
        try:
            return Streak(
                count=int(count) if count is not None else 0,
                anchor=datetime.fromisoformat(anchor) if anchor else None,
            )
        except ValueError as e:
            logger.warning(f"Ignoring unreadable streak state: {e}")
            return Streak()
