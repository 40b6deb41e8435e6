"""Append-only record of completed focus sessions."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime

from pokipomo.focus.metrics import count_sessions_on_day
from pokipomo.focus.models import FocusSession

logger = logging.getLogger(__name__)


class SessionLedger:
    """Chronological list of sessions.

    Entries are never removed. The only change after `append` is the
    reflection text, located by session id.
    """

    def __init__(self, sessions: Iterable[FocusSession] = ()):
        self._sessions: list[FocusSession] = list(sessions)

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self):
        return iter(self._sessions)

    def append(self, session: FocusSession) -> None:
        self._sessions.append(session)
        logger.debug(f"Ledger append: {session.id} ({session.duration}s)")

    def find(self, session_id: str) -> FocusSession | None:
        for session in self._sessions:
            if session.id == session_id:
                return session
        return None

    def update_reflection(self, session_id: str, text: str) -> bool:
        """Write reflection text onto a session. Returns False if the id is unknown."""
        session = self.find(session_id)
        if session is None:
            return False
        session.reflection = text
        return True

    def count_completed_on(self, reference: datetime) -> int:
        """Sessions that ended on the reference calendar day."""
        return count_sessions_on_day(self._sessions, reference)

    def snapshot(self) -> tuple[FocusSession, ...]:
        return tuple(self._sessions)

    def restore(self, sessions: Iterable[FocusSession]) -> None:
        """Replace the contents with sessions loaded from a store."""
        self._sessions = sorted(sessions, key=lambda s: s.ended_at)
        logger.info(f"Ledger restored with {len(self._sessions)} sessions")
