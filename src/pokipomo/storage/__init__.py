"""Storage layer for the session ledger."""

from pokipomo.storage.database import Database
from pokipomo.storage.session_store import SessionStore

__all__ = ["Database", "SessionStore"]
