from .database import Database
from .ledger import SessionLedger
from .models import BreakKind, BreakSession, BreakTag, Reward
from .store import KeyValueStore

__all__ = [
    "Database", "SessionLedger", "BreakKind", "BreakSession", "BreakTag",
    "Reward", "KeyValueStore",
]
