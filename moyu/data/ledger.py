"""
Session Ledger — the persisted list of completed breaks.

History is kept newest-first under ``breakHistory`` with a separate running
total under ``totalLoafingSeconds``. Both are written in one store
transaction so readers never see one updated without the other.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import List

from moyu.data.models import BreakSession, Reward
from moyu.data.store import (
    KEY_BREAK_HISTORY,
    KEY_FISH,
    KEY_TOTAL_SECONDS,
    KeyValueStore,
)

logger = logging.getLogger(__name__)

# Oldest records beyond this are dropped from history; the total keeps them.
MAX_HISTORY = 10_000


class SessionLedger:
    """Append-only store of BreakSession records plus the caught fish."""

    def __init__(self, store: KeyValueStore, max_history: int = MAX_HISTORY) -> None:
        self.store = store
        self.max_history = max_history
        self._lock = threading.RLock()

    # ── Break history ───────────────────────────────────────────────────────

    def append(self, session: BreakSession) -> BreakSession:
        """
        Insert ``session`` at the head of the history and bump the total.

        Returns the stored session, whose id may have been nudged forward so
        ids stay strictly increasing. Raises StorageUnavailable.
        """
        with self._lock:
            history = list(self.store.get(KEY_BREAK_HISTORY, []) or [])
            total = float(self.store.get(KEY_TOTAL_SECONDS, 0) or 0)

            if history and session.id <= int(history[0]["id"]):
                session = BreakSession(
                    id=int(history[0]["id"]) + 1,
                    kind=session.kind,
                    started_at=session.started_at,
                    duration_seconds=session.duration_seconds,
                    recorded_on=session.recorded_on,
                )

            history.insert(0, session.to_dict())
            if len(history) > self.max_history:
                del history[self.max_history:]

            self.store.set_many({
                KEY_BREAK_HISTORY: history,
                KEY_TOTAL_SECONDS: total + session.duration_seconds,
            })
        logger.info(
            "Recorded %s break of %.1fs (session %d)",
            session.kind.label, session.duration_seconds, session.id,
        )
        return session

    def total_accumulated_seconds(self) -> float:
        return float(self.store.get(KEY_TOTAL_SECONDS, 0) or 0)

    def all_sessions(self) -> List[BreakSession]:
        """Every stored session, newest first."""
        raw = self.store.get(KEY_BREAK_HISTORY, []) or []
        return [BreakSession.from_dict(item) for item in raw]

    def sessions_since(self, timestamp: datetime) -> List[BreakSession]:
        return [s for s in self.all_sessions() if s.started_at >= timestamp]

    def count(self) -> int:
        return len(self.store.get(KEY_BREAK_HISTORY, []) or [])

    # ── Fish collection ─────────────────────────────────────────────────────

    def add_reward(self, reward: Reward) -> None:
        with self._lock:
            fish = list(self.store.get(KEY_FISH, []) or [])
            fish.append(reward.to_dict())
            self.store.set(KEY_FISH, fish)
        logger.info("Added %s %s to the collection", reward.rarity_label, reward.name)

    def rewards(self) -> List[Reward]:
        return [Reward.from_dict(item) for item in self.store.get(KEY_FISH, []) or []]

    # ── Maintenance ─────────────────────────────────────────────────────────

    def clear_all(self) -> None:
        """Delete history, fish and total. Requires confirmation in the UI."""
        with self._lock:
            self.store.set_many({
                KEY_BREAK_HISTORY: [],
                KEY_FISH: [],
                KEY_TOTAL_SECONDS: 0,
            })
        logger.warning("All break data has been cleared.")
