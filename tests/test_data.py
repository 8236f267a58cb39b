"""Unit tests for the data layer (database, store, ledger, models)."""

import sqlite3
import pytest
from datetime import datetime, timedelta

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from moyu.data.database import Database
from moyu.data.ledger import SessionLedger
from moyu.data.models import BreakKind, BreakSession, BreakTag, Reward
from moyu.data.store import KEY_BREAK_HISTORY, KEY_TOTAL_SECONDS, KeyValueStore
from moyu.errors import StorageUnavailable


def _session(sid: int, seconds: float, started_at: datetime,
             kind: BreakKind = None) -> BreakSession:
    return BreakSession(
        id=sid,
        kind=kind or BreakKind.manual_poop(),
        started_at=started_at,
        duration_seconds=seconds,
        recorded_on=started_at.date().isoformat(),
    )


@pytest.fixture
def ledger(store):
    return SessionLedger(store)


class TestDatabase:
    def test_connect_creates_schema(self, tmp_path):
        db = Database(db_path=tmp_path / "moyu.db")
        conn = db.connect()
        tables = {r["name"] for r in conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table'").fetchall()}
        assert "kv_store" in tables
        assert db.connect() is conn
        db.close()
        assert db.conn is None

    def test_env_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("MOYU_DB_PATH", str(tmp_path / "other.db"))
        assert Database().db_path == tmp_path / "other.db"


class TestKeyValueStore:
    def test_missing_key_returns_default(self, store: KeyValueStore):
        assert store.get("nope") is None
        assert store.get("nope", 42) == 42

    def test_set_and_get_json(self, store: KeyValueStore):
        store.set("workApps", ["Code", "终端"])
        assert store.get("workApps") == ["Code", "终端"]

    def test_set_overwrites(self, store: KeyValueStore):
        store.set("salary", 8000)
        store.set("salary", 12000)
        assert store.get("salary") == 12000

    def test_set_many(self, store: KeyValueStore):
        store.set_many({"a": 1, "b": {"x": True}})
        assert store.get("a") == 1
        assert store.get("b") == {"x": True}

    def test_delete(self, store: KeyValueStore):
        store.set("a", 1)
        store.delete("a")
        assert store.get("a") is None

    def test_closed_connection_raises_storage_unavailable(self, conn, store):
        conn.close()
        with pytest.raises(StorageUnavailable):
            store.get("salary")
        with pytest.raises(StorageUnavailable):
            store.set("salary", 1)

    def test_no_connection(self):
        with pytest.raises(StorageUnavailable, match="not connected"):
            KeyValueStore(None).get("x")


class TestSessionLedger:
    def test_empty_ledger(self, ledger: SessionLedger):
        assert ledger.all_sessions() == []
        assert ledger.total_accumulated_seconds() == 0

    def test_append_newest_first(self, ledger: SessionLedger):
        t0 = datetime(2026, 3, 1, 10, 0)
        ledger.append(_session(1, 60, t0))
        ledger.append(_session(2, 90, t0 + timedelta(hours=1)))
        ids = [s.id for s in ledger.all_sessions()]
        assert ids == [2, 1]

    @pytest.mark.parametrize("durations", [[], [12.5], [60, 0.5, 300, 7.25]])
    def test_total_matches_sum_of_appends(self, ledger, durations):
        t0 = datetime(2026, 3, 1, 10, 0)
        for i, d in enumerate(durations):
            ledger.append(_session(i + 1, d, t0 + timedelta(minutes=i)))
        assert ledger.total_accumulated_seconds() == pytest.approx(sum(durations))

    def test_total_is_a_separate_counter(self, ledger, store):
        ledger.append(_session(1, 100, datetime(2026, 3, 1)))
        stored = store.get(KEY_BREAK_HISTORY)
        assert len(stored) == 1
        assert store.get(KEY_TOTAL_SECONDS) == 100

    def test_duplicate_ids_are_bumped(self, ledger):
        t0 = datetime(2026, 3, 1, 10, 0)
        ledger.append(_session(500, 10, t0))
        stored = ledger.append(_session(500, 20, t0))
        assert stored.id == 501
        assert [s.id for s in ledger.all_sessions()] == [501, 500]

    def test_sessions_since(self, ledger):
        t0 = datetime(2026, 3, 1, 10, 0)
        ledger.append(_session(1, 10, t0))
        ledger.append(_session(2, 10, t0 + timedelta(days=1)))
        ledger.append(_session(3, 10, t0 + timedelta(days=2)))
        recent = ledger.sessions_since(t0 + timedelta(days=1))
        assert [s.id for s in recent] == [3, 2]

    def test_history_cap_keeps_total(self, store):
        ledger = SessionLedger(store, max_history=3)
        t0 = datetime(2026, 3, 1, 10, 0)
        for i in range(5):
            ledger.append(_session(i + 1, 10, t0 + timedelta(minutes=i)))
        assert [s.id for s in ledger.all_sessions()] == [5, 4, 3]
        assert ledger.total_accumulated_seconds() == 50

    def test_auto_detected_kind_survives_storage(self, ledger):
        ledger.append(_session(1, 42, datetime(2026, 3, 1),
                               kind=BreakKind.auto_detected("Safari")))
        stored = ledger.all_sessions()[0]
        assert stored.kind.tag == BreakTag.AUTO_DETECTED
        assert stored.kind.app_name == "Safari"

    def test_rewards_collection(self, ledger):
        fish = Reward(id=7, rarity_label="Rare", display_glyph="🐠", name="Goldfish",
                      caught_at=datetime(2026, 3, 1, 12, 0),
                      session_duration_seconds=400)
        ledger.add_reward(fish)
        assert ledger.rewards() == [fish]

    def test_clear_all(self, ledger):
        ledger.append(_session(1, 10, datetime(2026, 3, 1)))
        ledger.add_reward(Reward(1, "Common", "🐟", "Minnow", datetime(2026, 3, 1), 10))
        ledger.clear_all()
        assert ledger.all_sessions() == []
        assert ledger.rewards() == []
        assert ledger.total_accumulated_seconds() == 0

    def test_append_fails_when_store_closed(self, conn, ledger):
        conn.close()
        with pytest.raises(StorageUnavailable):
            ledger.append(_session(1, 10, datetime(2026, 3, 1)))


class TestModels:
    def test_labels(self):
        assert BreakKind.manual_poop().label.startswith("💩")
        assert BreakKind.fake_update().label.startswith("🖥️")
        assert BreakKind.fake_coding().label.startswith("⌨️")
        assert BreakKind.auto_detected("WeChat").label == "👀 WeChat"

    def test_kinds_compare_by_value(self):
        assert BreakKind.auto_detected("A") == BreakKind.auto_detected("A")
        assert BreakKind.auto_detected("A") != BreakKind.auto_detected("B")
        assert BreakKind.manual_poop() != BreakKind.fake_update()
