"""Unit tests for break statistics."""

import pytest
from datetime import datetime, timedelta
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from moyu.data.ledger import SessionLedger
from moyu.data.models import BreakKind, BreakSession, CompensationConfig, Reward
from moyu.services.stats import BreakStats, format_duration


@pytest.fixture
def ledger(store):
    return SessionLedger(store)


@pytest.fixture
def stats(ledger, clock):
    # clock starts Wednesday 2026-03-11 15:00
    return BreakStats(ledger, clock)


def _add(ledger: SessionLedger, started_at: datetime, seconds: float,
         kind: BreakKind = None) -> None:
    ledger.append(BreakSession(
        id=int(started_at.timestamp() * 1000),
        kind=kind or BreakKind.manual_poop(),
        started_at=started_at,
        duration_seconds=seconds,
        recorded_on=started_at.date().isoformat(),
    ))


@pytest.fixture
def seeded(ledger):
    _add(ledger, datetime(2026, 2, 20, 11, 0), 100)
    _add(ledger, datetime(2026, 3, 10, 16, 30), 200, BreakKind.auto_detected("Safari"))
    _add(ledger, datetime(2026, 3, 11, 10, 0), 300)
    _add(ledger, datetime(2026, 3, 11, 14, 0), 60, BreakKind.auto_detected("Safari"))
    return ledger


class TestToday:
    def test_today_seconds(self, stats, seeded):
        assert stats.today_seconds() == 360

    def test_today_earnings(self, stats, seeded):
        config = CompensationConfig(monthly_salary=10000, work_days_per_month=22,
                                    work_hours_per_day=8)
        assert stats.today_earnings(config) == pytest.approx(360 * 10000 / 633600)

    def test_empty(self, stats):
        assert stats.today_seconds() == 0


class TestSummaries:
    def test_day(self, stats, seeded):
        summary = stats.summarize("day")
        assert [b.label for b in summary.buckets] == ["14:00", "10:00"]
        assert summary.total_seconds == 360
        assert summary.session_count == 2

    def test_week_starts_monday(self, stats, seeded):
        summary = stats.summarize("week")
        assert len(summary.buckets) == 7
        assert summary.buckets[0].start == datetime(2026, 3, 9)
        assert summary.buckets[1].seconds == 200
        assert summary.buckets[2].seconds == 360
        assert summary.buckets[2].count == 2
        assert summary.total_seconds == 560
        assert summary.session_count == 3

    def test_week_breakdown_longest_first(self, stats, seeded):
        wednesday = stats.summarize("week").buckets[2]
        labels = [item.label for item in wednesday.breakdown]
        assert labels == [BreakKind.manual_poop().label, "👀 Safari"]
        assert wednesday.breakdown[0].seconds == 300

    def test_month(self, stats, seeded):
        summary = stats.summarize("month")
        assert len(summary.buckets) == 31
        assert summary.buckets[9].seconds == 200
        assert summary.total_seconds == 560

    def test_year(self, stats, seeded):
        summary = stats.summarize("year")
        assert len(summary.buckets) == 12
        assert summary.buckets[1].seconds == 100
        assert summary.buckets[2].seconds == 560
        assert summary.total_seconds == 660
        assert summary.buckets[0].label == "Jan"

    def test_empty_ledger(self, stats):
        summary = stats.summarize("week")
        assert summary.total_seconds == 0
        assert all(b.count == 0 for b in summary.buckets)

    def test_unknown_range(self, stats):
        with pytest.raises(ValueError, match="Unknown range"):
            stats.summarize("decade")


class TestRewardCounts:
    def test_counts_every_tier(self, stats, ledger):
        caught = datetime(2026, 3, 11, 12, 0)
        ledger.add_reward(Reward(1, "Common", "🐟", "Minnow", caught, 60))
        ledger.add_reward(Reward(2, "Common", "🐟", "Minnow", caught, 60))
        ledger.add_reward(Reward(3, "Legendary", "🦈", "Shark", caught, 2400))
        assert stats.reward_counts() == {
            "Common": 2, "Rare": 0, "Epic": 0, "Legendary": 1,
        }


@pytest.mark.parametrize("seconds, expected", [
    (0, "0s"), (42, "42s"), (200, "3m 20s"), (3900, "1h 5m"), (None, "0s"),
])
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected
