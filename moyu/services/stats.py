"""
Break statistics — today's totals and day/week/month/year breakdowns.

Everything is derived from the ledger's history on demand; nothing here is
persisted.
"""

from __future__ import annotations

import calendar
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional

import numpy as np

from moyu.clock import SYSTEM_CLOCK, Clock
from moyu.data.ledger import SessionLedger
from moyu.data.models import BreakSession, CompensationConfig
from moyu.services import earnings
from moyu.services.rewards import FISH_TIERS

RANGES = ("day", "week", "month", "year")


@dataclass
class BreakdownItem:
    label: str
    seconds: float
    count: int


@dataclass
class StatBucket:
    label: str
    start: datetime
    seconds: float
    count: int
    breakdown: List[BreakdownItem] = field(default_factory=list)


@dataclass
class RangeSummary:
    range: str
    buckets: List[StatBucket]
    total_seconds: float
    session_count: int


def _start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def breakdown(sessions: List[BreakSession]) -> List[BreakdownItem]:
    """Seconds and count per break label, longest first."""
    seconds: Dict[str, float] = {}
    counts: Counter = Counter()
    for s in sessions:
        label = s.kind.label
        seconds[label] = seconds.get(label, 0.0) + s.duration_seconds
        counts[label] += 1
    items = [BreakdownItem(label, secs, counts[label]) for label, secs in seconds.items()]
    return sorted(items, key=lambda item: item.seconds, reverse=True)


def _bucketize(
    sessions: List[BreakSession], edges: List[datetime], labels: List[str]
) -> List[StatBucket]:
    """Assign sessions to [edges[i], edges[i+1]) windows and sum them."""
    if not labels:
        return []
    starts = np.array([s.started_at.timestamp() for s in sessions], dtype=float)
    durations = np.array([s.duration_seconds for s in sessions], dtype=float)
    edge_ts = np.array([e.timestamp() for e in edges], dtype=float)

    idx = np.searchsorted(edge_ts, starts, side="right") - 1
    in_range = (idx >= 0) & (idx < len(labels))
    idx_in = idx[in_range]

    totals = np.bincount(idx_in, weights=durations[in_range], minlength=len(labels))
    counts = np.bincount(idx_in, minlength=len(labels))

    members: List[List[BreakSession]] = [[] for _ in labels]
    for position, bucket in zip(np.flatnonzero(in_range), idx_in):
        members[int(bucket)].append(sessions[int(position)])

    return [
        StatBucket(
            label=labels[i],
            start=edges[i],
            seconds=float(totals[i]),
            count=int(counts[i]),
            breakdown=breakdown(members[i]),
        )
        for i in range(len(labels))
    ]


class BreakStats:
    """Read-only views over the SessionLedger."""

    def __init__(self, ledger: SessionLedger, clock: Clock = SYSTEM_CLOCK) -> None:
        self.ledger = ledger
        self.clock = clock

    def today_sessions(self) -> List[BreakSession]:
        return self.ledger.sessions_since(_start_of_day(self.clock.now()))

    def today_seconds(self) -> float:
        return float(sum(s.duration_seconds for s in self.today_sessions()))

    def today_earnings(self, config: CompensationConfig) -> float:
        return earnings.earned(self.today_seconds(), config)

    def summarize(self, range_name: str = "week") -> RangeSummary:
        if range_name not in RANGES:
            raise ValueError(f"Unknown range '{range_name}', expected one of {RANGES}")
        now = self.clock.now()
        sessions = self.ledger.all_sessions()

        if range_name == "day":
            buckets = self._day(sessions, now)
        elif range_name == "week":
            monday = _start_of_day(now) - timedelta(days=now.weekday())
            edges = [monday + timedelta(days=i) for i in range(8)]
            labels = [str(edge.day) for edge in edges[:-1]]
            buckets = _bucketize(sessions, edges, labels)
        elif range_name == "month":
            first = _start_of_day(now).replace(day=1)
            days_in_month = calendar.monthrange(now.year, now.month)[1]
            edges = [first + timedelta(days=i) for i in range(days_in_month + 1)]
            labels = [str(i + 1) for i in range(days_in_month)]
            buckets = _bucketize(sessions, edges, labels)
        else:
            edges = [datetime(now.year, m, 1) for m in range(1, 13)]
            edges.append(datetime(now.year + 1, 1, 1))
            labels = [calendar.month_abbr[m] for m in range(1, 13)]
            buckets = _bucketize(sessions, edges, labels)

        return RangeSummary(
            range=range_name,
            buckets=buckets,
            total_seconds=float(np.sum([b.seconds for b in buckets])) if buckets else 0.0,
            session_count=sum(b.count for b in buckets),
        )

    def reward_counts(self) -> Dict[str, int]:
        """Caught fish per rarity, every tier present even when zero."""
        counts = {tier.rarity_label: 0 for tier in FISH_TIERS}
        for reward in self.ledger.rewards():
            counts[reward.rarity_label] = counts.get(reward.rarity_label, 0) + 1
        return counts

    @staticmethod
    def _day(sessions: List[BreakSession], now: datetime) -> List[StatBucket]:
        """One bucket per session started today, newest first."""
        midnight = _start_of_day(now)
        today = sorted(
            (s for s in sessions if s.started_at >= midnight),
            key=lambda s: s.started_at, reverse=True,
        )
        return [
            StatBucket(
                label=s.started_at.strftime("%H:%M"),
                start=s.started_at,
                seconds=s.duration_seconds,
                count=1,
                breakdown=breakdown([s]),
            )
            for s in today
        ]


def format_duration(seconds: Optional[float]) -> str:
    """Compact duration: 1h 5m, 3m 20s or 42s."""
    total = int(seconds or 0)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h {minutes}m"
    if minutes:
        return f"{minutes}m {secs}s"
    return f"{secs}s"
