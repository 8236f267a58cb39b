"""
Data models for Moyu.

Plain dataclasses shared by the ledger, the services and whatever
presentation layer sits on top. Records that end up in the store know how
to turn themselves into JSON-friendly dicts and back.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class BreakTag(str, Enum):
    MANUAL_POOP = "manual_poop"
    FAKE_UPDATE = "fake_update"
    FAKE_CODING = "fake_coding"
    AUTO_DETECTED = "auto_detected"


_TAG_LABELS = {
    BreakTag.MANUAL_POOP: "💩 Paid poop",
    BreakTag.FAKE_UPDATE: "🖥️ Fake update",
    BreakTag.FAKE_CODING: "⌨️ Fake coding",
}


@dataclass(frozen=True)
class BreakKind:
    """
    What kind of break a session was.

    ``app_name`` is only meaningful for AUTO_DETECTED breaks, where it names
    the application the user was loafing in.
    """
    tag: BreakTag
    app_name: Optional[str] = None

    @classmethod
    def manual_poop(cls) -> "BreakKind":
        return cls(BreakTag.MANUAL_POOP)

    @classmethod
    def fake_update(cls) -> "BreakKind":
        return cls(BreakTag.FAKE_UPDATE)

    @classmethod
    def fake_coding(cls) -> "BreakKind":
        return cls(BreakTag.FAKE_CODING)

    @classmethod
    def auto_detected(cls, app_name: str) -> "BreakKind":
        return cls(BreakTag.AUTO_DETECTED, app_name)

    @property
    def label(self) -> str:
        if self.tag == BreakTag.AUTO_DETECTED:
            return f"👀 {self.app_name or 'Unknown app'}"
        return _TAG_LABELS[self.tag]

    def to_dict(self) -> dict:
        data = {"tag": self.tag.value}
        if self.app_name is not None:
            data["app_name"] = self.app_name
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "BreakKind":
        return cls(BreakTag(data["tag"]), data.get("app_name"))


@dataclass(frozen=True)
class BreakSession:
    """One completed break. Created at break end, never edited afterwards."""
    id: int
    kind: BreakKind
    started_at: datetime
    duration_seconds: float
    recorded_on: str  # YYYY-MM-DD, used for day buckets

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "kind": self.kind.to_dict(),
            "started_at": self.started_at.isoformat(),
            "duration_seconds": self.duration_seconds,
            "recorded_on": self.recorded_on,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "BreakSession":
        return cls(
            id=int(data["id"]),
            kind=BreakKind.from_dict(data["kind"]),
            started_at=datetime.fromisoformat(data["started_at"]),
            duration_seconds=float(data["duration_seconds"]),
            recorded_on=data["recorded_on"],
        )


class TimerStatus:
    RUNNING = "running"
    PAUSED_FOR_BREAK = "paused_for_break"


@dataclass
class WorkCycleState:
    """Progress through the current work interval."""
    elapsed_ms: int = 0
    started_at: Optional[datetime] = None
    interval_target_ms: int = 3_600_000
    status: str = TimerStatus.RUNNING
    break_due_emitted: bool = False


@dataclass
class DetectorState:
    """Loafing detection state. ``loaf_started_at`` is a monotonic reading."""
    is_loafing: bool = False
    loaf_started_at: Optional[float] = None
    last_observed_app: str = ""


@dataclass(frozen=True)
class CompensationConfig:
    monthly_salary: Optional[float] = None
    work_days_per_month: Optional[float] = 22
    work_hours_per_day: Optional[float] = 8
    currency_symbol: str = "¥"


@dataclass(frozen=True)
class RewardTier:
    rarity_label: str
    display_glyph: str
    name: str
    catch_weight: int
    minimum_duration_minutes: float


@dataclass(frozen=True)
class Reward:
    """A caught fish."""
    id: int
    rarity_label: str
    display_glyph: str
    name: str
    caught_at: datetime
    session_duration_seconds: float

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "rarity": self.rarity_label,
            "emoji": self.display_glyph,
            "type": self.name,
            "caught_at": self.caught_at.isoformat(),
            "session_duration": self.session_duration_seconds,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Reward":
        return cls(
            id=int(data["id"]),
            rarity_label=data["rarity"],
            display_glyph=data["emoji"],
            name=data["type"],
            caught_at=datetime.fromisoformat(data["caught_at"]),
            session_duration_seconds=float(data["session_duration"]),
        )


@dataclass
class BreakResult:
    """Everything the presentation layer needs once a break has ended."""
    kind: BreakKind
    duration_seconds: float
    earned: float
    reward: Optional[Reward] = None
    session: Optional[BreakSession] = None
    recorded: bool = True
    currency_symbol: str = "¥"


# ---------------------------------------------------------------------------
# Explanation
# ---------------------------------------------------------------------------
# What this file does:
#   Defines the shapes passed between the ledger, the services and the UI.
#
# Key classes:
#   - BreakKind: tagged variant (manual poop / fake update / fake coding /
#     auto-detected + app name). Consumers switch on ``tag`` instead of
#     parsing the display label.
#   - BreakSession: a finished break as stored in the history list.
#   - WorkCycleState / DetectorState: the mutable state owned by the work
#     timer and the activity detector respectively.
#   - RewardTier / Reward: the fish table and a caught fish.
#   - BreakResult: the payload published when a break ends.
#
# Data flow:
#   Detector / explicit stop → Orchestrator builds BreakSession →
#   SessionLedger.append() → to_dict() → JSON in the key-value store.
