"""
Session Orchestrator — ties the timer, detector, ledger, earnings and fish
together.

Every way a break can end (manual stop, fake update / fake coding screen
closed, auto-detected return to a work app) funnels into the same sequence:
record → earnings → fish → reset the work timer → publish the result.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Deque, Optional

from moyu.clock import SYSTEM_CLOCK, Clock
from moyu.data.ledger import SessionLedger
from moyu.data.models import (
    BreakKind,
    BreakResult,
    BreakSession,
    BreakTag,
    CompensationConfig,
    Reward,
)
from moyu.errors import StorageUnavailable
from moyu.services import earnings
from moyu.services.detector import ActivityDetector
from moyu.services.rewards import RewardResolver
from moyu.services.settings import DEFAULT_WORK_INTERVAL_MIN, SettingsService
from moyu.services.work_timer import WorkTimer

logger = logging.getLogger(__name__)

Notifier = Callable[[str, str], None]


@dataclass
class _ActiveBreak:
    kind: BreakKind
    started_mono: float
    started_at: datetime


@dataclass
class _BreakEnd:
    kind: BreakKind
    duration_seconds: float
    started_at: datetime
    result: Optional[BreakResult] = None


class SessionOrchestrator:
    """
    Owns the WorkTimer and ActivityDetector for the lifetime of the app.

    Presentation hooks (all optional, all fire-and-forget):
      on_result(BreakResult): a break ended
      on_break_due(): the work interval is over
      on_progress(percent): work timer progress
      notifier(title, body): desktop notification
    """

    def __init__(
        self,
        ledger: SessionLedger,
        settings: SettingsService,
        resolver: RewardResolver,
        foreground_query,
        clock: Clock = SYSTEM_CLOCK,
        on_result: Optional[Callable[[BreakResult], None]] = None,
        on_break_due: Optional[Callable[[], None]] = None,
        on_progress: Optional[Callable[[float], None]] = None,
        notifier: Optional[Notifier] = None,
    ) -> None:
        self.ledger = ledger
        self.settings = settings
        self.resolver = resolver
        self.clock = clock
        self.on_result = on_result
        self.on_break_due = on_break_due
        self.notifier = notifier

        self.timer = WorkTimer(
            interval_target_ms=int(self._work_interval_minutes() * 60 * 1000),
            clock=clock,
            on_break_due=self._handle_break_due,
            on_progress=on_progress,
        )
        self.detector = ActivityDetector(
            foreground_query,
            work_apps=self._current_work_apps,
            on_loaf_ended=self._handle_loaf_ended,
            clock=clock,
        )

        self.active_break: Optional[_ActiveBreak] = None
        self._pending: Deque[_BreakEnd] = deque()
        self._draining = False

    # ── Lifecycle ───────────────────────────────────────────────────────────

    def start(self) -> None:
        self.timer.start()
        if self._tracking_enabled():
            self.detector.enable()
        logger.info("Session orchestrator started.")

    def shutdown(self) -> None:
        self.timer.stop()
        self.detector.disable()
        logger.info("Session orchestrator stopped.")

    # ── Explicit breaks ─────────────────────────────────────────────────────

    def start_break(self, kind: BreakKind) -> None:
        """Begin a break the user chose (poop timer, fake update, fake coding)."""
        if self.active_break is not None:
            raise RuntimeError(
                f"Cannot start a break: '{self.active_break.kind.label}' is "
                f"already running."
            )
        if kind.tag == BreakTag.AUTO_DETECTED:
            raise ValueError("Auto-detected breaks are started by the detector.")
        self.active_break = _ActiveBreak(
            kind=kind,
            started_mono=self.clock.monotonic(),
            started_at=self.clock.now(),
        )
        # Work time restarts from zero and stays frozen until the break ends
        self.timer.reset()
        self.timer.pause()
        logger.info("Break started: %s", kind.label)

    def finish_break(self) -> Optional[BreakResult]:
        """End the running explicit break, timing it ourselves."""
        if self.active_break is None:
            raise RuntimeError("No break is running.")
        active = self.active_break
        self.active_break = None
        duration = max(self.clock.monotonic() - active.started_mono, 0.0)
        return self._submit(_BreakEnd(active.kind, duration, active.started_at))

    def record_break(
        self, kind: BreakKind, duration_seconds: float
    ) -> Optional[BreakResult]:
        """
        Record a break whose duration was measured elsewhere.

        A non-positive duration records nothing but still restarts the work
        timer, as the user is back at work either way.
        """
        if duration_seconds <= 0:
            self.timer.reset()
            return None
        started_at = self.clock.now() - timedelta(seconds=duration_seconds)
        return self._submit(_BreakEnd(kind, float(duration_seconds), started_at))

    # ── Prompt / collection / switches ──────────────────────────────────────

    def acknowledge_break_due(self) -> None:
        """The break-due prompt was dismissed without starting a break."""
        self.timer.reset()

    def collect_reward(self, reward: Reward) -> bool:
        """Put a caught fish into the collection. False if it could not be saved."""
        try:
            self.ledger.add_reward(reward)
        except StorageUnavailable as exc:
            logger.warning("Could not save %s: %s", reward.name, exc)
            return False
        return True

    def set_tracking_enabled(self, enabled: bool) -> bool:
        try:
            self.settings.set_tracking_enabled(enabled)
        except StorageUnavailable as exc:
            logger.warning("Tracking switch not persisted: %s", exc)
        if enabled:
            self.detector.enable()
        else:
            self.detector.disable()
        logger.info("Auto-loafing detection %s.", "enabled" if enabled else "disabled")
        return enabled

    def set_work_interval(self, minutes: float) -> float:
        """Change how long a work interval lasts; applies to the running timer."""
        try:
            minutes = self.settings.set_work_interval_minutes(minutes)
        except StorageUnavailable as exc:
            logger.warning("Work interval not persisted: %s", exc)
        self.timer.set_interval_target(int(float(minutes) * 60 * 1000))
        logger.info("Work interval set to %s min.", minutes)
        return minutes

    # ── Break-end pipeline ──────────────────────────────────────────────────

    def _submit(self, event: _BreakEnd) -> Optional[BreakResult]:
        """Queue a break end and drain the queue one event at a time."""
        self._pending.append(event)
        if self._draining:
            # A callback ended another break; the outer drain picks it up
            return None
        self._draining = True
        try:
            while self._pending:
                self._process(self._pending.popleft())
        finally:
            self._draining = False
        return event.result

    def _process(self, event: _BreakEnd) -> None:
        now = self.clock.now()
        session = BreakSession(
            id=int(now.timestamp() * 1000),
            kind=event.kind,
            started_at=event.started_at,
            duration_seconds=event.duration_seconds,
            recorded_on=now.date().isoformat(),
        )

        recorded = True
        try:
            session = self.ledger.append(session)
        except StorageUnavailable as exc:
            recorded = False
            logger.warning("Break not saved to history: %s", exc)

        config = self._compensation()
        earned = earnings.earned(event.duration_seconds, config)
        reward = self.resolver.resolve(event.duration_seconds)

        self.timer.reset()

        result = BreakResult(
            kind=event.kind,
            duration_seconds=event.duration_seconds,
            earned=earned,
            reward=reward,
            session=session,
            recorded=recorded,
            currency_symbol=config.currency_symbol,
        )
        event.result = result
        self._publish(result)

    def _publish(self, result: BreakResult) -> None:
        if self.notifier:
            title, body = describe_result(result)
            try:
                self.notifier(title, body)
            except Exception:
                logger.exception("Notifier failed.")
        if self.on_result:
            try:
                self.on_result(result)
            except Exception:
                logger.exception("Result handler failed.")

    # ── Callbacks from timer / detector ─────────────────────────────────────

    def _handle_break_due(self) -> None:
        if self.notifier:
            try:
                self.notifier("Time to loaf!", "You've worked a full interval. Take a break.")
            except Exception:
                logger.exception("Notifier failed.")
        if self.on_break_due:
            try:
                self.on_break_due()
            except Exception:
                logger.exception("Break-due handler failed.")

    def _handle_loaf_ended(self, app_name: str, duration_seconds: float) -> None:
        self.record_break(BreakKind.auto_detected(app_name), duration_seconds)

    # ── Helpers ─────────────────────────────────────────────────────────────

    def _current_work_apps(self):
        try:
            return self.settings.work_apps()
        except StorageUnavailable as exc:
            logger.debug("Whitelist unavailable this tick: %s", exc)
            return []

    def _work_interval_minutes(self) -> float:
        try:
            return self.settings.work_interval_minutes()
        except StorageUnavailable as exc:
            logger.warning("Work interval unavailable, using default: %s", exc)
            return DEFAULT_WORK_INTERVAL_MIN

    def _tracking_enabled(self) -> bool:
        try:
            return self.settings.tracking_enabled()
        except StorageUnavailable:
            return True

    def _compensation(self) -> CompensationConfig:
        try:
            return self.settings.compensation()
        except StorageUnavailable as exc:
            logger.warning("Compensation settings unavailable: %s", exc)
            return CompensationConfig()


def describe_result(result: BreakResult) -> tuple:
    """Notification title and body for a finished break."""
    if result.kind.tag == BreakTag.AUTO_DETECTED:
        title = "Loafing ended"
        body = (f"Just loafed in {result.kind.app_name} for "
                f"{round(result.duration_seconds)} seconds")
    else:
        title = "Loafing complete!"
        body = (f"{result.kind.label} finished\n"
                f"⏱️ Duration: {result.duration_seconds / 60:.2f} min\n"
                f"💰 Earned: {result.currency_symbol}{result.earned:.2f}")
    if result.reward:
        body += (f"\n🎣 Hooked a {result.reward.display_glyph} "
                 f"{result.reward.name} ({result.reward.rarity_label})!")
    else:
        body += "\n🎣 Nothing biting..."
    return title, body


# ---------------------------------------------------------------------------
# Explanation
# ---------------------------------------------------------------------------
# What this file does:
#   The one place where a finished break turns into history, money and a
#   fish. Also owns the lifecycle of the work timer and the detector.
#
# Pipeline (_process), in order:
#   1. duration already known
#   2-3. SessionLedger.append() writes history + running total
#        (StorageUnavailable → logged, result.recorded = False)
#   4. earnings.earned()
#   5. RewardResolver.resolve()
#   6. WorkTimer.reset()
#   7. notifier(title, body) and on_result(BreakResult)
#
# Data flow:
#   UI stop button ─┐
#   fake screen ────┼→ _submit() → queue → _process() → presentation
#   detector ───────┘
#   Break ends are drained one at a time, so two ends arriving together
#   are written to the ledger one after the other.
