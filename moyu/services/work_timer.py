"""
Work Timer — counts the current work interval and says when a break is due.

A QTimer calls tick() once per minute on the Qt event loop. When the
accumulated work time reaches the target the timer pauses itself and fires
the break-due callback once; it stays paused until reset() is called at the
end of the next break (or when the break prompt is dismissed).
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from PySide6.QtCore import QTimer

from moyu.clock import SYSTEM_CLOCK, Clock
from moyu.data.models import TimerStatus, WorkCycleState

logger = logging.getLogger(__name__)

DEFAULT_WORK_INTERVAL_MS = 60 * 60 * 1000
TICK_INTERVAL_MS = 60 * 1000
BREAK_DUE_INDICATOR = "🔔"


class WorkTimer:
    """
    Two states: RUNNING and PAUSED_FOR_BREAK.

    Callbacks are injected so the timer knows nothing about the UI:
      on_break_due(): threshold crossed (once per crossing)
      on_progress(percent): after every tick and every reset
    """

    def __init__(
        self,
        interval_target_ms: int = DEFAULT_WORK_INTERVAL_MS,
        tick_interval_ms: int = TICK_INTERVAL_MS,
        clock: Clock = SYSTEM_CLOCK,
        on_break_due: Optional[Callable[[], None]] = None,
        on_progress: Optional[Callable[[float], None]] = None,
    ) -> None:
        self.clock = clock
        self.tick_interval_ms = tick_interval_ms
        self.on_break_due = on_break_due
        self.on_progress = on_progress
        self.state = WorkCycleState(
            started_at=clock.now(), interval_target_ms=interval_target_ms,
        )

        self._qtimer = QTimer()
        self._qtimer.setInterval(tick_interval_ms)
        self._qtimer.timeout.connect(self.tick)

    # ── Public API ──────────────────────────────────────────────────────────

    @property
    def status(self) -> str:
        return self.state.status

    def start(self) -> None:
        """Reset the interval and start ticking."""
        self.reset()
        self._qtimer.start()
        logger.info(
            "Work timer started: break due every %.0f min",
            self.state.interval_target_ms / 60000,
        )

    def stop(self) -> None:
        self._qtimer.stop()

    def is_active(self) -> bool:
        return self._qtimer.isActive()

    def tick(self) -> None:
        if self.state.status != TimerStatus.RUNNING:
            return
        self.state.elapsed_ms += self.tick_interval_ms
        self._publish_progress()

        if (self.state.elapsed_ms >= self.state.interval_target_ms
                and not self.state.break_due_emitted):
            self.state.status = TimerStatus.PAUSED_FOR_BREAK
            self.state.break_due_emitted = True
            logger.info("Work interval complete after %d ms; break is due.",
                        self.state.elapsed_ms)
            if self.on_break_due:
                self.on_break_due()

    def reset(self) -> None:
        """Back to RUNNING with zero elapsed. Safe to call repeatedly."""
        self.state.status = TimerStatus.RUNNING
        self.state.elapsed_ms = 0
        self.state.started_at = self.clock.now()
        self.state.break_due_emitted = False
        self._publish_progress()

    def pause(self) -> None:
        """Stop counting work time while an explicit break is running."""
        self.state.status = TimerStatus.PAUSED_FOR_BREAK

    def set_interval_target(self, interval_target_ms: int) -> None:
        self.state.interval_target_ms = max(int(interval_target_ms), self.tick_interval_ms)

    # ── Projections ─────────────────────────────────────────────────────────

    def progress_percent(self) -> float:
        if self.state.interval_target_ms <= 0:
            return 100.0
        return min(self.state.elapsed_ms / self.state.interval_target_ms * 100, 100.0)

    def minutes_remaining(self) -> int:
        remaining_ms = max(self.state.interval_target_ms - self.state.elapsed_ms, 0)
        return round(remaining_ms / 60000)

    def indicator_text(self) -> str:
        """Tray title: minutes left, or a bell once the break is due."""
        minutes = self.minutes_remaining()
        return f"{minutes}m" if minutes > 0 else BREAK_DUE_INDICATOR

    # ── Internal ────────────────────────────────────────────────────────────

    def _publish_progress(self) -> None:
        if self.on_progress:
            try:
                self.on_progress(self.progress_percent())
            except Exception:
                logger.exception("Progress callback failed.")


# ---------------------------------------------------------------------------
# Explanation
# ---------------------------------------------------------------------------
# What this file does:
#   Counts work minutes with a QTimer and fires a callback once the
#   configured interval (default 60 min) is reached.
#
# Key pieces:
#   - tick(): +1 minute while RUNNING; crossing the target flips the state
#     to PAUSED_FOR_BREAK and calls on_break_due exactly once.
#   - reset(): RUNNING, zero elapsed, fresh started_at. Several trigger
#     paths (manual stop, fake update closed, auto-detected break, prompt
#     dismissed) may call it; repeated calls land on the same state.
#   - progress_percent()/indicator_text(): read-only projections for a tray
#     or menu-bar indicator.
#
# Data flow:
#   QTimer.timeout → tick() → on_progress(percent) → presentation
#                          → on_break_due() → orchestrator → prompt
