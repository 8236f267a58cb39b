"""
Activity Detector — infers breaks from the foreground application.

Every few seconds the detector asks which app has focus. Leaving the
whitelisted "work" apps starts a loafing window; coming back to one ends it
and, if the window lasted long enough, reports a completed break.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence

from PySide6.QtCore import QTimer

from moyu.clock import SYSTEM_CLOCK, Clock
from moyu.data.models import DetectorState
from moyu.errors import TransientQueryFailure, UnsupportedPlatform

logger = logging.getLogger(__name__)

POLL_INTERVAL_MS = 5000
MIN_LOAF_SECONDS = 5.0


def is_work_app(app_name: str, work_apps: Sequence[str]) -> bool:
    """Case-insensitive substring match ("Google Chrome" matches "chrome")."""
    name = app_name.lower()
    for entry in work_apps:
        needle = entry.strip().lower()
        if needle and needle in name:
            return True
    return False


class ActivityDetector:
    """
    Polling loop over a foreground-app query.

    ``work_apps`` is a zero-argument callable returning the current
    whitelist, so edits in settings apply on the next tick.
    ``on_loaf_ended(app_name, duration_seconds)`` receives finished breaks.
    """

    def __init__(
        self,
        query,
        work_apps: Callable[[], List[str]],
        on_loaf_ended: Optional[Callable[[str, float], None]] = None,
        clock: Clock = SYSTEM_CLOCK,
        poll_interval_ms: int = POLL_INTERVAL_MS,
        min_loaf_seconds: float = MIN_LOAF_SECONDS,
    ) -> None:
        self.query = query
        self.work_apps = work_apps
        self.on_loaf_ended = on_loaf_ended
        self.clock = clock
        self.min_loaf_seconds = min_loaf_seconds
        self.state = DetectorState()
        self.enabled = False
        self._busy = False

        self._qtimer = QTimer()
        self._qtimer.setInterval(poll_interval_ms)
        self._qtimer.timeout.connect(self.poll)

    # ── Master switch ───────────────────────────────────────────────────────

    @property
    def is_supported(self) -> bool:
        return bool(getattr(self.query, "is_supported", True))

    def enable(self) -> None:
        if not self.is_supported:
            logger.warning("Activity detector stays idle: platform unsupported.")
            return
        self.enabled = True
        self._qtimer.start()
        logger.info("Activity detector enabled (every %d ms).", self._qtimer.interval())

    def disable(self) -> None:
        """Stop polling. An in-flight loafing window is discarded, not recorded."""
        self._qtimer.stop()
        self.enabled = False
        if self.state.is_loafing:
            logger.info("Discarding in-flight loafing window in %s.",
                        self.state.last_observed_app)
        self.state.is_loafing = False
        self.state.loaf_started_at = None

    # ── Polling ─────────────────────────────────────────────────────────────

    def poll(self) -> None:
        """One tick: sample the foreground app and feed it to observe()."""
        if not self.enabled or self._busy:
            return
        self._busy = True
        try:
            try:
                app_name = self.query.query()
            except TransientQueryFailure as exc:
                logger.debug("Skipping detector tick: %s", exc)
                return
            except UnsupportedPlatform:
                logger.warning("Foreground query unsupported; detector going idle.")
                self.disable()
                return
            if not app_name:
                return
            self.observe(app_name)
        finally:
            self._busy = False

    def observe(self, app_name: str) -> None:
        """Apply one successful sample to the loafing state machine."""
        whitelist = self.work_apps() or []
        working = is_work_app(app_name, whitelist)

        if working:
            if self.state.is_loafing:
                self._end_loafing()
        elif not self.state.is_loafing and whitelist:
            # Empty whitelist means tracking is effectively off
            self.state.is_loafing = True
            self.state.loaf_started_at = self.clock.monotonic()
            logger.debug("Loafing started in %s", app_name)

        self.state.last_observed_app = app_name

    # ── Internal ────────────────────────────────────────────────────────────

    def _end_loafing(self) -> None:
        started = self.state.loaf_started_at
        self.state.is_loafing = False
        self.state.loaf_started_at = None
        if started is None:
            return

        duration = self.clock.monotonic() - started
        if duration <= self.min_loaf_seconds:
            logger.debug("Ignoring %.1fs loafing blip.", duration)
            return

        app_name = self.state.last_observed_app
        logger.info("Detected %.0fs of loafing in %s", duration, app_name)
        if self.on_loaf_ended:
            self.on_loaf_ended(app_name, duration)


# ---------------------------------------------------------------------------
# Explanation
# ---------------------------------------------------------------------------
# What this file does:
#   Watches the foreground app every 5 seconds and turns "away from work
#   apps" stretches into break records.
#
# Transition table (observe):
#   not loafing + work app      → nothing
#   not loafing + other app     → start loafing (only if whitelist non-empty)
#   loafing     + other app     → nothing
#   loafing     + work app      → end loafing; report if longer than 5s
#   last_observed_app is updated after every successful sample, so the
#   reported app is the last non-work app seen before returning.
#
# Failure handling:
#   Query errors/timeouts skip the tick. An unsupported platform never
#   enables the QTimer at all.
#
# Overlapping ticks:
#   The query runs synchronously on the Qt thread with a short timeout.
#   _busy stays set for the whole poll, so a poll() reached again from
#   inside on_loaf_ended (a notifier that spins the event loop, say) is
#   skipped instead of sampling twice.
