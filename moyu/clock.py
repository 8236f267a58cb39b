"""
Clock — the single time source for the tracking core.

Wall time (``now``) stamps records; monotonic time measures durations so a
system clock change mid-break cannot produce a negative or huge break.
"""

from __future__ import annotations

import time
from datetime import datetime


class Clock:
    """System clock. Tests substitute an object with the same two methods."""

    def now(self) -> datetime:
        return datetime.now()

    def monotonic(self) -> float:
        return time.monotonic()


SYSTEM_CLOCK = Clock()
