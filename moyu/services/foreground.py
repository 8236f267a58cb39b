"""
Foreground application query.

Asks the OS which application currently has focus. macOS goes through
AppleScript (``osascript``), Linux/X11 through ``xdotool``. Every call is a
subprocess bounded by a short timeout so a hung OS call cannot stall the
detector's poll loop.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys
from typing import List, Optional

from moyu.errors import TransientQueryFailure, UnsupportedPlatform

logger = logging.getLogger(__name__)

QUERY_TIMEOUT_SEC = 1.5

_MAC_FRONTMOST = [
    "osascript", "-e",
    'tell application "System Events" to get name of first application '
    "process whose frontmost is true",
]
_X11_ACTIVE_CLASS = ["xdotool", "getactivewindow", "getwindowclassname"]


def _command_for_platform(platform: str) -> Optional[List[str]]:
    if platform == "darwin":
        return _MAC_FRONTMOST
    if platform.startswith("linux") and shutil.which("xdotool"):
        return _X11_ACTIVE_CLASS
    return None


class ForegroundAppQuery:
    """Callable collaborator: ``query()`` returns the app name or None."""

    def __init__(
        self,
        platform: Optional[str] = None,
        timeout: float = QUERY_TIMEOUT_SEC,
    ) -> None:
        self.platform = platform or sys.platform
        self.timeout = timeout
        self._command = _command_for_platform(self.platform)
        if self._command is None:
            logger.warning(
                "Foreground app detection is not supported on %s.", self.platform
            )

    @property
    def is_supported(self) -> bool:
        return self._command is not None

    def query(self) -> Optional[str]:
        """
        Name of the frontmost application, or None if there is none.

        Raises UnsupportedPlatform when no query exists for this OS and
        TransientQueryFailure when the query errors or times out.
        """
        if self._command is None:
            raise UnsupportedPlatform(self.platform)
        try:
            completed = subprocess.run(
                self._command,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=True,
            )
        except subprocess.TimeoutExpired as exc:
            raise TransientQueryFailure(
                f"Foreground query timed out after {self.timeout}s"
            ) from exc
        except (subprocess.CalledProcessError, OSError) as exc:
            raise TransientQueryFailure(f"Foreground query failed: {exc}") from exc

        name = completed.stdout.strip()
        return name or None
