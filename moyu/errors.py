"""
Error taxonomy for the tracking core.

None of these are fatal: callers catch them at the seams where the core
degrades (skip a tick, drop a ledger write, report zero earnings).
"""

from __future__ import annotations


class MoyuError(Exception):
    """Base class for every error raised by the tracking core."""


class TransientQueryFailure(MoyuError):
    """The foreground-application query failed or timed out."""


class StorageUnavailable(MoyuError):
    """The persistent store could not be read or written."""


class ConfigurationMissing(MoyuError):
    """Compensation settings are absent or unusable."""


class UnsupportedPlatform(MoyuError):
    """The foreground-application query has no implementation here."""
