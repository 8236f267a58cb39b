"""Moyu — break tracking, earnings and fish rewards for the idle worker."""

__version__ = "0.3.0"
