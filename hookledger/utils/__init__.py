"""Utility functions for hookledger."""

from .timeparse import TIME_LAYOUTS, TimeFormatError, parse_time

__all__ = [
    "TIME_LAYOUTS",
    "TimeFormatError",
    "parse_time",
]
