"""Structured logging configuration for hookledger."""

from __future__ import annotations

import logging
import os
from typing import Optional

logger = logging.getLogger("hookledger.server")

# attributes every LogRecord carries; anything else arrived through ``extra``
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None)).keys()
) | {"message", "asctime"}


class ExtraFormatter(logging.Formatter):
    """Append ``extra={...}`` fields to the line as ``key=value`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = {
            key: value
            for key, value in vars(record).items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        }
        if not extras:
            return line
        return line + " | " + " ".join(f"{key}={value!r}" for key, value in sorted(extras.items()))


def configure_logging(level: Optional[str] = None) -> None:
    """Install one stream handler on the root logger, once.

    The level comes from ``level`` or ``LOG_LEVEL`` (default ``INFO``).
    """
    root = logging.getLogger()
    if any(isinstance(h.formatter, ExtraFormatter) for h in root.handlers):
        return

    log_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    numeric_level = getattr(logging, log_level, logging.INFO)

    handler = logging.StreamHandler()
    handler.setFormatter(
        ExtraFormatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root.addHandler(handler)
    root.setLevel(numeric_level)

    # Supabase talks to PostgREST through httpx
    for noisy in ("httpx", "httpcore", "hpack", "postgrest"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
