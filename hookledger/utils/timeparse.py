"""Timestamp parsing for GitLab webhook payloads.

GitLab is not consistent about how it renders instants: the same instance may
send RFC 3339 strings in one hook and ``2006-01-02 15:04:05 UTC`` in another.
``parse_time`` tries a fixed list of layouts in order and returns the first
match.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Optional, Tuple

# (name, strptime format, zone applied when the format carries none)
TIME_LAYOUTS: Tuple[Tuple[str, str, Optional[timezone]], ...] = (
    ("rfc3339", "%Y-%m-%dT%H:%M:%S%z", None),
    ("rfc3339_fractional", "%Y-%m-%dT%H:%M:%S.%f%z", None),
    ("iso_zulu", "%Y-%m-%dT%H:%M:%SZ", timezone.utc),
    ("iso_unzoned", "%Y-%m-%dT%H:%M:%S", timezone.utc),
    ("gitlab_utc", "%Y-%m-%d %H:%M:%S UTC", timezone.utc),
    ("space_unzoned", "%Y-%m-%d %H:%M:%S", timezone.utc),
)

# strptime's %f stops at microseconds; GitLab can send up to nanoseconds.
_LONG_FRACTION = re.compile(r"(\.\d{6})\d+")


class TimeFormatError(ValueError):
    """Raised when a timestamp matches none of the known layouts."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"unrecognized timestamp format: {value!r}")


def parse_time(value: str) -> datetime:
    """Parse a GitLab timestamp into an aware ``datetime``.

    Surrounding double quotes are stripped first, so raw JSON tokens such as
    ``'"2024-05-01T10:00:00Z"'`` are accepted as well as plain strings.
    Layouts without a zone marker are read as UTC.

    Raises:
        TimeFormatError: none of ``TIME_LAYOUTS`` matched.

    Example:
        >>> parse_time("2024-05-01 10:00:00 UTC").isoformat()
        '2024-05-01T10:00:00+00:00'
    """
    text = value.strip('"')
    candidate = _LONG_FRACTION.sub(r"\1", text)
    for _name, layout, zone in TIME_LAYOUTS:
        try:
            parsed = datetime.strptime(candidate, layout)
        except ValueError:
            continue
        if zone is not None:
            parsed = parsed.replace(tzinfo=zone)
        return parsed
    raise TimeFormatError(value)
