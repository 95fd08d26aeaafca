from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from hookledger.utils.timeparse import TIME_LAYOUTS, TimeFormatError, parse_time

UTC = timezone.utc


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2024-05-01T10:00:00+02:00", datetime(2024, 5, 1, 8, 0, tzinfo=UTC)),
        ("2024-05-01T10:00:00.250+00:00", datetime(2024, 5, 1, 10, 0, 0, 250000, tzinfo=UTC)),
        ("2024-05-01T10:00:00Z", datetime(2024, 5, 1, 10, 0, tzinfo=UTC)),
        ("2024-05-01T10:00:00", datetime(2024, 5, 1, 10, 0, tzinfo=UTC)),
        ("2024-05-01 10:00:00 UTC", datetime(2024, 5, 1, 10, 0, tzinfo=UTC)),
        ("2024-05-01 10:00:00", datetime(2024, 5, 1, 10, 0, tzinfo=UTC)),
    ],
)
def test_parse_time_accepts_known_layouts(value: str, expected: datetime) -> None:
    parsed = parse_time(value)
    assert parsed.tzinfo is not None
    assert parsed == expected


def test_parse_time_keeps_offset() -> None:
    parsed = parse_time("2024-05-01T10:00:00+02:00")
    assert parsed.utcoffset() == timedelta(hours=2)


def test_parse_time_strips_json_quotes() -> None:
    assert parse_time('"2024-05-01 10:00:00 UTC"') == datetime(2024, 5, 1, 10, 0, tzinfo=UTC)


def test_parse_time_truncates_nanoseconds() -> None:
    parsed = parse_time("2024-05-03T09:30:00.123456789Z")
    assert parsed.microsecond == 123456


def test_parse_time_rejects_unknown_layout() -> None:
    with pytest.raises(TimeFormatError) as excinfo:
        parse_time("not-a-date")
    assert excinfo.value.value == "not-a-date"
    assert isinstance(excinfo.value, ValueError)


def test_layout_order_is_fixed() -> None:
    assert [name for name, _, _ in TIME_LAYOUTS] == [
        "rfc3339",
        "rfc3339_fractional",
        "iso_zulu",
        "iso_unzoned",
        "gitlab_utc",
        "space_unzoned",
    ]
