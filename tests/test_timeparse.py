from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone

import numpy as np
import pandas as pd
import pytest

from callcore.timeparse import calendar_day, format_seconds, parse_duration, parse_instant, round_half_up


@pytest.mark.parametrize("fraction", [0, 0.5 / 86400, 1 / 86400, 45 / 86400, 0.25, 0.999994])
def test_fractional_day_rounds_half_up(fraction):
    expected = int(round_half_up(fraction * 86400))
    result = parse_duration(fraction)
    assert result.parsed
    assert result.seconds == expected
    text = format_seconds(result.seconds)
    hours, minutes, seconds = (int(p) for p in text.split(":"))
    assert len(text) == 8
    assert hours * 3600 + minutes * 60 + seconds == expected


def test_half_second_rounds_up():
    assert parse_duration(0.5 / 86400).seconds == 1


@pytest.mark.parametrize(
    "value, seconds",
    [
        ("00:45", 45),
        ("01:30", 90),
        ("01:02:03", 3723),
        (" 00:00:09 ", 9),
        ("0d 00:04:12", 252),
        ("3d 01:00:00", 3600),
        ("00:04:12.5", 252),
        ("04:12.999", 252),
        ("0d 00:04:00.900", 240),
        (time(0, 2, 30), 150),
        (timedelta(minutes=3), 180),
        (pd.Timedelta(seconds=75), 75),
        (np.float64(60 / 86400), 60),
    ],
)
def test_parse_duration_formats(value, seconds):
    assert parse_duration(value).seconds == seconds


@pytest.mark.parametrize("value", [None, "", "   ", float("nan"), "abc", "1:2:3:4", "-5:00", "00:01.5:00", "00:04:1e2", True, float("inf")])
def test_parse_duration_unparseable_is_zero(value):
    result = parse_duration(value)
    assert result.seconds == 0
    assert not result.parsed


def test_negative_fraction_clamped():
    assert parse_duration(-0.1).seconds == 0


def test_parse_instant_serial():
    assert parse_instant(45931.25347222222) == datetime(2025, 10, 1, 6, 5)


def test_parse_instant_serial_rounds_to_second():
    assert parse_instant(45931 + 0.4 / 86400) == datetime(2025, 10, 1, 0, 0, 0)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("2025-10-01T08:30:00", datetime(2025, 10, 1, 8, 30)),
        ("2025-10-01T08:30:00.000Z", datetime(2025, 10, 1, 8, 30)),
        ("2025-10-01T08:30:00-03:00", datetime(2025, 10, 1, 8, 30)),
        ("2025-10-01", datetime(2025, 10, 1)),
        ("01/10/2025", datetime(2025, 10, 1)),
        ("01/10/2025, 14:10", datetime(2025, 10, 1, 14, 10)),
        ("1.10.2025 14:10:05", datetime(2025, 10, 1, 14, 10, 5)),
        ("31-12-2025 23:59", datetime(2025, 12, 31, 23, 59)),
    ],
)
def test_parse_instant_strings(text, expected):
    assert parse_instant(text) == expected


def test_parse_instant_native_cells():
    aware = datetime(2025, 10, 1, 8, 0, tzinfo=timezone.utc)
    assert parse_instant(aware) == datetime(2025, 10, 1, 8, 0)
    assert parse_instant(pd.Timestamp("2025-10-01 08:00", tz="America/Maceio")) == datetime(2025, 10, 1, 8, 0)
    assert parse_instant(date(2025, 10, 1)) == datetime(2025, 10, 1)


@pytest.mark.parametrize("value", [None, "", "not a date", "32/13/2025", 0, -3, pd.NaT, float("nan")])
def test_parse_instant_rejects(value):
    assert parse_instant(value) is None


@pytest.mark.parametrize("seconds, text", [(0, "00:00:00"), (-4, "00:00:00"), (None, "00:00:00"), (45, "00:00:45"), (3723, "01:02:03"), (90000, "25:00:00")])
def test_format_seconds(seconds, text):
    assert format_seconds(seconds) == text


def test_calendar_day():
    assert calendar_day(datetime(2025, 1, 5, 23, 59)) == "2025-01-05"
    assert calendar_day(None) is None
