"""
Tests for time-of-day parsing.
"""

import pytest

from slotscheduler.domain.exceptions import InvalidTimeSpec
from slotscheduler.domain.time_of_day import format_minutes, parse_time_of_day


@pytest.mark.parametrize(
    "value,expected",
    [
        ("00:00", 0),
        ("09:00", 540),
        ("9:05", 545),
        ("23:59", 1439),
        (" 12:30 ", 750),
        (0, 0),
        (1439, 1439),
    ],
)
def test_parse_valid(value, expected):
    assert parse_time_of_day(value) == expected


@pytest.mark.parametrize("value", ["24:00", "25:00", "12:60", "9am", "", "12:5", -1, 1440, True, 9.5, None])
def test_parse_invalid(value):
    with pytest.raises(InvalidTimeSpec):
        parse_time_of_day(value)


def test_end_of_day_only_when_allowed():
    """24:00 and 1440 mean end of day only where that is allowed."""
    assert parse_time_of_day("24:00", allow_end_of_day=True) == 1440
    assert parse_time_of_day(1440, allow_end_of_day=True) == 1440

    with pytest.raises(InvalidTimeSpec):
        parse_time_of_day(1441, allow_end_of_day=True)


def test_format_minutes():
    assert format_minutes(0) == "00:00"
    assert format_minutes(545) == "09:05"
    assert format_minutes(1439) == "23:59"
