"""
Parsing of local time-of-day values.

Times are accepted either as ``"HH:mm"`` strings (24-hour clock) or as
integer minutes since local midnight.
"""

import re
from typing import Union

from .exceptions import InvalidTimeSpec

MINUTES_PER_DAY = 24 * 60

TimeOfDay = Union[str, int]

_TIME_PATTERN = re.compile(r"^([01]?[0-9]|2[0-3]):([0-5][0-9])$")


def parse_time_of_day(value: TimeOfDay, *, allow_end_of_day: bool = False) -> int:
    """
    Convert a time-of-day value to minutes since midnight.

    Args:
        value: ``"HH:mm"`` string or minutes since midnight (0-1439)
        allow_end_of_day: Also accept ``"24:00"`` / ``1440`` as the end of the day

    Returns:
        Minutes since local midnight

    Raises:
        InvalidTimeSpec: If the value is malformed or out of range
    """
    upper = MINUTES_PER_DAY if allow_end_of_day else MINUTES_PER_DAY - 1

    if isinstance(value, bool):
        raise InvalidTimeSpec(f"Invalid time: {value!r}. Expected HH:mm or minutes as integer")

    if isinstance(value, int):
        if not 0 <= value <= upper:
            raise InvalidTimeSpec(
                f"Invalid time in minutes: {value}. Must be between 0 and {upper}"
            )
        return value

    if isinstance(value, str):
        text = value.strip()
        if allow_end_of_day and text == "24:00":
            return MINUTES_PER_DAY

        match = _TIME_PATTERN.match(text)
        if match is None:
            raise InvalidTimeSpec(
                f"Invalid time format: {value!r}. Expected HH:mm format (e.g., \"09:00\")"
            )
        return int(match.group(1)) * 60 + int(match.group(2))

    raise InvalidTimeSpec(f"Invalid time: {value!r}. Expected HH:mm or minutes as integer")


def format_minutes(minutes: int) -> str:
    """Format minutes since midnight as ``HH:mm``."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
