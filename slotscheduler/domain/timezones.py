"""
Timezone-offset primitives.

Every conversion between local wall-clock time and UTC instants goes through
an ``OffsetResolver``: a pure function mapping (instant in epoch ms, zone id)
to the UTC offset in minutes in force at that instant. The default resolver
reads pendulum's IANA database; tests can pass synthetic zones instead.
"""

import calendar
from datetime import date, datetime, timedelta
from functools import lru_cache
from typing import Callable

import pendulum
from pendulum import DateTime

from .exceptions import InvalidTimezone

MS_PER_MINUTE = 60 * 1000
MS_PER_HOUR = 60 * MS_PER_MINUTE
MS_PER_DAY = 24 * MS_PER_HOUR

OffsetResolver = Callable[[float, str], int]

_UTC_NAMES = frozenset({"UTC", "ETC/UTC"})
_EPOCH_ORDINAL = date(1970, 1, 1).toordinal()
_PENDULUM_EPOCH = pendulum.datetime(1970, 1, 1, tz="UTC")


@lru_cache(maxsize=256)
def _load_zone(name: str):
    if not isinstance(name, str) or not name.strip():
        raise InvalidTimezone(f"Invalid timezone: {name!r}. Must be a valid IANA timezone identifier.")
    try:
        return pendulum.timezone(name)
    except (ValueError, LookupError) as exc:
        raise InvalidTimezone(
            f"Invalid timezone: {name}. Must be a valid IANA timezone identifier."
        ) from exc


def zone_offset_minutes(instant_ms: float, timezone: str) -> int:
    """
    UTC offset of ``timezone`` at ``instant_ms``, in minutes (east positive).

    Raises:
        InvalidTimezone: If the zone is unknown to the IANA database
    """
    zone = _load_zone(timezone)
    moment = pendulum.from_timestamp(instant_ms / 1000, tz=zone)
    return int(moment.utcoffset().total_seconds() // 60)


def validate_timezone(timezone: str, offset_resolver: OffsetResolver = zone_offset_minutes) -> str:
    """
    Ensure ``timezone`` can be resolved before any interval math runs.

    Returns:
        The timezone name, unchanged
    """
    if not isinstance(timezone, str) or not timezone.strip():
        raise InvalidTimezone(f"Invalid timezone: {timezone!r}. Must be a valid IANA timezone identifier.")
    offset_resolver(0, timezone)
    return timezone


def is_utc(timezone: str) -> bool:
    return timezone.upper() in _UTC_NAMES


def epoch_ms(day: date) -> int:
    """Epoch milliseconds of 00:00 UTC on ``day``."""
    return (day.toordinal() - _EPOCH_ORDINAL) * MS_PER_DAY


def utc_day_start(instant_ms: float) -> int:
    """Epoch milliseconds of the UTC midnight at or before ``instant_ms``."""
    return int(instant_ms // MS_PER_DAY) * MS_PER_DAY


def to_epoch_ms(moment: datetime) -> int:
    """Convert a datetime to epoch milliseconds. Naive values are read as UTC."""
    return calendar.timegm(moment.utctimetuple()) * 1000 + moment.microsecond // 1000


def from_epoch_ms(instant_ms: float) -> DateTime:
    """Convert epoch milliseconds to a UTC pendulum DateTime."""
    return _PENDULUM_EPOCH + timedelta(milliseconds=instant_ms)


def local_to_utc(
    local_date: date,
    minute_of_day: int,
    timezone: str,
    offset_resolver: OffsetResolver = zone_offset_minutes,
) -> int:
    """
    Convert a wall-clock time on ``local_date`` in ``timezone`` to epoch ms.

    ``minute_of_day`` may be 1440, meaning the following local midnight.

    The offsets in force a day before and a day after are both tried, and a
    candidate is kept when the offset at the resulting instant agrees with
    the one used. Ambiguous wall times (clocks falling back) resolve to the
    earlier instant. Wall times skipped by a forward transition are moved
    forward by the size of the gap, i.e. read with the pre-transition offset.
    """
    wall_ms = epoch_ms(local_date) + minute_of_day * MS_PER_MINUTE

    offset_before = offset_resolver(wall_ms - MS_PER_DAY, timezone)
    offset_after = offset_resolver(wall_ms + MS_PER_DAY, timezone)

    candidates = []
    for offset in {offset_before, offset_after}:
        instant = wall_ms - offset * MS_PER_MINUTE
        if offset_resolver(instant, timezone) == offset:
            candidates.append(instant)

    if candidates:
        return min(candidates)

    # Nonexistent wall time: the gap opens when the offset grows
    return wall_ms - min(offset_before, offset_after) * MS_PER_MINUTE


def local_minute_of_day(
    instant_ms: float,
    timezone: str,
    offset_resolver: OffsetResolver = zone_offset_minutes,
) -> int:
    """Local minutes since midnight in ``timezone`` at ``instant_ms``."""
    local_ms = instant_ms + offset_resolver(instant_ms, timezone) * MS_PER_MINUTE
    return int(local_ms // MS_PER_MINUTE) % (24 * 60)
