"""
Translation of a weekly availability pattern into concrete UTC busy time.

A pattern such as "Monday 09:00-17:00 in America/New_York" describes when a
resource is available, in local wall-clock time. The slot pipeline needs the
opposite: the UTC intervals during which it is busy. For one week this means

1. converting every rule on local days -1..7 around the week with the
   offset actually in force on that date (DST aware),
2. merging the resulting available intervals,
3. taking the complement over that extended window,
4. clipping to the UTC week [Monday 00:00Z, next Monday 00:00Z),
5. splitting at every UTC midnight, and
6. ending day-boundary pieces 1 ms before midnight.

The extra days on both sides catch local availability that spills into the
UTC week from the neighbouring local days.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Union

from .exceptions import PreconditionViolation
from .intervals import clip_intervals, merge_intervals
from .models import Interval, WeeklyAvailability
from .time_of_day import MINUTES_PER_DAY
from .timezones import (
    MS_PER_DAY,
    MS_PER_MINUTE,
    OffsetResolver,
    epoch_ms,
    is_utc,
    local_to_utc,
    to_epoch_ms,
    utc_day_start,
    validate_timezone,
    zone_offset_minutes,
)

logger = logging.getLogger(__name__)

LAST_MINUTE_OF_DAY = MINUTES_PER_DAY - 1

WeekStart = Union[date, datetime, int, float]


def to_busy_intervals(
    pattern: Union[WeeklyAvailability, Dict[str, Any]],
    week_start: WeekStart,
    timezone: str,
    offset_resolver: OffsetResolver = zone_offset_minutes,
) -> List[Interval]:
    """
    Convert a weekly availability pattern into busy intervals for one week.

    Args:
        pattern: WeeklyAvailability or its declarative ``{"schedules": [...]}`` form
        week_start: The week's Monday. Dates and naive datetimes are taken by
            their calendar date as written; aware datetimes and epoch
            milliseconds are read on the calendar of ``timezone``
        timezone: IANA timezone the pattern's times are expressed in
        offset_resolver: Offset lookup, pendulum's IANA database by default

    Returns:
        Busy intervals sorted by start, none crossing a UTC midnight

    Raises:
        PreconditionViolation: Non-Monday week start, invalid weekday or
            a rule whose start is not before its end
        InvalidTimeSpec: Malformed time-of-day
        InvalidTimezone: Unresolvable timezone
    """
    validate_timezone(timezone, offset_resolver)
    if not isinstance(pattern, WeeklyAvailability):
        pattern = WeeklyAvailability.from_dict(pattern)
    monday = _resolve_monday(week_start, timezone, offset_resolver)

    available = merge_intervals(
        _available_intervals(pattern, monday, timezone, offset_resolver)
    )

    window = Interval(
        start=local_to_utc(monday - timedelta(days=1), 0, timezone, offset_resolver),
        end=local_to_utc(monday + timedelta(days=8), 0, timezone, offset_resolver),
    )
    week = Interval(start=epoch_ms(monday), end=epoch_ms(monday) + 7 * MS_PER_DAY)

    busy = clip_intervals(_complement(available, window), week)
    busy = _shrink_midnight_ends(_split_at_utc_midnight(busy))

    logger.debug(
        "Week of %s in %s: %d available, %d busy interval(s)",
        monday.isoformat(), timezone, len(available), len(busy),
    )
    return busy


def _resolve_monday(week_start: WeekStart, timezone: str, offset_resolver: OffsetResolver) -> date:
    # Aware datetimes name an instant; read it on the zone's calendar
    if isinstance(week_start, datetime) and week_start.utcoffset() is not None:
        week_start = to_epoch_ms(week_start)

    if isinstance(week_start, datetime):
        day = week_start.date()
    elif isinstance(week_start, date):
        day = week_start
    elif isinstance(week_start, (int, float)) and not isinstance(week_start, bool):
        local_ms = week_start + offset_resolver(week_start, timezone) * MS_PER_MINUTE
        day = date.fromordinal(date(1970, 1, 1).toordinal() + int(local_ms // MS_PER_DAY))
    else:
        raise PreconditionViolation(f"to_busy_intervals: invalid week start {week_start!r}")

    if day.weekday() != 0:
        raise PreconditionViolation(
            f"to_busy_intervals: week start must be a Monday, got {day.isoformat()} "
            f"({day.strftime('%A')})"
        )
    return day


def _available_intervals(
    pattern: WeeklyAvailability,
    monday: date,
    timezone: str,
    offset_resolver: OffsetResolver,
) -> List[Interval]:
    """Available UTC intervals for every rule on local days -1..7."""
    widen_last_minute = not is_utc(timezone)
    available: List[Interval] = []

    for day_offset in range(-1, 8):
        local_date = monday + timedelta(days=day_offset)

        for rule in pattern.rules_for(local_date.weekday()):
            end_minute = rule.end
            # 23:59 means "until midnight" so a full local day leaves no gap
            if widen_last_minute and end_minute == LAST_MINUTE_OF_DAY:
                end_minute = MINUTES_PER_DAY

            start = local_to_utc(local_date, rule.start, timezone, offset_resolver)
            end = local_to_utc(local_date, end_minute, timezone, offset_resolver)
            if start < end:
                available.append(Interval(start=start, end=end))

    return available


def _complement(available: List[Interval], window: Interval) -> List[Interval]:
    """Gaps before, between and after sorted disjoint ``available`` inside ``window``."""
    gaps: List[Interval] = []
    cursor = window.start

    for interval in available:
        if interval.start > cursor:
            gaps.append(Interval(start=cursor, end=interval.start))
        cursor = max(cursor, interval.end)

    if cursor < window.end:
        gaps.append(Interval(start=cursor, end=window.end))

    return gaps


def _split_at_utc_midnight(intervals: List[Interval]) -> List[Interval]:
    pieces: List[Interval] = []

    for interval in intervals:
        start = interval.start
        while True:
            midnight = utc_day_start(start) + MS_PER_DAY
            if midnight >= interval.end:
                pieces.append(Interval(start=start, end=interval.end))
                break
            pieces.append(Interval(start=start, end=midnight))
            start = midnight

    return pieces


def _shrink_midnight_ends(intervals: List[Interval]) -> List[Interval]:
    """End intervals that stop on a UTC midnight at 23:59:59.999 instead."""
    shrunk: List[Interval] = []

    for interval in intervals:
        if interval.end % MS_PER_DAY == 0:
            interval = Interval(start=interval.start, end=interval.end - 1)
        if interval.start < interval.end:
            shrunk.append(interval)

    return shrunk
