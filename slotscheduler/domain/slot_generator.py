"""
Slot generation and alignment.

Turns one free interval into fixed-duration slots. This module knows nothing
about busy time: run it over the sweep engine's free intervals to get the
end-to-end slot list.
"""

from typing import List

from .exceptions import PreconditionViolation
from .models import Interval, SlotGenerationOptions
from .time_of_day import MINUTES_PER_DAY, parse_time_of_day
from .timezones import (
    MS_PER_MINUTE,
    OffsetResolver,
    local_minute_of_day,
    validate_timezone,
    zone_offset_minutes,
)


def find_next_slot_boundary(instant: float, interval_minutes: float, offset_minutes: float = 0) -> float:
    """
    Next timestamp at or after ``instant`` that is congruent to
    ``offset_minutes`` modulo ``interval_minutes`` since the epoch.
    """
    interval_ms = interval_minutes * MS_PER_MINUTE
    offset_ms = offset_minutes * MS_PER_MINUTE

    remainder = (instant - offset_ms) % interval_ms
    if remainder == 0:
        return instant

    return instant + (interval_ms - remainder)


def calculate_first_slot_start(start: float, split_minutes: float, offset_minutes: float) -> float:
    """
    Start of the first slot for an interval beginning at ``start``.

    With no offset the slot starts exactly at ``start``. Otherwise it snaps
    forward to the next offset boundary, moving one more period if that
    boundary precedes ``start``.
    """
    if offset_minutes == 0:
        return start

    aligned = find_next_slot_boundary(start, split_minutes, offset_minutes)
    if aligned < start:
        return aligned + split_minutes * MS_PER_MINUTE

    return aligned


def generate_slots(
    start: float,
    end: float,
    options: SlotGenerationOptions,
    offset_resolver: OffsetResolver = zone_offset_minutes,
) -> List[Interval]:
    """
    Cut ``[start, end)`` into slots of ``options.duration_minutes``.

    Consecutive slots start ``split`` minutes apart (measured start to start),
    so a split shorter than the duration yields overlapping slots and a
    longer one leaves gaps. A slot that would run past ``end`` is never
    emitted.

    When ``options.timezone`` and a daily window are given, only slots whose
    local start time falls in ``[earliest, latest)`` are kept.

    Raises:
        PreconditionViolation: For a non-positive duration or split, a
            negative offset, or ``start >= end``
    """
    duration = options.duration_minutes
    split = options.effective_split_minutes
    offset = options.offset_minutes

    if duration <= 0:
        raise PreconditionViolation("generate_slots: slot duration must be a positive number")
    if split <= 0:
        raise PreconditionViolation("generate_slots: slot split must be a positive number")
    if offset < 0:
        raise PreconditionViolation("generate_slots: offset must be a non-negative number")
    if start >= end:
        raise PreconditionViolation("generate_slots: start time must be before end time")

    earliest = latest = None
    if options.has_daily_window:
        validate_timezone(options.timezone, offset_resolver)
        earliest = 0 if options.earliest_time is None else parse_time_of_day(options.earliest_time)
        latest = (
            MINUTES_PER_DAY
            if options.latest_time is None
            else parse_time_of_day(options.latest_time, allow_end_of_day=True)
        )

    duration_ms = duration * MS_PER_MINUTE
    split_ms = split * MS_PER_MINUTE

    slots: List[Interval] = []
    current = calculate_first_slot_start(start, split, offset)

    while current + duration_ms <= end:
        slots.append(Interval(start=current, end=current + duration_ms))
        current += split_ms

    if earliest is None:
        return slots

    return [
        slot for slot in slots
        if earliest <= local_minute_of_day(slot.start, options.timezone, offset_resolver) < latest
    ]
