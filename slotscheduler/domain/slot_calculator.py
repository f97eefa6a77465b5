"""
Core business logic for calculating available time slots.

Pure domain logic without external dependencies (no API calls, no
database, no I/O). Every query runs the same pipeline over a snapshot of
its inputs.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

from .availability import to_busy_intervals
from .exceptions import PreconditionViolation
from .free_intervals import find_free_intervals
from .intervals import clip_intervals, normalize
from .models import Interval, SchedulingOptions, TimeSlot, WeeklyAvailability
from .slot_generator import generate_slots
from .timezones import (
    OffsetResolver,
    from_epoch_ms,
    validate_timezone,
    zone_offset_minutes,
)

logger = logging.getLogger(__name__)


class SlotCalculator:
    """
    Calculates available slots from busy times and an optional weekly
    availability pattern.

    Algorithm:
    1. Translate the availability pattern into busy time for every UTC week
       overlapping the search window and clip it to the window
    2. Union it with the caller's busy times
    3. Pad and merge
    4. Sweep for free intervals under the overlap tolerance K
    5. Cut every free interval into slots and return them sorted
    """

    def __init__(
        self,
        availability: Optional[WeeklyAvailability] = None,
        timezone: str = "UTC",
        offset_resolver: OffsetResolver = zone_offset_minutes,
    ):
        self.offset_resolver = offset_resolver
        self.timezone = validate_timezone(timezone, offset_resolver)
        self.availability = availability

    def find_available_slots(
        self,
        start_date: datetime,
        end_date: datetime,
        busy_times: Iterable[Interval],
        options: SchedulingOptions,
    ) -> List[TimeSlot]:
        """
        Find all available slots in ``[start_date, end_date)``.

        Args:
            start_date: Start of the search period
            end_date: End of the search period
            busy_times: Busy intervals (epoch ms); malformed entries are ignored
            options: Slot shape, padding and overlap tolerance

        Returns:
            List of TimeSlot objects sorted by start

        Raises:
            PreconditionViolation: If the window is empty or inverted
        """
        bounds = self._validate_time_range(start_date, end_date)
        if options.timezone is not None:
            validate_timezone(options.timezone, self.offset_resolver)

        busy = list(busy_times)
        if self.availability is not None:
            busy.extend(self._availability_busy_intervals(bounds))

        merged_busy = normalize(busy, options.padding)
        free_intervals = find_free_intervals(merged_busy, options.overlap_tolerance, bounds)

        generation_options = options.to_generation_options()
        slots: List[Interval] = []
        for free in free_intervals:
            slots.extend(generate_slots(free.start, free.end, generation_options, self.offset_resolver))

        slots.sort(key=lambda slot: slot.start)

        logger.debug(
            "%d busy -> %d merged -> %d free interval(s) -> %d slot(s)",
            len(busy), len(merged_busy), len(free_intervals), len(slots),
        )
        return [slot.to_time_slot() for slot in slots]

    def availability_busy_times(self, start_date: datetime, end_date: datetime) -> List[Interval]:
        """Busy intervals implied by the availability pattern inside the window."""
        bounds = self._validate_time_range(start_date, end_date)
        if self.availability is None:
            return []
        return self._availability_busy_intervals(bounds)

    def _availability_busy_intervals(self, bounds: Interval) -> List[Interval]:
        """
        Translate the pattern once per UTC week overlapping ``bounds``.
        """
        busy: List[Interval] = []

        week_start = self._monday_of(bounds.start)
        last_week_start = self._monday_of(bounds.end)

        while week_start <= last_week_start:
            week_busy = to_busy_intervals(
                self.availability,
                week_start,
                self.timezone,
                self.offset_resolver,
            )
            busy.extend(clip_intervals(week_busy, bounds))
            week_start += timedelta(days=7)

        return busy

    @staticmethod
    def _monday_of(instant_ms: float) -> date:
        day = from_epoch_ms(instant_ms).date()
        return day - timedelta(days=day.weekday())

    @staticmethod
    def _validate_time_range(start_date: datetime, end_date: datetime) -> Interval:
        if not isinstance(start_date, datetime) or not isinstance(end_date, datetime):
            raise PreconditionViolation("Start and end time must be datetimes")

        bounds = Interval.from_datetimes(start_date, end_date)
        if bounds.start >= bounds.end:
            raise PreconditionViolation(
                f"Start time {start_date} must be before end time {end_date}"
            )
        return bounds
