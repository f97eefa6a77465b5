"""
Application service for finding bookable slots.

The service keeps the manually tracked busy times, optionally pulls more
from a busy-time source adapter, and delegates the calculation to the
domain-level ``SlotCalculator``. The busy-time source is typed as a simple
protocol so tests can plug in a stub.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Protocol, Union

from pendulum import DateTime

from ..domain.models import Interval, SchedulingOptions, TimeSlot, WeeklyAvailability
from ..domain.slot_calculator import SlotCalculator

logger = logging.getLogger(__name__)


class BusySourceProtocol(Protocol):
    """Protocol describing the busy-time source behaviour needed by the service."""

    def get_busy_times(
        self,
        start_time: DateTime,
        end_time: DateTime,
        timezone: str,
    ) -> List[Interval]:
        """Return busy intervals overlapping the window."""


class SlotFinderService:
    """
    Orchestrates busy-time bookkeeping and slot calculation.

    Manually added busy times live in a plain list. Every query works on a
    snapshot copy taken on entry, so a caller mutating the list right after
    starting a query does not change that query's result.
    """

    def __init__(
        self,
        slot_calculator: SlotCalculator,
        busy_source: Optional[BusySourceProtocol] = None,
        busy_times: Iterable[Interval] = (),
    ) -> None:
        self._slot_calculator = slot_calculator
        self._busy_source = busy_source
        self._busy_times: List[Interval] = []
        self.add_busy_times(busy_times)

    @property
    def timezone(self) -> str:
        return self._slot_calculator.timezone

    def add_busy_time(self, busy_time: Interval) -> None:
        """Add a single busy interval."""
        self.add_busy_times([busy_time])

    def add_busy_period(self, start: DateTime, end: DateTime) -> None:
        """Add a busy period given as datetimes."""
        self.add_busy_time(Interval.from_datetimes(start, end))

    def add_busy_times(self, busy_times: Iterable[Interval]) -> None:
        """Add several busy intervals; the list stays sorted by start."""
        self._busy_times.extend(busy_times)
        self._busy_times.sort(key=lambda interval: interval.start)

    def clear_busy_times(self) -> None:
        """Remove all manually added busy times. The availability pattern still applies."""
        self._busy_times.clear()

    def get_busy_times(self) -> List[Interval]:
        """Return a copy of the manually added busy times, sorted by start."""
        return list(self._busy_times)

    def set_availability(
        self,
        availability: Union[WeeklyAvailability, Dict[str, Any], None],
    ) -> None:
        """Replace the weekly availability pattern (None removes it)."""
        if availability is not None and not isinstance(availability, WeeklyAvailability):
            availability = WeeklyAvailability.from_dict(availability)
        self._slot_calculator.availability = availability

    def get_availability(self) -> Optional[WeeklyAvailability]:
        return self._slot_calculator.availability

    def find_slots(
        self,
        *,
        start_date: DateTime,
        end_date: DateTime,
        options: SchedulingOptions,
    ) -> List[TimeSlot]:
        """
        Snapshot busy data, add imported busy times and compute available slots.
        """
        busy_times = self.get_busy_times()
        busy_times.extend(self.fetch_busy_times(start_date=start_date, end_date=end_date))

        return self.calculate_slots(
            start_date=start_date,
            end_date=end_date,
            busy_times=busy_times,
            options=options,
        )

    def fetch_busy_times(
        self,
        *,
        start_date: DateTime,
        end_date: DateTime,
    ) -> List[Interval]:
        """Fetch busy times from the configured source, if any."""
        if self._busy_source is None:
            return []

        busy_times = list(
            self._busy_source.get_busy_times(
                start_time=start_date,
                end_time=end_date,
                timezone=self.timezone,
            )
        )
        logger.debug("Busy-time source returned %d interval(s)", len(busy_times))
        return busy_times

    def calculate_slots(
        self,
        *,
        start_date: DateTime,
        end_date: DateTime,
        busy_times: List[Interval],
        options: SchedulingOptions,
    ) -> List[TimeSlot]:
        """Calculate available slots from busy data."""
        return self._slot_calculator.find_available_slots(
            start_date=start_date,
            end_date=end_date,
            busy_times=busy_times,
            options=options,
        )
