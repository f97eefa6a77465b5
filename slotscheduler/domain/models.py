"""
Domain models for interval math, slots and weekly availability.
"""

import math
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple, Union

from pendulum import DateTime

from .exceptions import PreconditionViolation
from .time_of_day import TimeOfDay, format_minutes, parse_time_of_day
from .timezones import MS_PER_MINUTE, from_epoch_ms, to_epoch_ms, validate_timezone


@dataclass(frozen=True)
class Interval:
    """
    Half-open range ``[start, end)`` of UTC instants in epoch milliseconds.

    Construction does not validate: busy lists imported from calendars may
    contain inverted or non-finite entries, and the engines drop those.
    Use ``is_valid`` to check.
    """
    start: float
    end: float

    def is_valid(self) -> bool:
        """True if both bounds are finite and start is before end."""
        return math.isfinite(self.start) and math.isfinite(self.end) and self.start < self.end

    def duration_minutes(self) -> float:
        """Return the duration in minutes."""
        return (self.end - self.start) / MS_PER_MINUTE

    def overlaps(self, other: "Interval") -> bool:
        """Check if this interval overlaps with another."""
        return self.start < other.end and other.start < self.end

    def contains(self, other: "Interval") -> bool:
        """Check if another interval lies fully inside this one."""
        return self.start <= other.start and other.end <= self.end

    def intersect(self, other: "Interval") -> "Interval | None":
        """
        Calculate the intersection of two intervals.
        Returns None if there is no overlap.
        """
        if not self.overlaps(other):
            return None
        return Interval(start=max(self.start, other.start), end=min(self.end, other.end))

    @classmethod
    def from_datetimes(cls, start: DateTime, end: DateTime) -> "Interval":
        """Build an interval from two aware datetimes."""
        return cls(start=to_epoch_ms(start), end=to_epoch_ms(end))

    def to_time_slot(self) -> "TimeSlot":
        return TimeSlot(start=from_epoch_ms(self.start), end=from_epoch_ms(self.end))

    def __str__(self) -> str:
        return f"{from_epoch_ms(self.start).isoformat()} - {from_epoch_ms(self.end).isoformat()}"


@dataclass(frozen=True)
class TimeSlot:
    """
    A bookable slot returned to callers.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def to_interval(self) -> Interval:
        return Interval.from_datetimes(self.start, self.end)

    def format_display(self, timezone: str = "UTC") -> str:
        """
        Format the slot for display in the given timezone.
        Format: Weekday, DD.MM.YYYY | HH:mm – HH:mm (N min)
        """
        start = self.start.in_timezone(timezone)
        end = self.end.in_timezone(timezone)

        date_str = start.format("dddd, DD.MM.YYYY")
        time_str = f"{start.format('HH:mm')} – {end.format('HH:mm')}"

        return f"{date_str} | {time_str} ({self.duration_minutes()} min)"


class Weekday(IntEnum):
    """Day of the week, Monday=0 to Sunday=6 (same as ``date.weekday()``)."""
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @classmethod
    def parse(cls, value: Union["Weekday", int, str]) -> "Weekday":
        """
        Parse a weekday from an enum member, an index 0-6 or a day name.

        Raises:
            PreconditionViolation: If the value names no weekday
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                pass
        elif isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                pass

        valid = ", ".join(day.name.lower() for day in cls)
        raise PreconditionViolation(f"Invalid day {value!r}. Valid days: {valid}")

    @property
    def label(self) -> str:
        return self.name.lower()


WORK_DAYS: Tuple[Weekday, ...] = (
    Weekday.MONDAY, Weekday.TUESDAY, Weekday.WEDNESDAY, Weekday.THURSDAY, Weekday.FRIDAY
)


@dataclass(frozen=True)
class ScheduleRule:
    """
    One recurring availability window in local time.

    ``days`` accepts weekday names, indices or Weekday members; ``start`` and
    ``end`` accept ``"HH:mm"`` strings or minutes since midnight. Both are
    normalized on construction (frozenset of Weekday, integer minutes).
    """
    days: FrozenSet[Weekday]
    start: int
    end: int

    def __post_init__(self):
        raw_days = list(self.days)
        days = frozenset(Weekday.parse(day) for day in raw_days)
        if len(days) != len(raw_days):
            raise PreconditionViolation(f"Duplicate days found in {raw_days!r}")

        start = parse_time_of_day(self.start)
        end = parse_time_of_day(self.end)
        if start >= end:
            raise PreconditionViolation(
                f"Invalid time range: {format_minutes(start)} to {format_minutes(end)}. "
                "Start must be before end."
            )

        object.__setattr__(self, "days", days)
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)

    def applies_to(self, weekday: int) -> bool:
        return weekday in self.days

    def overlaps(self, other: "ScheduleRule") -> bool:
        """True if both rules share a day and their local windows intersect."""
        return bool(self.days & other.days) and self.start < other.end and other.start < self.end

    def __str__(self) -> str:
        days = ", ".join(day.label for day in sorted(self.days))
        return f"{days}: {format_minutes(self.start)}-{format_minutes(self.end)}"


@dataclass(frozen=True)
class WeeklyAvailability:
    """
    Recurring weekly availability pattern.

    Several rules may target the same day (e.g. a lunch break between a
    morning and an afternoon rule) but they must not overlap. An empty
    pattern means the resource is never available.
    """
    rules: Tuple[ScheduleRule, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "rules", tuple(self.rules))
        self.validate()

    def validate(self) -> None:
        """
        Reject rules overlapping on a shared day.

        Raises:
            PreconditionViolation: Naming the first overlapping pair
        """
        for index, rule in enumerate(self.rules):
            for other_index in range(index):
                other = self.rules[other_index]
                if rule.overlaps(other):
                    shared = ", ".join(day.label for day in sorted(rule.days & other.days))
                    raise PreconditionViolation(
                        f"Overlapping schedules found for {shared}: "
                        f"schedule {index} ({rule}) overlaps with schedule {other_index}"
                    )

    def rules_for(self, weekday: int) -> List[ScheduleRule]:
        return [rule for rule in self.rules if rule.applies_to(weekday)]

    @classmethod
    def from_rules(cls, rules: Iterable[ScheduleRule]) -> "WeeklyAvailability":
        return cls(rules=tuple(rules))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WeeklyAvailability":
        """
        Build a pattern from its declarative form.

        Example:
            {"schedules": [{"days": ["monday"], "start": "09:00", "end": "17:00"}]}
        """
        if not isinstance(data, dict) or not isinstance(data.get("schedules"), list):
            raise PreconditionViolation("Availability must be a mapping with a 'schedules' list")

        rules: List[ScheduleRule] = []
        for index, schedule in enumerate(data["schedules"]):
            if not isinstance(schedule, dict):
                raise PreconditionViolation(f"Schedule at index {index} must be a mapping")
            days = schedule.get("days")
            if not isinstance(days, (list, tuple)):
                raise PreconditionViolation(f"Schedule at index {index}: days must be a list")
            rules.append(ScheduleRule(days=days, start=schedule.get("start"), end=schedule.get("end")))

        return cls(rules=tuple(rules))


@dataclass(frozen=True)
class SlotGenerationOptions:
    """Shape of the slots cut out of one free interval."""
    duration_minutes: float
    split_minutes: Optional[float] = None
    offset_minutes: float = 0
    timezone: Optional[str] = None
    earliest_time: Optional[TimeOfDay] = None
    latest_time: Optional[TimeOfDay] = None

    @property
    def effective_split_minutes(self) -> float:
        return self.duration_minutes if self.split_minutes is None else self.split_minutes

    @property
    def has_daily_window(self) -> bool:
        return self.timezone is not None and (
            self.earliest_time is not None or self.latest_time is not None
        )


def _require_number(name: str, value: Any, *, positive: bool) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise PreconditionViolation(f"{name} must be a finite number, got {value!r}")
    if positive and value <= 0:
        raise PreconditionViolation(f"{name} must be a positive number")
    if not positive and value < 0:
        raise PreconditionViolation(f"{name} must be a non-negative number")


@dataclass(frozen=True)
class SchedulingOptions:
    """
    Per-query slot options.

    ``max_overlaps`` is the tolerance K: a time is available while at most K
    busy periods overlap it. None keeps the classic behaviour (K = 0).
    The daily window (``earliest_time``/``latest_time``) is interpreted in
    ``timezone``, which is then required.
    """
    slot_duration: float
    slot_split: Optional[float] = None
    offset: float = 0
    padding: float = 0
    max_overlaps: Optional[int] = None
    timezone: Optional[str] = None
    earliest_time: Optional[TimeOfDay] = None
    latest_time: Optional[TimeOfDay] = None

    def __post_init__(self):
        _require_number("Slot duration", self.slot_duration, positive=True)
        if self.slot_split is not None:
            _require_number("Slot split", self.slot_split, positive=True)
        _require_number("Offset", self.offset, positive=False)
        _require_number("Padding", self.padding, positive=False)

        if self.max_overlaps is not None:
            if isinstance(self.max_overlaps, bool) or not isinstance(self.max_overlaps, int):
                raise PreconditionViolation(
                    f"max_overlaps must be an integer, got {self.max_overlaps!r}"
                )
            if self.max_overlaps < 0:
                raise PreconditionViolation("max_overlaps must be non-negative")

        if self.earliest_time is not None:
            parse_time_of_day(self.earliest_time)
        if self.latest_time is not None:
            parse_time_of_day(self.latest_time, allow_end_of_day=True)
        if (self.earliest_time is not None or self.latest_time is not None) and not self.timezone:
            raise PreconditionViolation("A timezone is required when earliest_time or latest_time is set")
        if self.timezone is not None:
            validate_timezone(self.timezone)

    @property
    def overlap_tolerance(self) -> int:
        return self.max_overlaps or 0

    def to_generation_options(self) -> SlotGenerationOptions:
        return SlotGenerationOptions(
            duration_minutes=self.slot_duration,
            split_minutes=self.slot_split,
            offset_minutes=self.offset,
            timezone=self.timezone,
            earliest_time=self.earliest_time,
            latest_time=self.latest_time,
        )
