"""
Domain layer - Pure business logic without external dependencies.
"""

from .availability import to_busy_intervals
from .exceptions import InvalidTimeSpec, InvalidTimezone, PreconditionViolation, SchedulingError
from .free_intervals import find_free_intervals
from .intervals import apply_padding, clip_intervals, merge_intervals, normalize
from .models import (
    Interval,
    ScheduleRule,
    SchedulingOptions,
    SlotGenerationOptions,
    TimeSlot,
    WeeklyAvailability,
    Weekday,
)
from .slot_calculator import SlotCalculator
from .slot_generator import calculate_first_slot_start, find_next_slot_boundary, generate_slots

__all__ = [
    "Interval",
    "TimeSlot",
    "Weekday",
    "ScheduleRule",
    "WeeklyAvailability",
    "SchedulingOptions",
    "SlotGenerationOptions",
    "SlotCalculator",
    "SchedulingError",
    "PreconditionViolation",
    "InvalidTimeSpec",
    "InvalidTimezone",
    "apply_padding",
    "merge_intervals",
    "normalize",
    "clip_intervals",
    "find_free_intervals",
    "find_next_slot_boundary",
    "calculate_first_slot_start",
    "generate_slots",
    "to_busy_intervals",
]
