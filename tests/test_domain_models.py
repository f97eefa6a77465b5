"""
Tests for domain models.
"""

import pendulum
import pytest

from slotscheduler.domain.exceptions import InvalidTimeSpec, InvalidTimezone, PreconditionViolation
from slotscheduler.domain.models import (
    Interval,
    ScheduleRule,
    SchedulingOptions,
    TimeSlot,
    WeeklyAvailability,
    Weekday,
)
from slotscheduler.domain.timezones import to_epoch_ms


def ms(text: str, tz: str = "Europe/Berlin") -> int:
    return to_epoch_ms(pendulum.parse(text, tz=tz))


class TestInterval:
    """Tests for Interval model."""

    def test_duration_and_validity(self):
        """Test duration of a valid interval."""
        interval = Interval(ms("2024-11-25 09:00"), ms("2024-11-25 17:00"))

        assert interval.is_valid()
        assert interval.duration_minutes() == 480  # 8 hours

    def test_construction_does_not_validate(self):
        """Test that malformed intervals can be built but report invalid."""
        assert not Interval(10, 5).is_valid()
        assert not Interval(5, 5).is_valid()
        assert not Interval(float("nan"), 5).is_valid()
        assert not Interval(0, float("inf")).is_valid()

    def test_overlaps(self):
        """Test overlap detection."""
        iv1 = Interval(ms("2024-11-25 09:00"), ms("2024-11-25 12:00"))
        iv2 = Interval(ms("2024-11-25 11:00"), ms("2024-11-25 14:00"))
        iv3 = Interval(ms("2024-11-25 14:00"), ms("2024-11-25 17:00"))

        assert iv1.overlaps(iv2)
        assert iv2.overlaps(iv1)
        assert not iv1.overlaps(iv3)
        assert not iv2.overlaps(iv3)  # touching

    def test_intersect(self):
        """Test intersection calculation."""
        iv1 = Interval(ms("2024-11-25 09:00"), ms("2024-11-25 12:00"))
        iv2 = Interval(ms("2024-11-25 11:00"), ms("2024-11-25 14:00"))

        intersection = iv1.intersect(iv2)

        assert intersection == Interval(ms("2024-11-25 11:00"), ms("2024-11-25 12:00"))

    def test_intersect_no_overlap(self):
        """Test intersection with no overlap returns None."""
        iv1 = Interval(ms("2024-11-25 09:00"), ms("2024-11-25 12:00"))
        iv2 = Interval(ms("2024-11-25 14:00"), ms("2024-11-25 17:00"))

        assert iv1.intersect(iv2) is None

    def test_from_datetimes(self):
        """Test building an interval from aware datetimes."""
        start = pendulum.parse("2024-11-25 09:00", tz="Europe/Berlin")
        end = pendulum.parse("2024-11-25 10:00", tz="Europe/Berlin")

        interval = Interval.from_datetimes(start, end)

        assert interval.start == ms("2024-11-25T08:00:00Z", tz="UTC")
        assert interval.duration_minutes() == 60


class TestTimeSlot:
    """Tests for TimeSlot model."""

    def test_create_valid_slot(self):
        """Test creating a valid slot."""
        start = pendulum.parse("2024-11-25 09:00", tz="Europe/Berlin")
        end = pendulum.parse("2024-11-25 17:00", tz="Europe/Berlin")

        slot = TimeSlot(start=start, end=end)

        assert slot.start == start
        assert slot.end == end
        assert slot.duration_minutes() == 480

    def test_invalid_slot_raises_error(self):
        """Test that creating an inverted slot raises ValueError."""
        start = pendulum.parse("2024-11-25 17:00", tz="Europe/Berlin")
        end = pendulum.parse("2024-11-25 09:00", tz="Europe/Berlin")

        with pytest.raises(ValueError, match="Start time .* must be before end time"):
            TimeSlot(start=start, end=end)

    def test_interval_conversion(self):
        """Test conversion between slots and intervals."""
        interval = Interval(ms("2024-11-25 09:00"), ms("2024-11-25 09:30"))

        slot = interval.to_time_slot()

        assert slot.start == pendulum.parse("2024-11-25 09:00", tz="Europe/Berlin")
        assert slot.to_interval() == interval

    def test_format_display(self):
        """Test display formatting in a local timezone."""
        slot = TimeSlot(
            start=pendulum.parse("2024-11-25 08:00", tz="UTC"),
            end=pendulum.parse("2024-11-25 09:00", tz="UTC"),
        )

        assert slot.format_display("Europe/Berlin") == "Monday, 25.11.2024 | 09:00 – 10:00 (60 min)"


class TestWeekday:
    """Tests for Weekday parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [("monday", Weekday.MONDAY), ("Friday", Weekday.FRIDAY), (" SUNDAY ", Weekday.SUNDAY), (2, Weekday.WEDNESDAY)],
    )
    def test_parse(self, value, expected):
        """Test parsing names and indices."""
        assert Weekday.parse(value) is expected

    @pytest.mark.parametrize("value", ["funday", 7, -1, True, None])
    def test_parse_invalid(self, value):
        """Test that unknown days raise PreconditionViolation."""
        with pytest.raises(PreconditionViolation, match="Invalid day"):
            Weekday.parse(value)

    def test_matches_date_weekday(self):
        """Test that indices follow date.weekday()."""
        monday = pendulum.parse("2024-11-25", tz="Europe/Berlin")
        saturday = pendulum.parse("2024-11-23", tz="Europe/Berlin")

        assert Weekday(monday.weekday()) is Weekday.MONDAY
        assert Weekday(saturday.weekday()) is Weekday.SATURDAY


class TestScheduleRule:
    """Tests for ScheduleRule model."""

    def test_normalizes_fields(self):
        """Test that days and times are normalized on construction."""
        rule = ScheduleRule(days=["monday", "tuesday"], start="09:30", end=17 * 60)

        assert rule.days == frozenset({Weekday.MONDAY, Weekday.TUESDAY})
        assert rule.start == 570
        assert rule.end == 1020
        assert rule.applies_to(0)
        assert not rule.applies_to(Weekday.SATURDAY)
        assert str(rule) == "monday, tuesday: 09:30-17:00"

    def test_duplicate_days(self):
        """Test that repeated days are rejected."""
        with pytest.raises(PreconditionViolation, match="Duplicate days"):
            ScheduleRule(days=["monday", "Monday"], start="09:00", end="17:00")

    def test_start_must_precede_end(self):
        """Test that an inverted or empty rule is rejected."""
        with pytest.raises(PreconditionViolation, match="Start must be before end"):
            ScheduleRule(days=["monday"], start="17:00", end="09:00")
        with pytest.raises(PreconditionViolation):
            ScheduleRule(days=["monday"], start="09:00", end="09:00")

    def test_invalid_time(self):
        """Test that malformed times raise InvalidTimeSpec."""
        with pytest.raises(InvalidTimeSpec):
            ScheduleRule(days=["monday"], start="9am", end="17:00")


class TestWeeklyAvailability:
    """Tests for WeeklyAvailability model."""

    def test_rules_for_day(self):
        """Test selecting the rules of one weekday."""
        morning = ScheduleRule(days=["monday", "tuesday"], start="09:00", end="12:00")
        afternoon = ScheduleRule(days=["monday"], start="13:00", end="17:00")
        availability = WeeklyAvailability.from_rules([morning, afternoon])

        assert availability.rules_for(Weekday.MONDAY) == [morning, afternoon]
        assert availability.rules_for(Weekday.TUESDAY) == [morning]
        assert availability.rules_for(Weekday.SUNDAY) == []

    def test_touching_rules_allowed(self):
        """Test that back-to-back rules on one day do not overlap."""
        WeeklyAvailability.from_rules([
            ScheduleRule(days=["monday"], start="09:00", end="12:00"),
            ScheduleRule(days=["monday"], start="12:00", end="17:00"),
        ])

    def test_overlapping_rules_rejected(self):
        """Test that overlapping rules on a shared day are rejected."""
        with pytest.raises(PreconditionViolation, match="Overlapping schedules found for monday"):
            WeeklyAvailability.from_rules([
                ScheduleRule(days=["monday"], start="09:00", end="12:00"),
                ScheduleRule(days=["monday", "friday"], start="11:00", end="14:00"),
            ])

    def test_from_dict(self):
        """Test building a pattern from its declarative form."""
        availability = WeeklyAvailability.from_dict({
            "schedules": [{"days": ["saturday", "sunday"], "start": "10:00", "end": "14:00"}]
        })

        assert len(availability.rules) == 1
        assert availability.rules[0].days == frozenset({Weekday.SATURDAY, Weekday.SUNDAY})

    @pytest.mark.parametrize("data", [None, {}, {"schedules": "monday"}, {"schedules": [["monday"]]}])
    def test_from_dict_invalid_shape(self, data):
        """Test that malformed declarative data is rejected."""
        with pytest.raises(PreconditionViolation):
            WeeklyAvailability.from_dict(data)


class TestSchedulingOptions:
    """Tests for SchedulingOptions validation."""

    def test_defaults(self):
        """Test default values."""
        options = SchedulingOptions(slot_duration=30)

        assert options.overlap_tolerance == 0
        assert options.to_generation_options().effective_split_minutes == 30

    @pytest.mark.parametrize(
        "kwargs,message",
        [
            ({"slot_duration": 0}, "Slot duration must be a positive number"),
            ({"slot_duration": True}, "Slot duration must be a finite number"),
            ({"slot_duration": 30, "slot_split": -15}, "Slot split must be a positive number"),
            ({"slot_duration": 30, "offset": -1}, "Offset must be a non-negative number"),
            ({"slot_duration": 30, "padding": -5}, "Padding must be a non-negative number"),
            ({"slot_duration": 30, "max_overlaps": -1}, "max_overlaps must be non-negative"),
            ({"slot_duration": 30, "max_overlaps": 1.5}, "max_overlaps must be an integer"),
            ({"slot_duration": 30, "earliest_time": "09:00"}, "timezone is required"),
        ],
    )
    def test_invalid(self, kwargs, message):
        """Test that invalid options are rejected with a clear message."""
        with pytest.raises(PreconditionViolation, match=message):
            SchedulingOptions(**kwargs)

    def test_invalid_window_time(self):
        """Test that a malformed daily window time is rejected."""
        with pytest.raises(InvalidTimeSpec):
            SchedulingOptions(slot_duration=30, timezone="UTC", latest_time="25:00")

    @pytest.mark.parametrize(
        "extra",
        [{}, {"earliest_time": "09:00"}],
    )
    def test_invalid_timezone(self, extra):
        """Test that an unknown timezone is rejected on construction."""
        with pytest.raises(InvalidTimezone):
            SchedulingOptions(slot_duration=30, timezone="Not/AZone", **extra)

    def test_tolerance(self):
        """Test that max_overlaps becomes the sweep tolerance."""
        assert SchedulingOptions(slot_duration=30, max_overlaps=2).overlap_tolerance == 2
