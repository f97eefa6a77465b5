"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import List, Optional, Union

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import Interval, ScheduleRule, SchedulingOptions, WeeklyAvailability, Weekday
from .domain.time_of_day import parse_time_of_day
from .domain.timezones import to_epoch_ms, validate_timezone


class DefaultsConfig(BaseModel):
    """Default slot options for searches."""
    duration_minutes: int = 30
    split_minutes: Optional[int] = None
    offset_minutes: int = 0
    padding_minutes: int = 0
    max_overlaps: Optional[int] = None
    earliest_time: Optional[Union[str, int]] = None
    latest_time: Optional[Union[str, int]] = None

    @field_validator("duration_minutes", "split_minutes")
    @classmethod
    def validate_positive(cls, value: Optional[int]) -> Optional[int]:
        """Ensure slot duration and split are positive."""
        if value is not None and value <= 0:
            raise ValueError("must be greater than zero")
        return value

    @field_validator("offset_minutes", "padding_minutes", "max_overlaps")
    @classmethod
    def validate_non_negative(cls, value: Optional[int]) -> Optional[int]:
        """Ensure offset, padding and overlap tolerance are not negative."""
        if value is not None and value < 0:
            raise ValueError("must not be negative")
        return value

    @field_validator("earliest_time")
    @classmethod
    def validate_earliest(cls, value: Optional[Union[str, int]]) -> Optional[Union[str, int]]:
        if value is not None:
            parse_time_of_day(value)
        return value

    @field_validator("latest_time")
    @classmethod
    def validate_latest(cls, value: Optional[Union[str, int]]) -> Optional[Union[str, int]]:
        if value is not None:
            parse_time_of_day(value, allow_end_of_day=True)
        return value

    def to_options(self, timezone: str) -> SchedulingOptions:
        """
        Build the per-query options.

        The daily window, if any, is read in ``timezone``.
        """
        has_window = self.earliest_time is not None or self.latest_time is not None
        return SchedulingOptions(
            slot_duration=self.duration_minutes,
            slot_split=self.split_minutes,
            offset=self.offset_minutes,
            padding=self.padding_minutes,
            max_overlaps=self.max_overlaps,
            timezone=timezone if has_window else None,
            earliest_time=self.earliest_time,
            latest_time=self.latest_time,
        )


class ScheduleRuleConfig(BaseModel):
    """One availability rule, e.g. weekdays 09:00-17:00."""
    days: List[str]
    start: str
    end: str

    @field_validator("days")
    @classmethod
    def validate_days(cls, value: List[str]) -> List[str]:
        """Ensure day names are valid and unique."""
        days = [Weekday.parse(day).label for day in value]
        if len(set(days)) != len(days):
            raise ValueError(f"duplicate days found: {value}")
        return days

    def to_domain(self) -> ScheduleRule:
        return ScheduleRule(days=self.days, start=self.start, end=self.end)


class AvailabilityConfig(BaseModel):
    """Weekly availability pattern."""
    schedules: List[ScheduleRuleConfig] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_pattern(self) -> "AvailabilityConfig":
        """Build the domain pattern once so rule errors surface at load time."""
        self.to_domain()
        return self

    def to_domain(self) -> WeeklyAvailability:
        return WeeklyAvailability(rules=tuple(rule.to_domain() for rule in self.schedules))


class BusyTimeConfig(BaseModel):
    """A fixed busy period, ISO-8601 timestamps."""
    start: str
    end: str


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "UTC"
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    availability: Optional[AvailabilityConfig] = None
    busy_times: List[BusyTimeConfig] = Field(default_factory=list)
    busy_file: Optional[Path] = None

    @field_validator("timezone")
    @classmethod
    def validate_timezone_name(cls, value: str) -> str:
        """Ensure the timezone exists in the IANA database."""
        return validate_timezone(value)

    @field_validator("busy_times")
    @classmethod
    def validate_busy_times(cls, value: List[BusyTimeConfig]) -> List[BusyTimeConfig]:
        """Ensure configured busy periods parse and are not inverted."""
        for entry in value:
            start = pendulum.parse(entry.start)
            end = pendulum.parse(entry.end)
            if start >= end:
                raise ValueError(f"busy period {entry.start} - {entry.end} must end after it starts")
        return value

    def get_availability(self) -> Optional[WeeklyAvailability]:
        if self.availability is None:
            return None
        return self.availability.to_domain()

    def busy_intervals(self) -> List[Interval]:
        """Configured busy periods as intervals; naive timestamps use ``timezone``."""
        return [
            Interval(
                start=to_epoch_ms(pendulum.parse(entry.start, tz=self.timezone)),
                end=to_epoch_ms(pendulum.parse(entry.end, tz=self.timezone)),
            )
            for entry in self.busy_times
        ]

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        config = cls(**data)

        # Relative busy-file paths are resolved against the config file
        if config.busy_file is not None and not config.busy_file.is_absolute():
            config.busy_file = config_path.parent / config.busy_file

        return config


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
