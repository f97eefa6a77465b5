"""
Busy-time source backed by a JSON calendar export.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

import pendulum
from pendulum import DateTime

from ..domain.models import Interval
from ..domain.timezones import to_epoch_ms

logger = logging.getLogger(__name__)


class BusyFileLoader:
    """
    Loads busy times from a JSON file.

    The file holds a list of events, each with ISO-8601 ``start`` and ``end``
    values; any other keys (``title``, ``calendarId`` ...) are ignored:

        [{"start": "2024-01-15T10:00:00Z", "end": "2024-01-15T11:00:00Z"}]

    Timestamps without an offset are read in the requested timezone. Events
    that cannot be parsed are skipped with a warning so that one broken
    export entry does not block scheduling.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._events: List[Dict[str, Any]] | None = None

    def _load_events(self) -> List[Dict[str, Any]]:
        """Read and cache the raw event list."""
        if self._events is not None:
            return self._events

        if not self.path.exists():
            raise FileNotFoundError(f"Busy-time file not found: {self.path}")

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON in {self.path}: {exc}") from exc

        if not isinstance(data, list):
            raise ValueError(f"Busy-time file {self.path} must contain a list of events")

        self._events = data
        return self._events

    def get_busy_times(
        self,
        start_time: DateTime,
        end_time: DateTime,
        timezone: str = "UTC",
    ) -> List[Interval]:
        """
        Return busy intervals overlapping ``[start_time, end_time)``.

        Args:
            start_time: Start of the time window
            end_time: End of the time window
            timezone: IANA timezone for timestamps without an offset

        Returns:
            List of busy Interval objects
        """
        window = Interval.from_datetimes(start_time, end_time)
        busy_times: List[Interval] = []
        skipped = 0

        for index, event in enumerate(self._load_events()):
            try:
                event_start = pendulum.parse(event["start"], tz=timezone)
                event_end = pendulum.parse(event["end"], tz=timezone)
                if not isinstance(event_start, DateTime) or not isinstance(event_end, DateTime):
                    raise ValueError("start and end must be date-times")
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping event %d in %s: %s", index, self.path, exc)
                skipped += 1
                continue

            interval = Interval(start=to_epoch_ms(event_start), end=to_epoch_ms(event_end))
            if interval.overlaps(window):
                busy_times.append(interval)

        logger.debug(
            "Loaded %d busy interval(s) from %s (%d skipped)",
            len(busy_times), self.path, skipped,
        )
        return busy_times
