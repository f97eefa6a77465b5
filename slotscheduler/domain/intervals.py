"""
Busy-interval normalization: padding, merging and clipping.
"""

from typing import Iterable, List

from .exceptions import PreconditionViolation
from .models import Interval
from .timezones import MS_PER_MINUTE


def apply_padding(busy: Iterable[Interval], padding_minutes: float) -> List[Interval]:
    """
    Expand every busy interval by ``padding_minutes`` on both sides.

    Zero padding returns a new list holding the same intervals.
    """
    if padding_minutes < 0:
        raise PreconditionViolation("Padding must be a non-negative number")

    busy = list(busy)
    if padding_minutes == 0 or not busy:
        return busy

    padding_ms = padding_minutes * MS_PER_MINUTE
    return [
        Interval(start=interval.start - padding_ms, end=interval.end + padding_ms)
        for interval in busy
    ]


def merge_intervals(busy: Iterable[Interval]) -> List[Interval]:
    """
    Merge overlapping or touching intervals.

    Malformed entries (non-finite or start >= end) are dropped. The result
    is sorted and pairwise disjoint, independent of input order and
    duplicates.

    Example: [09:00-10:00, 10:00-11:00] -> [09:00-11:00]
    """
    sorted_busy = sorted(
        (interval for interval in busy if interval.is_valid()),
        key=lambda interval: interval.start,
    )
    if not sorted_busy:
        return []

    merged: List[Interval] = [sorted_busy[0]]

    for current in sorted_busy[1:]:
        last = merged[-1]

        if current.start <= last.end:
            if current.end > last.end:
                merged[-1] = Interval(start=last.start, end=current.end)
        else:
            merged.append(current)

    return merged


def normalize(busy: Iterable[Interval], padding_minutes: float = 0) -> List[Interval]:
    """Pad then merge raw busy intervals into canonical form."""
    return merge_intervals(apply_padding(busy, padding_minutes))


def clip_intervals(intervals: Iterable[Interval], bounds: Interval) -> List[Interval]:
    """
    Clip intervals to ``bounds``, discarding anything left with no length.
    """
    clipped: List[Interval] = []

    for interval in intervals:
        start = max(interval.start, bounds.start)
        end = min(interval.end, bounds.end)
        if start < end:
            clipped.append(Interval(start=start, end=end))

    return clipped
