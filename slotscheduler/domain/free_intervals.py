"""
Free-interval sweep engine.

Generalizes "free = not busy" to "free = at most K busy periods overlap this
instant". K = 0 reproduces the traditional behaviour.
"""

import logging
from typing import Iterable, List, Optional, Tuple

from .exceptions import PreconditionViolation
from .intervals import clip_intervals, merge_intervals
from .models import Interval

logger = logging.getLogger(__name__)

_END = -1
_START = 1


def find_free_intervals(
    busy: Iterable[Interval],
    max_overlaps: int,
    bounds: Optional[Interval] = None,
) -> List[Interval]:
    """
    Return the maximal intervals where at most ``max_overlaps`` busy
    intervals are active at once.

    Algorithm (sweep line):
    1. Emit +1 at each busy start and -1 at each busy end
    2. Sort by time; at equal times ends come before starts, so an interval
       ending exactly when another starts is not double counted
    3. Walk the events keeping a running ``active`` count. Before applying
       the events at time t, the range since the previous event is free if
       ``active <= K``
    4. Merge adjacent results and clip them to ``bounds``

    Args:
        busy: Busy intervals; malformed entries are dropped silently
        max_overlaps: Tolerance K, a non-negative integer
        bounds: Optional window; without it the result spans the busy data

    Returns:
        Sorted, disjoint free intervals of positive length

    Raises:
        PreconditionViolation: If K is negative or not an integer, or
            bounds are malformed
    """
    if isinstance(max_overlaps, bool) or not isinstance(max_overlaps, int):
        raise PreconditionViolation(
            f"find_free_intervals: K must be an integer, got {max_overlaps!r}"
        )
    if max_overlaps < 0:
        raise PreconditionViolation("find_free_intervals: K must be non-negative")
    if bounds is not None and not bounds.is_valid():
        raise PreconditionViolation(f"find_free_intervals: invalid bounds {bounds!r}")

    busy = list(busy)
    valid_busy = [interval for interval in busy if interval.is_valid()]
    if len(valid_busy) != len(busy):
        logger.debug("Dropped %d malformed busy interval(s)", len(busy) - len(valid_busy))

    if not valid_busy:
        return [bounds] if bounds is not None else []

    events: List[Tuple[float, int]] = []
    for interval in valid_busy:
        events.append((interval.start, _START))
        events.append((interval.end, _END))
    events.sort()

    if bounds is not None:
        effective_start, effective_end = bounds.start, bounds.end
    else:
        effective_start = min(interval.start for interval in valid_busy)
        effective_end = max(interval.end for interval in valid_busy)

    free: List[Interval] = []
    active = 0
    prev = effective_start
    index = 0

    while index < len(events):
        time = events[index][0]

        if active <= max_overlaps and prev < time:
            free.append(Interval(start=prev, end=time))

        # Apply every delta at this timestamp atomically
        while index < len(events) and events[index][0] == time:
            active += events[index][1]
            index += 1

        prev = time

    if active <= max_overlaps and prev < effective_end:
        free.append(Interval(start=prev, end=effective_end))

    merged = merge_intervals(free)

    if bounds is not None:
        return clip_intervals(merged, bounds)

    return merged
