"""
Tests for busy-interval padding, merging and clipping.
"""

import pytest

from slotscheduler.domain.exceptions import PreconditionViolation
from slotscheduler.domain.intervals import apply_padding, clip_intervals, merge_intervals, normalize
from slotscheduler.domain.models import Interval

MINUTE = 60 * 1000


class TestApplyPadding:
    """Tests for apply_padding."""

    def test_pads_both_sides(self):
        """Test that padding widens each interval symmetrically."""
        busy = [Interval(60 * MINUTE, 120 * MINUTE)]

        padded = apply_padding(busy, 15)

        assert padded == [Interval(45 * MINUTE, 135 * MINUTE)]

    def test_zero_padding_returns_new_list(self):
        """Test that zero padding is a no-op without aliasing the input."""
        busy = [Interval(0, 10), Interval(20, 30)]

        padded = apply_padding(busy, 0)

        assert padded == busy
        assert padded is not busy

    def test_empty_input(self):
        """Test that empty input stays empty."""
        assert apply_padding([], 10) == []

    def test_negative_padding_raises(self):
        """Test that negative padding is rejected."""
        with pytest.raises(PreconditionViolation, match="Padding"):
            apply_padding([Interval(0, 10)], -5)


class TestMergeIntervals:
    """Tests for merge_intervals."""

    def test_merges_overlapping(self):
        """Test merging of overlapping intervals."""
        merged = merge_intervals([Interval(0, 10), Interval(5, 15)])

        assert merged == [Interval(0, 15)]

    def test_merges_touching(self):
        """Test that touching intervals count as overlapping."""
        merged = merge_intervals([Interval(0, 10), Interval(10, 20)])

        assert merged == [Interval(0, 20)]

    def test_keeps_disjoint_sorted(self):
        """Test that disjoint input comes back sorted and unmerged."""
        merged = merge_intervals([Interval(30, 40), Interval(0, 10)])

        assert merged == [Interval(0, 10), Interval(30, 40)]

    def test_contained_interval_does_not_shrink_group(self):
        """Test that an interval inside the current group leaves its end alone."""
        merged = merge_intervals([Interval(0, 100), Interval(10, 20), Interval(50, 60)])

        assert merged == [Interval(0, 100)]

    def test_order_and_duplicates_do_not_matter(self):
        """Test that input ordering and duplicates do not change the result."""
        busy = [Interval(5, 8), Interval(0, 3), Interval(2, 4), Interval(5, 8), Interval(10, 12)]

        expected = [Interval(0, 4), Interval(5, 8), Interval(10, 12)]

        assert merge_intervals(busy) == expected
        assert merge_intervals(list(reversed(busy))) == expected
        assert merge_intervals(busy + busy) == expected

    def test_drops_malformed(self):
        """Test that inverted, empty and non-finite intervals are dropped."""
        busy = [
            Interval(10, 5),
            Interval(7, 7),
            Interval(float("nan"), 3),
            Interval(0, float("inf")),
            Interval(1, 2),
        ]

        assert merge_intervals(busy) == [Interval(1, 2)]


class TestNormalize:
    """Tests for normalize."""

    def test_padding_can_join_neighbours(self):
        """Test that padding followed by merging joins close intervals."""
        busy = [Interval(0, 10 * MINUTE), Interval(15 * MINUTE, 20 * MINUTE)]

        result = normalize(busy, 5)

        assert result == [Interval(-5 * MINUTE, 25 * MINUTE)]

    def test_idempotent(self):
        """Test that normalizing twice equals normalizing once."""
        busy = [Interval(40, 50), Interval(0, 10), Interval(5, 20), Interval(20, 30)]

        once = normalize(busy)

        assert normalize(once) == once


def test_clip_intervals_discards_outside_and_trims():
    """Intervals are trimmed to bounds and empty leftovers removed."""
    intervals = [Interval(-10, 5), Interval(8, 12), Interval(20, 30), Interval(15, 20)]

    clipped = clip_intervals(intervals, Interval(0, 20))

    assert clipped == [Interval(0, 5), Interval(8, 12), Interval(15, 20)]
