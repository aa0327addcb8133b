"""Tests for the OffsetTracker."""

import pytest

from quick_diff_apply.editing.offset_tracker import OffsetTracker


class TestOffsetTracker:
    def test_no_deltas_means_original_position(self):
        tracker = OffsetTracker()
        assert tracker.shift_before(3) == 0
        assert tracker.adjusted_start(3, old_start=10) == 9

    def test_only_lower_indices_shift(self):
        tracker = OffsetTracker()
        tracker.record(0, 2)
        tracker.record(2, -1)

        assert tracker.shift_before(0) == 0
        assert tracker.shift_before(1) == 2
        assert tracker.shift_before(2) == 2
        assert tracker.shift_before(3) == 1

    def test_application_order_is_irrelevant(self):
        forward = OffsetTracker()
        forward.record(0, 3)
        forward.record(1, -2)

        backward = OffsetTracker()
        backward.record(1, -2)
        backward.record(0, 3)

        assert forward.adjusted_start(2, 7) == backward.adjusted_start(2, 7) == 7

    def test_double_record_rejected(self):
        tracker = OffsetTracker()
        tracker.record(1, 1)
        with pytest.raises(ValueError):
            tracker.record(1, 2)

    def test_deltas_view_is_a_copy(self):
        tracker = OffsetTracker()
        tracker.record(0, 4)
        view = tracker.deltas
        view[5] = 100

        assert dict(tracker.deltas) == {0: 4}
        assert 0 in tracker
        assert 5 not in tracker
        assert len(tracker) == 1
