"""
Tests for snap-scroll active item tracking.
"""
import pytest

from reelview.services.tracker import ActiveItemTracker, active_index_for


class TestActiveIndexFor:
    @pytest.mark.parametrize(
        "offset,height,expected",
        [
            (0, 800, 0),
            (399, 800, 0),
            (400, 800, 1),  # half rounds up
            (1600, 800, 2),
            (2399.9, 800, 3),
        ],
    )
    def test_rounds_to_nearest_item(self, offset, height, expected):
        assert active_index_for(offset, height) == expected


class TestActiveItemTracker:
    def test_signals_only_real_changes(self):
        changes = []
        tracker = ActiveItemTracker(on_change=lambda old, new: changes.append((old, new)))

        assert tracker.update(10, 800) is False
        assert tracker.update(850, 800) is True
        assert tracker.update(860, 800) is False

        assert changes == [(0, 1)]
        assert tracker.active_index == 1

    def test_zero_height_is_ignored(self):
        tracker = ActiveItemTracker(initial_index=2)

        assert tracker.update(5000, 0) is False
        assert tracker.active_index == 2

    def test_reset_does_not_signal(self):
        changes = []
        tracker = ActiveItemTracker(on_change=lambda old, new: changes.append((old, new)))
        tracker.update(1600, 800)

        tracker.reset()

        assert tracker.active_index == 0
        assert changes == [(0, 2)]

    @pytest.mark.parametrize(
        "offset,height",
        [
            (1e308, 1e-10),
            (float("inf"), 800),
            (float("nan"), 800),
            (100, float("nan")),
        ],
    )
    def test_non_finite_ratio_is_ignored(self, offset, height):
        changes = []
        tracker = ActiveItemTracker(on_change=lambda old, new: changes.append((old, new)), initial_index=1)

        assert tracker.update(offset, height) is False
        assert tracker.active_index == 1
        assert changes == []
