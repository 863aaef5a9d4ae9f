"""
Tests for timeline geometry (src/services/timeline/geometry.py).

Tests:
- Visible window: default, minimum width, clamping at midnight
- Box positions from lane placements
- Content height
"""

import pytest

from src.services.timeline.geometry import (
    TimelineWindow,
    compute_boxes,
    compute_window,
    content_height,
)
from src.services.timeline.lanes import TimedItem, assign_lanes


def _item(item_id: str, start: int, end: int) -> TimedItem:
    return TimedItem(id=item_id, start_minutes=start, end_minutes=end)


class TestComputeWindow:
    """Tests for compute_window."""

    def test_default_window_without_items(self) -> None:
        """Test the 8am-6pm default with eleven hour marks."""
        window = compute_window([])
        assert window.start_minutes == 480
        assert window.end_minutes == 1080
        assert window.hours == list(range(8, 19))

    def test_short_range_is_widened_to_four_hours(self) -> None:
        """Test 9:00-11:00 becomes 9:00-13:00."""
        window = compute_window([_item("a", 540, 600), _item("b", 600, 660)])
        assert window.start_minutes == 540
        assert window.end_minutes == 780
        assert window.hours == [9, 10, 11, 12]

    def test_partial_hours_round_outward(self) -> None:
        """Test start floors and end ceils to whole hours."""
        window = compute_window([_item("a", 7 * 60 + 45, 13 * 60 + 10)])
        assert window.start_minutes == 7 * 60
        assert window.end_minutes == 14 * 60

    def test_end_is_clamped_to_midnight(self) -> None:
        """Test a late item does not push the window past 24:00."""
        window = compute_window([_item("late", 22 * 60, 23 * 60 + 30)])
        assert window.start_minutes == 22 * 60
        assert window.end_minutes == 24 * 60
        assert window.hours == [22, 23]

    def test_total_minutes_is_never_zero(self) -> None:
        assert TimelineWindow(start_minutes=600, end_minutes=600).total_minutes == 1

    def test_to_dict_includes_labels(self) -> None:
        data = compute_window([_item("a", 540, 600)]).to_dict()
        assert data["hour_labels"] == ["9am", "10am", "11am", "12pm"]
        assert data["total_minutes"] == 240


class TestComputeBoxes:
    """Tests for compute_boxes."""

    def test_boxes_follow_lanes_and_window(self) -> None:
        """Test left/width percentages and lane offsets."""
        items = [_item("A", 540, 600), _item("B", 570, 630), _item("C", 600, 660)]
        layout = assign_lanes(items)
        window = compute_window(items)  # 9:00-13:00

        boxes = {box.id: box for box in compute_boxes(items, layout, window)}

        assert boxes["A"].left_pct == pytest.approx(0.0)
        assert boxes["A"].width_pct == pytest.approx(25.0)
        assert boxes["A"].top_px == 0
        assert boxes["B"].left_pct == pytest.approx(12.5)
        assert boxes["B"].top_px == 50
        assert boxes["C"].left_pct == pytest.approx(25.0)
        assert boxes["C"].top_px == 0
        assert all(box.height_px == 45 for box in boxes.values())

    def test_items_before_window_are_skipped(self) -> None:
        """Test the single-day view drops boxes that start off-screen."""
        early = _item("early", 300, 360)
        layout = assign_lanes([early])
        window = TimelineWindow(start_minutes=480, end_minutes=1080)
        assert compute_boxes([early], layout, window) == []

    def test_clamp_left_pins_to_edge(self) -> None:
        """Test the multi-day view clamps early boxes to the left edge."""
        early = _item("early", 420, 540)
        layout = assign_lanes([early])
        window = TimelineWindow(start_minutes=480, end_minutes=1080)
        [box] = compute_boxes([early], layout, window, clamp_left=True)
        assert box.left_pct == 0.0
        assert box.width_pct == pytest.approx(20.0)

    def test_width_does_not_overflow_window(self) -> None:
        item = _item("long", 960, 1200)
        layout = assign_lanes([item])
        window = TimelineWindow(start_minutes=480, end_minutes=1080)
        [box] = compute_boxes([item], layout, window)
        assert box.left_pct + box.width_pct == pytest.approx(100.0)

    def test_unplaced_items_are_skipped(self) -> None:
        placed = _item("placed", 540, 600)
        layout = assign_lanes([placed])
        boxes = compute_boxes([placed, _item("stray", 540, 600)], layout, compute_window([placed]))
        assert [box.id for box in boxes] == ["placed"]

    def test_custom_lane_height(self) -> None:
        items = [_item("A", 540, 600), _item("B", 540, 600)]
        boxes = compute_boxes(items, assign_lanes(items), compute_window(items), lane_height=30)
        assert [box.top_px for box in boxes] == [0, 30]


class TestContentHeight:
    """Tests for content_height."""

    @pytest.mark.parametrize(("lanes", "height"), [(0, 200), (1, 200), (4, 200), (5, 250), (10, 500)])
    def test_height_has_a_floor(self, lanes: int, height: int) -> None:
        assert content_height(lanes) == height
