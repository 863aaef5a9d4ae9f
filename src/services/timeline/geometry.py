"""
Timeline Geometry.

Turns lane placements into box positions for a horizontal timeline:
time runs left to right as a percentage of the visible window, lanes stack
top to bottom at a fixed pixel pitch.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from src.services.timeline.lanes import LaneLayout, TimedItem
from src.services.timeline.time_parser import format_hour_label

DEFAULT_START_HOUR = 8
DEFAULT_END_HOUR = 18
MIN_WINDOW_HOURS = 4

LANE_HEIGHT_PX = 50
BOX_HEIGHT_PX = 45
MIN_CONTENT_HEIGHT_PX = 200


@dataclass(frozen=True)
class TimelineWindow:
    """Visible time range of a timeline, aligned to whole hours."""

    start_minutes: int
    end_minutes: int
    hours: list[int] = field(default_factory=list)

    @property
    def total_minutes(self) -> int:
        return max(1, self.end_minutes - self.start_minutes)

    @property
    def hour_width_pct(self) -> float:
        return 60 / self.total_minutes * 100

    def to_dict(self) -> dict[str, Any]:
        return {
            "start_minutes": self.start_minutes,
            "end_minutes": self.end_minutes,
            "total_minutes": self.total_minutes,
            "hours": list(self.hours),
            "hour_labels": [format_hour_label(h) for h in self.hours],
        }


@dataclass(frozen=True)
class TaskBox:
    """Position of one item on the timeline."""

    id: str
    left_pct: float
    width_pct: float
    top_px: int
    height_px: int
    lane_index: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "left_pct": self.left_pct,
            "width_pct": self.width_pct,
            "top_px": self.top_px,
            "height_px": self.height_px,
            "lane_index": self.lane_index,
        }


def compute_window(items: Sequence[TimedItem]) -> TimelineWindow:
    """Smallest whole-hour window covering all items, at least four hours wide.

    With no items the window defaults to 8am-6pm. The end is clamped to
    midnight.
    """
    if not items:
        return TimelineWindow(
            start_minutes=DEFAULT_START_HOUR * 60,
            end_minutes=DEFAULT_END_HOUR * 60,
            hours=list(range(DEFAULT_START_HOUR, DEFAULT_END_HOUR + 1)),
        )

    min_start = min(item.start_minutes for item in items)
    max_end = max(item.end_minutes for item in items)

    start_hour = min_start // 60
    end_hour = math.ceil(max_end / 60)
    if end_hour - start_hour < MIN_WINDOW_HOURS:
        end_hour = start_hour + MIN_WINDOW_HOURS
    end_hour = min(end_hour, 24)

    return TimelineWindow(
        start_minutes=start_hour * 60,
        end_minutes=end_hour * 60,
        hours=list(range(start_hour, end_hour)),
    )


def compute_boxes(
    items: Sequence[TimedItem],
    layout: LaneLayout,
    window: TimelineWindow,
    lane_height: int = LANE_HEIGHT_PX,
    box_height: int = BOX_HEIGHT_PX,
    clamp_left: bool = False,
) -> list[TaskBox]:
    """Position every placed item inside `window`.

    Args:
        items: Items that were passed to the layout engine
        layout: Result of assign_lanes for those items
        window: Visible time window
        lane_height: Vertical pitch between lanes in pixels
        box_height: Height of a single box in pixels
        clamp_left: Clamp boxes starting before the window to the left edge
            instead of dropping them (multi-day view)

    Returns:
        Boxes in input order; items without a placement are skipped
    """
    total = window.total_minutes
    boxes: list[TaskBox] = []

    for item in items:
        placement = layout.get(item.id)
        if placement is None:
            continue

        left = (item.start_minutes - window.start_minutes) / total * 100
        if clamp_left:
            left = max(0.0, left)
        elif left < 0 or left > 100:
            continue

        width = (item.end_minutes - item.start_minutes) / total * 100
        boxes.append(
            TaskBox(
                id=item.id,
                left_pct=left,
                width_pct=min(width, 100 - left),
                top_px=placement.lane_index * lane_height,
                height_px=box_height,
                lane_index=placement.lane_index,
            )
        )

    return boxes


def content_height(
    total_lanes: int,
    lane_height: int = LANE_HEIGHT_PX,
    minimum: int = MIN_CONTENT_HEIGHT_PX,
) -> int:
    """Pixel height needed to show `total_lanes` lanes."""
    return max(minimum, total_lanes * lane_height)


__all__ = [
    "TimelineWindow",
    "TaskBox",
    "compute_window",
    "compute_boxes",
    "content_height",
]
