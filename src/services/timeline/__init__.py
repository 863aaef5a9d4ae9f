"""
Timeline Services Package for TimeCraft.

- time_parser: "H:MM AM/PM" -> minutes since midnight
- lanes: greedy first-fit lane assignment (the layout engine)
- geometry: window and box positions for rendering
- days: per-date partitioning and the timeline view model
"""

from src.services.timeline.days import (
    ALL_DATES,
    DayLayouts,
    build_timeline_view,
    filter_by_date,
    layout_by_day,
    unique_dates,
    with_unique_ids,
)
from src.services.timeline.geometry import (
    TaskBox,
    TimelineWindow,
    compute_boxes,
    compute_window,
    content_height,
)
from src.services.timeline.lanes import (
    LaneLayout,
    LanePlacement,
    TimedItem,
    assign_lanes,
    max_overlap_depth,
    timed_items_from,
    to_timed_item,
)
from src.services.timeline.time_parser import (
    INVALID_MINUTES,
    format_hour_label,
    is_valid_minutes,
    parse_time_to_minutes,
    sort_key_minutes,
)

__all__ = [
    # Parser
    "INVALID_MINUTES",
    "parse_time_to_minutes",
    "is_valid_minutes",
    "sort_key_minutes",
    "format_hour_label",
    # Lanes
    "TimedItem",
    "LanePlacement",
    "LaneLayout",
    "to_timed_item",
    "timed_items_from",
    "assign_lanes",
    "max_overlap_depth",
    # Geometry
    "TimelineWindow",
    "TaskBox",
    "compute_window",
    "compute_boxes",
    "content_height",
    # Days
    "ALL_DATES",
    "DayLayouts",
    "unique_dates",
    "filter_by_date",
    "layout_by_day",
    "build_timeline_view",
]
