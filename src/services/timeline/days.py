"""
Per-day Timeline Views.

The layout engine works on one batch of items. The schedule spans many
days, so items are partitioned by their `date` field and laid out once per
day. This module also builds the view model returned by the timeline API.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace
from typing import Any

from src.services.timeline.geometry import (
    TimelineWindow,
    compute_boxes,
    compute_window,
    content_height,
)
from src.services.timeline.lanes import (
    LaneLayout,
    TimedItem,
    assign_lanes,
    read_field,
    timed_items_from,
)

ALL_DATES = "all"

logger = logging.getLogger(__name__)


def item_date(record: Any) -> str:
    return str(read_field(record, "date") or "")


def unique_dates(schedule: Iterable[Any]) -> list[str]:
    """Distinct dates in the schedule, earliest first."""
    return sorted({item_date(record) for record in schedule})


def filter_by_date(schedule: Sequence[Any], selected: str | None) -> list[Any]:
    """Items on `selected`; None or "all" returns the whole schedule."""
    if not selected or selected == ALL_DATES:
        return list(schedule)
    return [record for record in schedule if item_date(record) == selected]


def with_unique_ids(items: Sequence[TimedItem]) -> list[TimedItem]:
    """Give repeated ids a distinct layout key ("task-1#2", "task-1#3", ...).

    The lane layout is keyed by id, so two items sharing an id would share
    one placement. Previewing several plans together can produce that.
    """
    counts = Counter(item.id for item in items)
    if all(n == 1 for n in counts.values()):
        return list(items)

    logger.warning(
        "Repeated item ids in one layout: %s",
        sorted(item_id for item_id, n in counts.items() if n > 1),
    )
    taken = set(counts)
    seen: set[str] = set()
    result = []
    for item in items:
        if item.id not in seen:
            seen.add(item.id)
            result.append(item)
            continue
        suffix = 2
        while f"{item.id}#{suffix}" in taken:
            suffix += 1
        key = f"{item.id}#{suffix}"
        taken.add(key)
        result.append(replace(item, id=key))
    return result


@dataclass(frozen=True)
class DayLayouts:
    """Layouts for every day of a schedule, sharing one time window."""

    dates: list[str] = field(default_factory=list)
    items: dict[str, list[TimedItem]] = field(default_factory=dict)
    layouts: dict[str, LaneLayout] = field(default_factory=dict)
    max_lanes: int = 1
    window: TimelineWindow | None = None


def layout_by_day(schedule: Sequence[Any]) -> DayLayouts:
    """Run the lane layout once per date.

    `max_lanes` is at least 1 so an all-empty schedule still renders one row.
    The shared window covers every valid item across all days.
    """
    dates = unique_dates(schedule)
    items: dict[str, list[TimedItem]] = {}
    layouts: dict[str, LaneLayout] = {}
    max_lanes = 1

    for day in dates:
        day_items = with_unique_ids(timed_items_from(filter_by_date(schedule, day)))
        layout = assign_lanes(day_items)
        items[day] = day_items
        layouts[day] = layout
        max_lanes = max(max_lanes, layout.total_lanes)

    all_items = [item for day in dates for item in items[day]]
    return DayLayouts(
        dates=dates,
        items=items,
        layouts=layouts,
        max_lanes=max_lanes,
        window=compute_window(all_items),
    )


def _day_view(
    day_items: list[TimedItem],
    layout: LaneLayout,
    window: TimelineWindow,
    clamp_left: bool,
) -> dict[str, Any]:
    boxes = compute_boxes(day_items, layout, window, clamp_left=clamp_left)
    return {
        "total_lanes": layout.total_lanes,
        "content_height": content_height(layout.total_lanes),
        "placements": layout.to_dict()["placements"],
        "boxes": [box.to_dict() for box in boxes],
    }


def build_timeline_view(
    schedule: Sequence[Any],
    selected_date: str | None = ALL_DATES,
) -> dict[str, Any]:
    """View model for the timeline screen.

    A single selected date yields one layout over that day's items.
    "all" (or None) yields one layout per day on a shared window.
    """
    if selected_date and selected_date != ALL_DATES:
        day_items = with_unique_ids(timed_items_from(filter_by_date(schedule, selected_date)))
        layout = assign_lanes(day_items)
        window = compute_window(day_items)
        return {
            "mode": "day",
            "dates": [selected_date],
            "window": window.to_dict(),
            "max_lanes": layout.total_lanes,
            "days": {selected_date: _day_view(day_items, layout, window, clamp_left=False)},
        }

    by_day = layout_by_day(schedule)
    window = by_day.window or compute_window([])
    return {
        "mode": "all",
        "dates": by_day.dates,
        "window": window.to_dict(),
        "max_lanes": by_day.max_lanes,
        "days": {
            day: _day_view(by_day.items[day], by_day.layouts[day], window, clamp_left=True)
            for day in by_day.dates
        },
    }


__all__ = [
    "ALL_DATES",
    "DayLayouts",
    "unique_dates",
    "filter_by_date",
    "layout_by_day",
    "build_timeline_view",
    "with_unique_ids",
]
