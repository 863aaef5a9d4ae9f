"""
Lane Layout Engine.

Assigns time-bounded items to non-overlapping lanes so overlapping tasks
render side by side instead of on top of each other.

Algorithm (greedy first-fit interval partitioning):
1. Stable sort by start minute; ties keep input order.
2. Each lane remembers only the end minute of its last item.
3. An item goes into the first lane, in creation order, whose last end is
   <= the item's start (back-to-back is allowed). Otherwise a new lane opens.

First-fit over start-sorted intervals is optimal for interval graphs: the
lane count equals the maximum number of items active at any instant.
Which lane an item lands in is observable, so the scan order matters.

The engine is pure. It knows nothing about dates, pixels, or plans.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, NamedTuple

from src.services.timeline.time_parser import is_valid_minutes, parse_time_to_minutes


@dataclass(frozen=True)
class TimedItem:
    """An item with a resolved [start, end) interval in minutes since midnight."""

    id: str
    start_minutes: int
    end_minutes: int

    def overlaps(self, other: TimedItem) -> bool:
        return self.start_minutes < other.end_minutes and other.start_minutes < self.end_minutes


class LanePlacement(NamedTuple):
    """Where one item was placed."""

    lane_index: int
    total_lanes: int


@dataclass(frozen=True)
class LaneLayout:
    """Result of one layout pass: item id -> placement, plus the lane count."""

    placements: Mapping[str, LanePlacement] = field(default_factory=dict)
    total_lanes: int = 0

    def __getitem__(self, item_id: str) -> LanePlacement:
        return self.placements[item_id]

    def __contains__(self, item_id: object) -> bool:
        return item_id in self.placements

    def __len__(self) -> int:
        return len(self.placements)

    def __iter__(self) -> Iterator[str]:
        return iter(self.placements)

    def get(self, item_id: str) -> LanePlacement | None:
        return self.placements.get(item_id)

    def lanes(self) -> list[list[str]]:
        """Item ids grouped per lane, in placement order."""
        grouped: list[list[str]] = [[] for _ in range(self.total_lanes)]
        for item_id, placement in self.placements.items():
            grouped[placement.lane_index].append(item_id)
        return grouped

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_lanes": self.total_lanes,
            "placements": {
                item_id: {
                    "lane_index": placement.lane_index,
                    "total_lanes": placement.total_lanes,
                }
                for item_id, placement in self.placements.items()
            },
        }


def read_field(record: Any, *names: str) -> Any:
    """Read the first present attribute or key out of `names`."""
    for name in names:
        if isinstance(record, Mapping):
            if name in record:
                return record[name]
        elif hasattr(record, name):
            return getattr(record, name)
    return None


def to_timed_item(record: Any) -> TimedItem | None:
    """Parse a schedule record into a TimedItem.

    Accepts objects or mappings using either snake_case or camelCase
    field names. Returns None when the start time does not parse or the
    interval is empty or inverted.
    """
    start = parse_time_to_minutes(read_field(record, "start_time", "startTime"))
    end = parse_time_to_minutes(read_field(record, "end_time", "endTime"))
    if not is_valid_minutes(start) or end <= start:
        return None
    return TimedItem(id=str(read_field(record, "id")), start_minutes=start, end_minutes=end)


def timed_items_from(records: Iterable[Any]) -> list[TimedItem]:
    """Parse records, silently dropping those that are not eligible for layout."""
    items = []
    for record in records:
        item = to_timed_item(record)
        if item is not None:
            items.append(item)
    return items


def assign_lanes(items: Iterable[TimedItem]) -> LaneLayout:
    """Partition items into the minimum number of non-overlapping lanes.

    Args:
        items: Items with valid intervals (end > start). Ids must be unique.

    Returns:
        LaneLayout mapping each id to (lane_index, total_lanes)
    """
    ordered = sorted(items, key=lambda item: item.start_minutes)

    lane_ends: list[int] = []
    lane_of: dict[str, int] = {}

    for item in ordered:
        for index, lane_end in enumerate(lane_ends):
            if lane_end <= item.start_minutes:
                lane_ends[index] = item.end_minutes
                lane_of[item.id] = index
                break
        else:
            lane_ends.append(item.end_minutes)
            lane_of[item.id] = len(lane_ends) - 1

    total = len(lane_ends)
    return LaneLayout(
        placements={
            item_id: LanePlacement(lane_index=index, total_lanes=total)
            for item_id, index in lane_of.items()
        },
        total_lanes=total,
    )


def max_overlap_depth(items: Iterable[TimedItem]) -> int:
    """Maximum number of items active at one instant.

    Ends are processed before starts at the same minute, matching the
    half-open intervals used by `assign_lanes`.
    """
    events: list[tuple[int, int]] = []
    for item in items:
        events.append((item.start_minutes, 1))
        events.append((item.end_minutes, -1))
    events.sort()

    depth = 0
    deepest = 0
    for _, delta in events:
        depth += delta
        deepest = max(deepest, depth)
    return deepest


__all__ = [
    "TimedItem",
    "LanePlacement",
    "LaneLayout",
    "read_field",
    "to_timed_item",
    "timed_items_from",
    "assign_lanes",
    "max_overlap_depth",
]
