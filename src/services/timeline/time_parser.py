"""
Time-of-day Parser for the Timeline.

Schedule items carry wall-clock times as 12-hour strings ("9:30 AM").
The layout engine works in integer minutes since midnight, so every item
passes through `parse_time_to_minutes` first.

Parsing never raises: an unparseable string yields INVALID_MINUTES and the
caller drops the item before layout.

Examples:
    parse_time_to_minutes("12:00 AM")  -> 0
    parse_time_to_minutes("12:00 PM")  -> 720
    parse_time_to_minutes("1:05 pm")   -> 785
    parse_time_to_minutes("13:00")     -> -1
"""

from __future__ import annotations

import re
from typing import Any

INVALID_MINUTES = -1

_TIME_PATTERN = re.compile(r"(\d{1,2}):(\d{2})\s*(AM|PM)", re.IGNORECASE)


def parse_time_to_minutes(value: Any) -> int:
    """Convert an "H:MM AM/PM" string to minutes since midnight.

    12 AM is midnight (0) and 12 PM is noon (720).

    Args:
        value: Time string, e.g. "9:30 AM"

    Returns:
        Minutes in [0, 1439], or INVALID_MINUTES if the string does not match
    """
    if not isinstance(value, str):
        return INVALID_MINUTES

    match = _TIME_PATTERN.search(value)
    if match is None:
        return INVALID_MINUTES

    hour = int(match.group(1))
    minute = int(match.group(2))
    period = match.group(3).upper()

    if hour > 12 or minute > 59:
        return INVALID_MINUTES

    if period == "PM" and hour < 12:
        hour += 12
    elif period == "AM" and hour == 12:
        hour = 0

    return hour * 60 + minute


def is_valid_minutes(minutes: int) -> bool:
    """True unless `minutes` is the parse-failure sentinel."""
    return minutes >= 0


def sort_key_minutes(value: Any) -> int:
    """Minutes for ordering purposes; unparseable times sort as midnight."""
    minutes = parse_time_to_minutes(value)
    return minutes if is_valid_minutes(minutes) else 0


def format_hour_label(hour: int) -> str:
    """Axis label for an hour of the day: 0 -> "12am", 13 -> "1pm"."""
    h = hour % 24
    if h == 0:
        return "12am"
    if h == 12:
        return "12pm"
    if h < 12:
        return f"{h}am"
    return f"{h - 12}pm"


__all__ = [
    "INVALID_MINUTES",
    "parse_time_to_minutes",
    "is_valid_minutes",
    "sort_key_minutes",
    "format_hour_label",
]
