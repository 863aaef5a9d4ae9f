"""
Upcoming Task Notifications for TimeCraft.

Finds the next task that starts within the notification window (15 minutes
by default) so the client can show a reminder banner. A task is announced
once: the client keeps the ids of dismissed reminders and sends them back
as `notified_ids`.

The client polls POST /notifications/upcoming about once a minute.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import date, datetime, time, timedelta

from src.models.schedule import ScheduleItem
from src.services.timeline.time_parser import is_valid_minutes, parse_time_to_minutes

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_MINUTES = 15


def task_start_datetime(item: ScheduleItem) -> datetime | None:
    """Naive local datetime at which `item` starts, or None if it does not parse."""
    minutes = parse_time_to_minutes(item.start_time)
    if not is_valid_minutes(minutes):
        return None
    try:
        day = date.fromisoformat(item.date)
    except ValueError:
        return None
    return datetime.combine(day, time(hour=minutes // 60, minute=minutes % 60))


def find_upcoming_task(
    schedule: Sequence[ScheduleItem],
    now: datetime,
    notified_ids: Iterable[str] = (),
    window_minutes: int = DEFAULT_WINDOW_MINUTES,
) -> ScheduleItem | None:
    """First task in schedule order that starts in (now, now + window].

    Completed tasks and tasks already notified are skipped. `now` is
    compared as a naive local time, like the schedule itself.
    """
    skip = set(notified_ids)
    now = now.replace(tzinfo=None)
    horizon = now + timedelta(minutes=window_minutes)

    for item in schedule:
        if item.completed or item.id in skip:
            continue
        starts_at = task_start_datetime(item)
        if starts_at is None:
            continue
        if now < starts_at <= horizon:
            logger.info("Upcoming task %s at %s", item.id, item.start_time)
            return item
    return None


__all__ = [
    "DEFAULT_WINDOW_MINUTES",
    "task_start_datetime",
    "find_upcoming_task",
]
