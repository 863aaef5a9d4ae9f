"""
Pydantic Schemas for the TimeCraft REST API.

Defines request bodies for the API endpoints and the response envelope
every endpoint returns:

    {"success": bool, "data": ..., "error": {...} | None, "meta": {"timestamp": ...}}

Request bodies accept camelCase keys (as sent by the browser client) as
well as snake_case.
"""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from src.lib.errors import build_error_response
from src.models.schedule import ScheduleItem
from src.services.timeline.days import ALL_DATES

# =============================================================================
# Response Envelope
# =============================================================================


def _meta(extra: dict[str, Any] | None = None) -> dict[str, Any]:
    meta: dict[str, Any] = {"timestamp": datetime.now(UTC).isoformat()}
    if extra:
        meta.update(extra)
    return meta


def success_response(data: Any, meta: dict[str, Any] | None = None) -> dict[str, Any]:
    """Wrap `data` in a successful envelope."""
    return {"success": True, "data": data, "error": None, "meta": _meta(meta)}


def error_response(
    code: str,
    message: str | None = None,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a failed envelope; `message` defaults to the code's registry message."""
    return {
        "success": False,
        "data": None,
        "error": build_error_response(code, message, details),
        "meta": _meta(),
    }


# =============================================================================
# Request Schemas
# =============================================================================


class _RequestModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _clean_name(v: str | None) -> str | None:
    if v is None:
        return v
    stripped = v.strip()
    if not stripped:
        raise ValueError("Plan name cannot be empty.")
    return stripped


class GenerateScheduleRequest(_RequestModel):
    """Create a schedule, or modify `existing_schedule` when given."""

    user_input: str = Field(..., max_length=10000)
    existing_schedule: list[ScheduleItem] | None = None
    today: date | None = None


class ScheduleRequest(_RequestModel):
    """A schedule to analyse (optimization suggestions, summary)."""

    schedule: list[ScheduleItem] = Field(..., min_length=1)


class TimelineLayoutRequest(_RequestModel):
    """Schedule to lay out, for one date or for every date ("all")."""

    schedule: list[ScheduleItem] = Field(default_factory=list)
    selected_date: str = ALL_DATES


class ParseTimeRequest(_RequestModel):
    value: str = Field(..., max_length=100)


class SavePlanRequest(_RequestModel):
    """Save the current schedule as a new plan."""

    name: str = Field(..., min_length=1, max_length=200)
    schedule: list[ScheduleItem] = Field(default_factory=list)
    user_input: str = Field(default="", max_length=10000)
    budget: float | None = Field(default=None, ge=0)

    _strip_name = field_validator("name")(_clean_name)


class UpdatePlanRequest(_RequestModel):
    """Edit a saved plan.

    Name and budget come from the edit dialog. A schedule (with the input
    that produced it) overwrites the plan's tasks. Omitted fields are left
    unchanged; an explicit null budget removes the budget.
    """

    name: str | None = Field(default=None, min_length=1, max_length=200)
    budget: float | None = Field(default=None, ge=0)
    schedule: list[ScheduleItem] | None = None
    user_input: str | None = Field(default=None, max_length=10000)

    _strip_name = field_validator("name")(_clean_name)


class UpcomingTaskRequest(_RequestModel):
    """Schedule to scan for a task starting soon."""

    schedule: list[ScheduleItem] = Field(default_factory=list)
    now: datetime | None = None
    notified_ids: list[str] = Field(default_factory=list)
    # None uses the server setting (TIMECRAFT_NOTIFY_WINDOW_MINUTES)
    window_minutes: int | None = Field(default=None, ge=1, le=24 * 60)


__all__ = [
    "success_response",
    "error_response",
    "GenerateScheduleRequest",
    "ScheduleRequest",
    "TimelineLayoutRequest",
    "ParseTimeRequest",
    "SavePlanRequest",
    "UpdatePlanRequest",
    "UpcomingTaskRequest",
]
