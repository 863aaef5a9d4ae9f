"""
Tests for API schemas (src/api/schemas.py).

Tests cover the response envelope and validation of the request bodies:
camelCase aliases, defaults, and field constraints.
"""

from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from src.api.schemas import (
    GenerateScheduleRequest,
    ParseTimeRequest,
    SavePlanRequest,
    ScheduleRequest,
    TimelineLayoutRequest,
    UpcomingTaskRequest,
    UpdatePlanRequest,
    error_response,
    success_response,
)

ITEM = {"id": "a", "task": "Gym", "date": "2024-05-01", "startTime": "7:00 AM", "endTime": "8:00 AM"}

# =============================================================================
# Envelope
# =============================================================================


class TestEnvelope:
    """Tests for success_response and error_response."""

    def test_success(self) -> None:
        body = success_response({"x": 1})
        assert body["success"] is True
        assert body["data"] == {"x": 1}
        assert body["error"] is None
        assert "timestamp" in body["meta"]

    def test_success_extra_meta(self) -> None:
        body = success_response([], meta={"count": 0})
        assert body["meta"]["count"] == 0
        assert "timestamp" in body["meta"]

    def test_error_uses_registry_message(self) -> None:
        body = error_response("NOT_FOUND")
        assert body["success"] is False
        assert body["data"] is None
        assert body["error"] == {
            "code": "NOT_FOUND",
            "message": "The requested resource was not found.",
        }

    def test_error_with_details(self) -> None:
        body = error_response("VALIDATION_ERROR", "bad", details={"field": "name"})
        assert body["error"]["message"] == "bad"
        assert body["error"]["details"] == {"field": "name"}


# =============================================================================
# Requests
# =============================================================================


class TestGenerateScheduleRequest:
    def test_camel_case_keys(self) -> None:
        req = GenerateScheduleRequest.model_validate(
            {"userInput": "gym", "existingSchedule": [ITEM], "today": "2024-05-01"}
        )
        assert req.user_input == "gym"
        assert req.existing_schedule[0].start_time == "7:00 AM"
        assert req.today == date(2024, 5, 1)

    def test_snake_case_keys(self) -> None:
        req = GenerateScheduleRequest(user_input="gym")
        assert req.existing_schedule is None
        assert req.today is None

    def test_input_required(self) -> None:
        with pytest.raises(ValidationError):
            GenerateScheduleRequest.model_validate({})


class TestScheduleRequest:
    def test_requires_at_least_one_item(self) -> None:
        with pytest.raises(ValidationError):
            ScheduleRequest(schedule=[])


class TestTimelineLayoutRequest:
    def test_defaults(self) -> None:
        req = TimelineLayoutRequest()
        assert req.schedule == []
        assert req.selected_date == "all"

    def test_selected_date_alias(self) -> None:
        req = TimelineLayoutRequest.model_validate({"schedule": [ITEM], "selectedDate": "2024-05-01"})
        assert req.selected_date == "2024-05-01"


class TestParseTimeRequest:
    def test_value_length_capped(self) -> None:
        with pytest.raises(ValidationError):
            ParseTimeRequest(value="9" * 101)


class TestPlanRequests:
    """Tests for SavePlanRequest and UpdatePlanRequest."""

    def test_name_is_stripped(self) -> None:
        assert SavePlanRequest(name="  Launch  ").name == "Launch"

    @pytest.mark.parametrize("name", ["", "   "])
    def test_blank_name_rejected(self, name: str) -> None:
        with pytest.raises(ValidationError):
            SavePlanRequest(name=name)

    def test_negative_budget_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SavePlanRequest(name="x", budget=-1)

    def test_update_tracks_explicit_fields(self) -> None:
        """Test an explicit null budget is distinguishable from an omitted one."""
        cleared = UpdatePlanRequest.model_validate({"budget": None})
        untouched = UpdatePlanRequest.model_validate({"name": "x"})
        assert "budget" in cleared.model_fields_set
        assert "budget" not in untouched.model_fields_set

    def test_update_blank_name_rejected(self) -> None:
        with pytest.raises(ValidationError):
            UpdatePlanRequest(name="  ")


class TestUpcomingTaskRequest:
    def test_defaults(self) -> None:
        req = UpcomingTaskRequest()
        assert req.now is None
        assert req.notified_ids == []
        assert req.window_minutes is None

    @pytest.mark.parametrize("window", [0, 24 * 60 + 1])
    def test_window_bounds(self, window: int) -> None:
        with pytest.raises(ValidationError):
            UpcomingTaskRequest(window_minutes=window)
