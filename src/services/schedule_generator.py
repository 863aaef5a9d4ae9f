"""
Schedule Generator for TimeCraft.

Turns a free-text description of goals into a list of timed tasks using the
Gemini `generateContent` REST API, and asks the same model for optimization
suggestions and a plan summary.

Schedule generation requests JSON output constrained by a response schema,
then validates every item with pydantic. The returned schedule is sorted by
date and start time because the model does not reliably order it.

Every failure (transport, HTTP status, malformed output, open circuit) is
logged and surfaced as ExternalServiceError so callers have one error to
handle.

Usage:
    generator = get_schedule_generator()
    schedule = await generator.generate_schedule("Gym at 7am, dentist Friday 3pm")
    tips = await generator.get_optimization_suggestions(schedule)
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from datetime import date
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from src.config.settings import Settings, get_settings
from src.lib.circuit_breaker import CircuitBreakerError, get_circuit_breaker
from src.lib.exceptions import ExternalServiceError, ValidationError
from src.lib.logging import get_logger
from src.models.schedule import ScheduleItem
from src.services.timeline.time_parser import sort_key_minutes

logger = get_logger(__name__)

AI_FAILURE_MESSAGE = "Failed to communicate with the AI model."
CIRCUIT_NAME = "gemini_api"
GENERATION_TEMPERATURE = 0.7

# Gemini REST response schema for generate_schedule
SCHEDULE_RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "schedule": {
            "type": "ARRAY",
            "description": "A list of scheduled tasks and events.",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "id": {
                        "type": "STRING",
                        "description": "A unique identifier for the task (e.g., 'task-123').",
                    },
                    "task": {"type": "STRING", "description": "The specific task to be done."},
                    "date": {
                        "type": "STRING",
                        "description": "The date of the task in YYYY-MM-DD format.",
                    },
                    "startTime": {
                        "type": "STRING",
                        "description": "Suggested start time in 'HH:MM AM/PM' format.",
                    },
                    "endTime": {
                        "type": "STRING",
                        "description": "Suggested end time in 'HH:MM AM/PM' format.",
                    },
                    "duration": {
                        "type": "STRING",
                        "description": "Estimated duration for the task, e.g., '2 hours'.",
                    },
                    "priority": {
                        "type": "STRING",
                        "description": "Priority level: 'High', 'Medium', or 'Low'.",
                    },
                    "completed": {
                        "type": "BOOLEAN",
                        "description": "Whether the task is completed. Always false.",
                    },
                    "cost": {
                        "type": "NUMBER",
                        "description": "Estimated cost in USD. 0 if no cost is associated.",
                    },
                },
                "required": [
                    "id", "task", "date", "startTime", "endTime",
                    "duration", "priority", "completed",
                ],
            },
        },
    },
    "required": ["schedule"],
}


# =============================================================================
# Prompts
# =============================================================================


def _schedule_json(schedule: Sequence[ScheduleItem]) -> str:
    return json.dumps(
        [item.model_dump(by_alias=True, exclude_none=True) for item in schedule],
        indent=2,
    )


def build_schedule_prompt(
    user_input: str,
    existing_schedule: Sequence[ScheduleItem] | None,
    today: date,
) -> str:
    """Prompt that creates a schedule, or modifies `existing_schedule` if given."""
    if existing_schedule:
        instruction = (
            "Your task is to modify an existing schedule based on the user's new request. "
            "Analyze the request and the current schedule, then regenerate the entire "
            "schedule with the necessary adjustments (adding, removing, or rescheduling tasks)."
        )
        context = (
            "\nHere is the current schedule that needs to be modified:\n"
            f"{_schedule_json(existing_schedule)}\n"
        )
    else:
        instruction = (
            "Your task is to create a detailed, actionable, and prioritized schedule from "
            "scratch based on the user's free-form text input."
        )
        context = ""

    return f"""
You are an expert time management and productivity coach named Time Craft.
{instruction}

First, identify every goal, task, deadline and stated priority in the user's input,
along with personal preferences, constraints and fixed appointments.
Then identify any costs. Use a stated cost as given, estimate an implied cost
(e.g. 'buy groceries'), and use 0 when there is no cost.

Today's date is {today.isoformat()}.
{context}
The user's latest input is:
"{user_input}"

Generate a structured schedule for the timeline the request implies (a day, a week,
a month, or a project duration).
- Infer dates from relative terms like "next Friday".
- Assign each task a priority of 'High', 'Medium', or 'Low'; schedule high priority first.
- Break larger goals into smaller sub-tasks and include breaks where appropriate.
- Sort chronologically by date, then by start time.
- For each task give a short unique id, a task name, the date as YYYY-MM-DD, a start
  time and end time as 'HH:MM AM/PM', a duration, the priority, completed=false, and
  the estimated cost in USD.

The output must be a JSON object that adheres to the provided schema.
"""


def build_optimization_prompt(schedule: Sequence[ScheduleItem]) -> str:
    return f"""
You are an expert productivity coach named Time Craft.
Analyze the following schedule and give a concise, actionable list of suggestions
for optimizing it.

The current schedule is:
{_schedule_json(schedule)}

Look for overly packed days without breaks, high-priority work placed late in the day,
similar tasks that could be batched, deep work that would fit the morning better, and
bottlenecks or dependencies between tasks.

Reply with a short bulleted list of 2-4 concrete suggestions in a helpful, encouraging
tone, formatted as Markdown.
"""


def build_summary_prompt(schedule: Sequence[ScheduleItem]) -> str:
    return f"""
You are an expert project manager and strategic analyst named Time Craft.
Analyze the following schedule and provide a high-level summary.

The current schedule is:
{_schedule_json(schedule)}

Cover three areas, each under its own Markdown heading:
1. **Scope**: the main goals, key deliverables and overall objectives.
2. **Schedule**: the overall timeline, key milestones and critical dates.
3. **Efficacy**: feasibility, strengths (balanced days, clear priorities) and risks
   (tight deadlines, high costs, missing breaks).
"""


# =============================================================================
# Response handling
# =============================================================================


def _response_text(payload: dict[str, Any]) -> str:
    """Concatenate the text parts of the first candidate."""
    try:
        parts = payload["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ExternalServiceError(AI_FAILURE_MESSAGE) from exc
    text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))
    if not text.strip():
        raise ExternalServiceError(AI_FAILURE_MESSAGE)
    return text


def _strip_code_fence(text: str) -> str:
    stripped = text.strip()
    if stripped.startswith("```"):
        stripped = stripped.split("\n", 1)[1] if "\n" in stripped else ""
        if stripped.rstrip().endswith("```"):
            stripped = stripped.rstrip()[:-3]
    return stripped.strip()


def parse_schedule_response(text: str) -> list[ScheduleItem]:
    """Validate the model's JSON and return the schedule in chronological order.

    Every item comes back not completed, with a missing cost read as 0.
    """
    try:
        data = json.loads(_strip_code_fence(text))
        raw_items = data["schedule"]
        if not isinstance(raw_items, list):
            raise TypeError("schedule is not a list")
        items = [ScheduleItem.model_validate(raw) for raw in raw_items]
    except (json.JSONDecodeError, KeyError, TypeError, PydanticValidationError) as exc:
        logger.warning("schedule_response_invalid", error=str(exc))
        raise ExternalServiceError(AI_FAILURE_MESSAGE) from exc

    items = [item.model_copy(update={"completed": False, "plan_id": None}) for item in items]
    return sort_schedule(items)


def sort_schedule(items: Sequence[ScheduleItem]) -> list[ScheduleItem]:
    """Order by date, then start time. Unparseable times sort as midnight."""
    return sorted(items, key=lambda item: (item.date, sort_key_minutes(item.start_time)))


# =============================================================================
# Generator
# =============================================================================


class ScheduleGenerator:
    """
    Client for the schedule-generation model.

    Args:
        settings: Application settings (API key, model, timeouts)
        client: Optional shared httpx.AsyncClient; one is created per call otherwise
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._client = client

    @property
    def endpoint(self) -> str:
        return f"{self.settings.gemini_base_url}/models/{self.settings.gemini_model}:generateContent"

    async def _post(
        self, client: httpx.AsyncClient, body: dict[str, Any], api_key: str
    ) -> dict[str, Any]:
        response = await client.post(
            self.endpoint,
            json=body,
            headers={"x-goog-api-key": api_key},
            timeout=self.settings.ai_timeout_seconds,
        )
        response.raise_for_status()
        return response.json()

    async def _generate_content(
        self,
        prompt: str,
        generation_config: dict[str, Any] | None = None,
        operation: str = "generate",
    ) -> str:
        body: dict[str, Any] = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        if generation_config:
            body["generationConfig"] = generation_config

        api_key = self.settings.require_api_key()
        log = logger.bind(operation=operation, model=self.settings.gemini_model)
        breaker = await get_circuit_breaker(CIRCUIT_NAME, failure_threshold=3)
        try:
            async with breaker:
                if self._client is not None:
                    payload = await self._post(self._client, body, api_key)
                else:
                    async with httpx.AsyncClient() as client:
                        payload = await self._post(client, body, api_key)
        except CircuitBreakerError as exc:
            log.warning("ai_call_rejected", retry_after=exc.retry_after)
            raise ExternalServiceError(AI_FAILURE_MESSAGE) from exc
        except (httpx.HTTPError, ValueError) as exc:
            log.error("ai_call_failed", error=str(exc), error_type=type(exc).__name__)
            raise ExternalServiceError(AI_FAILURE_MESSAGE) from exc

        log.info("ai_call_succeeded")
        return _response_text(payload)

    async def generate_schedule(
        self,
        user_input: str,
        existing_schedule: Sequence[ScheduleItem] | None = None,
        today: date | None = None,
    ) -> list[ScheduleItem]:
        """Create a schedule, or rework `existing_schedule` per the new request."""
        if not user_input or not user_input.strip():
            raise ValidationError("Please describe your goals or desired changes.")

        prompt = build_schedule_prompt(user_input.strip(), existing_schedule, today or date.today())
        text = await self._generate_content(
            prompt,
            generation_config={
                "responseMimeType": "application/json",
                "responseSchema": SCHEDULE_RESPONSE_SCHEMA,
                "temperature": GENERATION_TEMPERATURE,
            },
            operation="generate_schedule",
        )
        schedule = parse_schedule_response(text)
        logger.info("schedule_generated", items=len(schedule), modified=bool(existing_schedule))
        return schedule

    async def get_optimization_suggestions(self, schedule: Sequence[ScheduleItem]) -> str:
        """Markdown list of 2-4 suggestions for improving the schedule."""
        return await self._generate_content(
            build_optimization_prompt(schedule), operation="optimization_suggestions"
        )

    async def get_plan_summary(self, schedule: Sequence[ScheduleItem]) -> str:
        """Markdown summary with Scope, Schedule and Efficacy sections."""
        return await self._generate_content(
            build_summary_prompt(schedule), operation="plan_summary"
        )


_generator: ScheduleGenerator | None = None


def get_schedule_generator() -> ScheduleGenerator:
    """Process-wide generator using the environment settings."""
    global _generator
    if _generator is None:
        _generator = ScheduleGenerator()
    return _generator


__all__ = [
    "AI_FAILURE_MESSAGE",
    "SCHEDULE_RESPONSE_SCHEMA",
    "ScheduleGenerator",
    "build_schedule_prompt",
    "build_optimization_prompt",
    "build_summary_prompt",
    "parse_schedule_response",
    "sort_schedule",
    "get_schedule_generator",
]
