"""
REST API Routes for TimeCraft.

All responses use the envelope from src.api.schemas. Domain exceptions
raised here propagate to the handlers registered in create_app(), which
turn them into error envelopes.

Endpoints (all under /api/v1 prefix):
- /health - Health check
- /schedule/generate, /schedule/optimize, /schedule/summary - model calls
- /timeline/layout - lane layout and box geometry for a schedule
- /timeline/parse-time - "H:MM AM/PM" to minutes
- /plans - saved plans, multi-plan preview, task toggling, transactions
- /budget, /budget/expenses - budget tracker and expense table
- /notifications/upcoming - task starting within the reminder window
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from fastapi import APIRouter as FastAPIRouter
from fastapi import Depends, Query

from src.api.dependencies import get_generator, get_plan_store
from src.api.schemas import (
    GenerateScheduleRequest,
    ParseTimeRequest,
    SavePlanRequest,
    ScheduleRequest,
    TimelineLayoutRequest,
    UpcomingTaskRequest,
    UpdatePlanRequest,
    success_response,
)
from src.config.settings import Settings, get_settings
from src.lib.exceptions import NotFoundError
from src.models.schedule import Plan, ScheduleItem, TransactionCreate
from src.modules.budget import (
    expense_rows,
    format_currency,
    summarize_budget,
    summarize_costs,
)
from src.services.notifications import find_upcoming_task
from src.services.plan_store import PlanStore, preview_schedule
from src.services.schedule_generator import ScheduleGenerator
from src.services.timeline import (
    ALL_DATES,
    build_timeline_view,
    filter_by_date,
    is_valid_minutes,
    parse_time_to_minutes,
)


router = FastAPIRouter(prefix="/api/v1")


def _dump_items(items: list[ScheduleItem]) -> list[dict[str, Any]]:
    return [item.model_dump(by_alias=True) for item in items]


def _dump_plan(plan: Plan) -> dict[str, Any]:
    return plan.model_dump(by_alias=True)


def _require_plan(store: PlanStore, plan_id: str) -> Plan:
    plan = store.get_plan(plan_id)
    if plan is None:
        raise NotFoundError(f"Plan {plan_id} not found")
    return plan


def _timeline_payload(schedule: list[ScheduleItem], selected_date: str) -> dict[str, Any]:
    view = build_timeline_view(schedule, selected_date)
    costs = summarize_costs(schedule, filter_by_date(schedule, selected_date))
    view["costs"] = {
        **costs.to_dict(),
        "daily_total_display": format_currency(costs.daily_total),
        "grand_total_display": format_currency(costs.grand_total),
    }
    return view


# =============================================================================
# Health
# =============================================================================


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """Health check endpoint. Returns only status."""
    return success_response({"status": "ok"})


# =============================================================================
# Schedule Generation
# =============================================================================


@router.post("/schedule/generate")
async def generate_schedule(
    data: GenerateScheduleRequest,
    generator: ScheduleGenerator = Depends(get_generator),
) -> dict[str, Any]:
    """
    Generate a schedule from free text, or modify the given schedule.

    Returns:
        Envelope with the schedule sorted by date and start time
    """
    schedule = await generator.generate_schedule(
        data.user_input, data.existing_schedule, data.today
    )
    return success_response({"schedule": _dump_items(schedule), "total": len(schedule)})


@router.post("/schedule/optimize")
async def optimize_schedule(
    data: ScheduleRequest,
    generator: ScheduleGenerator = Depends(get_generator),
) -> dict[str, Any]:
    """Optimization suggestions for a schedule, as Markdown."""
    suggestions = await generator.get_optimization_suggestions(data.schedule)
    return success_response({"suggestions": suggestions})


@router.post("/schedule/summary")
async def summarize_schedule(
    data: ScheduleRequest,
    generator: ScheduleGenerator = Depends(get_generator),
) -> dict[str, Any]:
    """Scope / Schedule / Efficacy summary of a schedule, as Markdown."""
    summary = await generator.get_plan_summary(data.schedule)
    return success_response({"summary": summary})


# =============================================================================
# Timeline
# =============================================================================


@router.post("/timeline/layout")
async def timeline_layout(data: TimelineLayoutRequest) -> dict[str, Any]:
    """
    Lay out a schedule into lanes.

    With a selected date, one layout over that day's tasks; with "all",
    one layout per date on a shared time window. Items whose times do not
    parse are left out of the layout. The cost summary compares the
    visible day with the whole schedule.
    """
    return success_response(_timeline_payload(data.schedule, data.selected_date))


@router.post("/timeline/parse-time")
async def parse_time(data: ParseTimeRequest) -> dict[str, Any]:
    """Minutes since midnight, or -1 when the value does not parse."""
    minutes = parse_time_to_minutes(data.value)
    return success_response({
        "value": data.value,
        "minutes": minutes,
        "valid": is_valid_minutes(minutes),
    })


# =============================================================================
# Plans
# =============================================================================


@router.get("/plans")
def list_plans(store: PlanStore = Depends(get_plan_store)) -> dict[str, Any]:
    """All saved plans, newest first."""
    plans = store.list_plans()
    return success_response({"plans": [_dump_plan(p) for p in plans], "total": len(plans)})


@router.post("/plans", status_code=201)
def save_plan(
    data: SavePlanRequest,
    store: PlanStore = Depends(get_plan_store),
) -> dict[str, Any]:
    """Save a schedule as a new plan."""
    plan = store.save_plan(
        name=data.name,
        schedule=data.schedule,
        user_input=data.user_input,
        budget=data.budget,
    )
    return success_response(_dump_plan(plan))


@router.get("/plans/preview")
def preview_plans(
    plan_ids: list[str] = Query(...),
    selected_date: str = ALL_DATES,
    store: PlanStore = Depends(get_plan_store),
) -> dict[str, Any]:
    """
    Timeline of several saved plans shown together.

    The plans' schedules are concatenated (newest plan first) and laid out
    like a single schedule. Unknown plan ids are ignored.
    """
    schedule = preview_schedule(store.list_plans(), plan_ids)
    view = _timeline_payload(schedule, selected_date)
    view["schedule"] = _dump_items(schedule)
    return success_response(view)


@router.get("/plans/{plan_id}")
def get_plan(plan_id: str, store: PlanStore = Depends(get_plan_store)) -> dict[str, Any]:
    return success_response(_dump_plan(_require_plan(store, plan_id)))


@router.put("/plans/{plan_id}")
def update_plan(
    plan_id: str,
    data: UpdatePlanRequest,
    store: PlanStore = Depends(get_plan_store),
) -> dict[str, Any]:
    """
    Edit a plan's name/budget and/or overwrite its schedule.

    Only fields present in the request body are changed.
    """
    plan = _require_plan(store, plan_id)
    fields = data.model_fields_set

    if data.schedule is not None:
        user_input = data.user_input if data.user_input is not None else plan.user_input
        plan = store.update_schedule(plan_id, user_input, data.schedule)

    if "name" in fields or "budget" in fields:
        name = data.name if data.name is not None else plan.name
        budget = data.budget if "budget" in fields else plan.budget
        plan = store.rename_plan(plan_id, name, budget)

    return success_response(_dump_plan(plan))


@router.delete("/plans/{plan_id}")
def delete_plan(plan_id: str, store: PlanStore = Depends(get_plan_store)) -> dict[str, Any]:
    if not store.delete_plan(plan_id):
        raise NotFoundError(f"Plan {plan_id} not found")
    return success_response({"id": plan_id, "deleted": True})


@router.post("/plans/{plan_id}/tasks/{task_id}/toggle")
def toggle_task(
    plan_id: str,
    task_id: str,
    store: PlanStore = Depends(get_plan_store),
) -> dict[str, Any]:
    """Flip a task's completion flag and return the updated plan."""
    return success_response(_dump_plan(store.toggle_task(plan_id, task_id)))


@router.post("/plans/{plan_id}/transactions", status_code=201)
def add_transaction(
    plan_id: str,
    data: TransactionCreate,
    store: PlanStore = Depends(get_plan_store),
) -> dict[str, Any]:
    """Record an expense or credit (optionally with a PDF receipt) on a plan."""
    txn = store.add_transaction(plan_id, data)
    return success_response(txn.model_dump(by_alias=True))


# =============================================================================
# Budget
# =============================================================================


@router.get("/budget")
def get_budget(
    plan_ids: list[str] | None = Query(default=None),
    store: PlanStore = Depends(get_plan_store),
) -> dict[str, Any]:
    """
    Budget tracker over the selected plans (all plans when none given).

    Unknown plan ids are ignored.
    """
    plans = store.list_plans()
    if plan_ids:
        wanted = set(plan_ids)
        plans = [p for p in plans if p.id in wanted]

    summary = summarize_budget(plans)
    return success_response({
        **summary.to_dict(),
        "display": {
            "total_budget": format_currency(summary.total_budget),
            "total_spent": format_currency(summary.total_spent),
            "remaining": format_currency(summary.remaining),
        },
    })


@router.get("/budget/expenses")
def get_expenses(store: PlanStore = Depends(get_plan_store)) -> dict[str, Any]:
    """Estimated vs. actual cost for every plan, newest first."""
    rows = expense_rows(store.list_plans())
    return success_response({"rows": [row.to_dict() for row in rows], "total": len(rows)})


# =============================================================================
# Notifications
# =============================================================================


@router.post("/notifications/upcoming")
async def upcoming_task(
    data: UpcomingTaskRequest,
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """
    The first task starting within the reminder window, or null.

    The window defaults to the notify_window_minutes setting.

    `now` defaults to the server's local time; the client sends its own
    local time so that schedule times are compared in the user's zone.
    """
    now = data.now or datetime.now()
    window = data.window_minutes or settings.notify_window_minutes
    item = find_upcoming_task(data.schedule, now, data.notified_ids, window)
    return success_response({"task": item.model_dump(by_alias=True) if item else None})


# =============================================================================
# Route listing
# =============================================================================


def get_routes() -> dict[str, dict[str, Any]]:
    """
    Get all registered routes as a dictionary.

    Returns:
        Dictionary mapping "METHOD /path" (without the /api/v1 prefix) to
        route info with handler and method.
    """
    routes: dict[str, dict[str, Any]] = {}
    prefix = router.prefix
    valid_methods = {"GET", "POST", "PUT", "DELETE", "PATCH"}
    for route in router.routes:
        if hasattr(route, "methods") and hasattr(route, "endpoint"):
            full_path = getattr(route, "path", "")
            path = full_path[len(prefix):] if full_path.startswith(prefix) else full_path
            for method in route.methods:
                if method in valid_methods:
                    routes[f"{method} {path}"] = {
                        "handler": route.endpoint,
                        "method": method,
                    }
    return routes


router.get_routes = get_routes  # type: ignore[attr-defined]


__all__ = ["router", "get_routes"]
