"""
Budget Tracking for TimeCraft.

Arithmetic over saved plans: the budget tracker (budget + credits vs.
expenses), the per-plan expense table (estimated schedule cost vs. actual
spend), and the cost summary shown above a schedule.

    total_budget = sum(plan.budget or 0) + sum(credits)
    total_spent  = sum(expenses)
    remaining    = total_budget - total_spent
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import asdict, dataclass
from typing import Any

from src.models.schedule import Plan, ScheduleItem, Transaction, TransactionType


# =============================================================================
# Result types
# =============================================================================


@dataclass(frozen=True)
class BudgetSummary:
    """Budget position across one or more plans."""

    plan_count: int
    total_budget: float
    total_spent: float
    remaining: float
    percentage: float  # spent / budget, capped at 100
    has_budget: bool
    is_over_budget: bool

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PlanExpenseRow:
    """Estimated vs. actual cost of a single plan."""

    plan_id: str
    plan_name: str
    budget: float | None
    estimated_cost: float
    actual_spent: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CostSummary:
    """Cost of the visible day vs. the whole schedule."""

    daily_total: float
    grand_total: float

    @property
    def visible(self) -> bool:
        return self.grand_total > 0

    def to_dict(self) -> dict[str, Any]:
        return {**asdict(self), "visible": self.visible}


# =============================================================================
# Sums
# =============================================================================


def _sum_transactions(transactions: Iterable[Transaction], kind: TransactionType) -> float:
    return sum(t.amount for t in transactions if t.type == kind)


def schedule_cost(schedule: Iterable[ScheduleItem]) -> float:
    """Total estimated cost of the schedule's tasks."""
    return sum(item.cost or 0 for item in schedule)


def summarize_budget(plans: Sequence[Plan]) -> BudgetSummary:
    """Budget tracker figures for the selected plans."""
    budget = 0.0
    spent = 0.0
    for plan in plans:
        budget += (plan.budget or 0) + _sum_transactions(plan.transactions, TransactionType.CREDIT)
        spent += _sum_transactions(plan.transactions, TransactionType.EXPENSE)

    has_budget = budget > 0
    return BudgetSummary(
        plan_count=len(plans),
        total_budget=budget,
        total_spent=spent,
        remaining=budget - spent,
        percentage=min(spent / budget * 100, 100.0) if has_budget else 0.0,
        has_budget=has_budget,
        is_over_budget=spent > budget,
    )


def plan_expenses(plan: Plan) -> PlanExpenseRow:
    return PlanExpenseRow(
        plan_id=plan.id,
        plan_name=plan.name,
        budget=plan.budget,
        estimated_cost=schedule_cost(plan.schedule),
        actual_spent=_sum_transactions(plan.transactions, TransactionType.EXPENSE),
    )


def expense_rows(plans: Iterable[Plan]) -> list[PlanExpenseRow]:
    """One row per plan, most recently created first."""
    ordered = sorted(plans, key=lambda p: p.created_at, reverse=True)
    return [plan_expenses(plan) for plan in ordered]


def summarize_costs(
    full_schedule: Iterable[ScheduleItem],
    daily_schedule: Iterable[ScheduleItem],
) -> CostSummary:
    return CostSummary(
        daily_total=schedule_cost(daily_schedule),
        grand_total=schedule_cost(full_schedule),
    )


def format_currency(amount: Any) -> str:
    """$1,234.50 style, negatives as $-50.00.

    Anything that is not a finite number renders as $--.--.
    """
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        return "$--.--"
    if math.isnan(amount) or math.isinf(amount):
        return "$--.--"
    return f"${amount:,.2f}"


__all__ = [
    "BudgetSummary",
    "PlanExpenseRow",
    "CostSummary",
    "schedule_cost",
    "summarize_budget",
    "plan_expenses",
    "expense_rows",
    "summarize_costs",
    "format_currency",
]
