"""
Plan Store for TimeCraft.

Saves, loads, edits and deletes plans, toggles task completion, and
records budget transactions. Backed by SQLAlchemy; callers pass in a
session and get pydantic `Plan` objects back.

Any SQLAlchemy failure is logged, the session rolled back, and a
DatabaseError raised.

Usage:
    store = PlanStore(session)
    plan = store.save_plan(name="Launch", user_input=text, schedule=items, budget=500)
    store.toggle_task(plan.id, "task-1")
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.lib.exceptions import DatabaseError, NotFoundError
from src.models.plan import PlanRecord, ScheduleItemRecord, TransactionRecord
from src.models.schedule import (
    RECEIPT_CONTENT_TYPE,
    Plan,
    Receipt,
    ScheduleItem,
    Transaction,
    TransactionCreate,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Id helpers
# =============================================================================

_last_ms = 0
_id_lock = threading.Lock()


def _epoch_ms() -> int:
    """Millisecond timestamp, strictly increasing within the process."""
    global _last_ms
    with _id_lock:
        _last_ms = max(int(time.time() * 1000), _last_ms + 1)
        return _last_ms


def new_plan_id() -> str:
    return f"plan-{_epoch_ms()}"


def new_transaction_id() -> str:
    return f"txn-{_epoch_ms()}"


# =============================================================================
# Record <-> domain conversion
# =============================================================================


def _iso(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.isoformat()


def _parse_iso(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def _item_to_domain(record: ScheduleItemRecord) -> ScheduleItem:
    return ScheduleItem(
        id=record.item_id,
        task=record.task,
        date=record.date,
        start_time=record.start_time,
        end_time=record.end_time,
        duration=record.duration,
        priority=record.priority,
        completed=bool(record.completed),
        cost=record.cost or 0.0,
        plan_id=record.plan_id,
    )


def _transaction_to_domain(record: TransactionRecord) -> Transaction:
    receipt = None
    if record.receipt_data is not None:
        receipt = Receipt(
            name=record.receipt_name or "receipt.pdf",
            type=record.receipt_type or RECEIPT_CONTENT_TYPE,
            data=record.receipt_data,
        )
    return Transaction(
        id=record.id,
        description=record.description,
        amount=record.amount,
        type=record.type,
        date=_iso(record.created_at),
        receipt=receipt,
    )


def _plan_to_domain(record: PlanRecord) -> Plan:
    return Plan(
        id=record.id,
        name=record.name,
        user_input=record.user_input or "",
        schedule=[_item_to_domain(item) for item in record.items],
        created_at=_iso(record.created_at),
        budget=record.budget,
        transactions=[_transaction_to_domain(t) for t in record.transactions],
    )


def _item_records(plan_id: str, schedule: Sequence[ScheduleItem]) -> list[ScheduleItemRecord]:
    return [
        ScheduleItemRecord(
            plan_id=plan_id,
            item_id=item.id,
            position=position,
            task=item.task,
            date=item.date,
            start_time=item.start_time,
            end_time=item.end_time,
            duration=item.duration,
            priority=item.priority,
            completed=item.completed,
            cost=item.cost,
        )
        for position, item in enumerate(schedule)
    ]


def _transaction_record(plan_id: str, txn: Transaction) -> TransactionRecord:
    return TransactionRecord(
        id=txn.id,
        plan_id=plan_id,
        description=txn.description,
        amount=txn.amount,
        type=txn.type.value,
        created_at=_parse_iso(txn.date),
        receipt_name=txn.receipt.name if txn.receipt else None,
        receipt_type=txn.receipt.type if txn.receipt else None,
        receipt_data=txn.receipt.data if txn.receipt else None,
    )


# =============================================================================
# Pure schedule helpers
# =============================================================================


def toggle_task_in_schedule(schedule: Sequence[ScheduleItem], task_id: str) -> list[ScheduleItem]:
    """Return a copy of `schedule` with `task_id`'s completion flipped."""
    return [
        item.model_copy(update={"completed": not item.completed}) if item.id == task_id else item
        for item in schedule
    ]


def preview_schedule(plans: Iterable[Plan], preview_ids: Iterable[str]) -> list[ScheduleItem]:
    """Schedules of the previewed plans, concatenated in plan order."""
    wanted = set(preview_ids)
    return [item for plan in plans if plan.id in wanted for item in plan.schedule]


# =============================================================================
# Store
# =============================================================================


class PlanStore:
    """SQLAlchemy-backed repository of saved plans."""

    def __init__(self, session: Session) -> None:
        self.session = session

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _commit(self, action: str) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("Failed to %s", action)
            raise DatabaseError(f"Failed to {action}") from exc

    def _load(self, plan_id: str) -> PlanRecord | None:
        try:
            return self.session.get(PlanRecord, plan_id)
        except SQLAlchemyError as exc:
            logger.exception("Failed to load plan %s", plan_id)
            raise DatabaseError(f"Failed to load plan {plan_id}") from exc

    def _require(self, plan_id: str) -> PlanRecord:
        record = self._load(plan_id)
        if record is None:
            raise NotFoundError(f"Plan {plan_id} not found")
        return record

    def _replace_children(
        self,
        record: PlanRecord,
        schedule: Sequence[ScheduleItem],
        transactions: Sequence[Transaction] | None = None,
    ) -> None:
        # Old rows must be flushed out first: re-added transactions reuse their ids
        record.items.clear()
        if transactions is not None:
            record.transactions.clear()
        try:
            self.session.flush()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("Failed to clear children of plan %s", record.id)
            raise DatabaseError(f"Failed to update plan {record.id}") from exc
        record.items.extend(_item_records(record.id, schedule))
        if transactions is not None:
            record.transactions.extend(_transaction_record(record.id, t) for t in transactions)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def list_plans(self) -> list[Plan]:
        """All saved plans, newest first."""
        try:
            records = self.session.scalars(
                select(PlanRecord).order_by(PlanRecord.created_at.desc(), PlanRecord.id.desc())
            ).all()
        except SQLAlchemyError as exc:
            logger.exception("Failed to load plans")
            raise DatabaseError("Failed to load plans") from exc
        return [_plan_to_domain(record) for record in records]

    def get_plan(self, plan_id: str) -> Plan | None:
        record = self._load(plan_id)
        return _plan_to_domain(record) if record is not None else None

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def save_plan(
        self,
        name: str,
        schedule: Sequence[ScheduleItem],
        user_input: str = "",
        budget: float | None = None,
        plan_id: str | None = None,
    ) -> Plan:
        """Save a new plan. Every schedule item is stamped with the plan id."""
        plan_id = plan_id or new_plan_id()
        record = PlanRecord(
            id=plan_id,
            name=name,
            user_input=user_input,
            budget=budget,
            created_at=datetime.now(UTC),
        )
        record.items = _item_records(plan_id, schedule)
        self.session.add(record)
        self._commit(f"save plan {plan_id}")
        logger.info("Saved plan %s with %d items", plan_id, len(schedule))
        return _plan_to_domain(record)

    def update_plan(self, plan: Plan) -> Plan | None:
        """Replace a saved plan's contents. Unknown ids are ignored (returns None)."""
        record = self._load(plan.id)
        if record is None:
            logger.warning("update_plan: plan %s does not exist", plan.id)
            return None

        record.name = plan.name
        record.user_input = plan.user_input
        record.budget = plan.budget
        self._replace_children(record, plan.schedule, plan.transactions)
        self._commit(f"update plan {plan.id}")
        return _plan_to_domain(record)

    def update_schedule(self, plan_id: str, user_input: str, schedule: Sequence[ScheduleItem]) -> Plan:
        """Overwrite the schedule of an existing plan (save over the active plan)."""
        record = self._require(plan_id)
        record.user_input = user_input
        self._replace_children(record, schedule)
        self._commit(f"update schedule of plan {plan_id}")
        return _plan_to_domain(record)

    def rename_plan(self, plan_id: str, name: str, budget: float | None) -> Plan:
        """Edit a plan's name and budget."""
        record = self._require(plan_id)
        record.name = name
        record.budget = budget
        self._commit(f"edit plan {plan_id}")
        return _plan_to_domain(record)

    def delete_plan(self, plan_id: str) -> bool:
        """Delete a plan with its items and transactions. False if it did not exist."""
        record = self._load(plan_id)
        if record is None:
            return False
        self.session.delete(record)
        self._commit(f"delete plan {plan_id}")
        logger.info("Deleted plan %s", plan_id)
        return True

    def toggle_task(self, plan_id: str, task_id: str) -> Plan:
        """Flip the completion flag of a task in a saved plan.

        Every item carrying `task_id` is flipped, so a repeated id toggles together.
        """
        plan = self.get_plan(plan_id)
        if plan is None:
            raise NotFoundError(f"Plan {plan_id} not found")
        if not any(item.id == task_id for item in plan.schedule):
            raise NotFoundError(f"Task {task_id} not found in plan {plan_id}")

        schedule = toggle_task_in_schedule(plan.schedule, task_id)
        updated = self.update_plan(plan.model_copy(update={"schedule": schedule}))
        if updated is None:
            raise NotFoundError(f"Plan {plan_id} not found")
        return updated

    def add_transaction(self, plan_id: str, data: TransactionCreate) -> Transaction:
        """Record an expense or credit against a plan."""
        record = self._require(plan_id)
        txn = Transaction(
            id=new_transaction_id(),
            date=datetime.now(UTC).isoformat(),
            **data.model_dump(),
        )
        record.transactions.append(_transaction_record(plan_id, txn))
        self._commit(f"add transaction to plan {plan_id}")
        logger.info("Recorded %s of %.2f on plan %s", txn.type.value, txn.amount, plan_id)
        return txn


__all__ = [
    "PlanStore",
    "new_plan_id",
    "new_transaction_id",
    "toggle_task_in_schedule",
    "preview_schedule",
]
