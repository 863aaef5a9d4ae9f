"""
Plan Models for TimeCraft.

Persistent storage for saved plans. A plan owns its schedule items and its
budget transactions; both are deleted with the plan.

Schedule item ids come from the model ("task-1", "a7x2") and are only
unique inside one plan, so items are keyed by (plan_id, item_id).
"""

from datetime import UTC, datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from src.models.base import Base


class PlanRecord(Base):
    """
    A saved plan.

    Attributes:
        id: "plan-<epoch ms>" identifier
        name: User-facing plan name
        user_input: Free-text request the schedule was generated from
        budget: Optional starting budget in USD
        created_at: Creation timestamp
    """

    __tablename__ = "plans"

    items = relationship(
        "ScheduleItemRecord",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="ScheduleItemRecord.position",
    )
    transactions = relationship(
        "TransactionRecord",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="TransactionRecord.created_at",
    )

    id = Column(String(64), primary_key=True)
    name = Column(String(200), nullable=False)
    user_input = Column(Text, nullable=False, default="")
    budget = Column(Float, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    __table_args__ = (Index("idx_plan_created_at", "created_at"),)

    def __repr__(self) -> str:
        return f"<PlanRecord(id={self.id}, name={self.name!r})>"


class ScheduleItemRecord(Base):
    """One task of a saved plan's schedule, kept in schedule order."""

    __tablename__ = "schedule_items"

    plan = relationship("PlanRecord", back_populates="items")

    row_id = Column(Integer, primary_key=True, autoincrement=True)
    plan_id = Column(
        String(64),
        ForeignKey("plans.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    item_id = Column(String(64), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    task = Column(Text, nullable=False)
    date = Column(String(10), nullable=False)  # YYYY-MM-DD
    start_time = Column(String(16), nullable=False)  # H:MM AM/PM
    end_time = Column(String(16), nullable=False)
    duration = Column(String(64), nullable=False, default="")
    priority = Column(String(32), nullable=False, default="Medium")
    completed = Column(Boolean, nullable=False, default=False)
    cost = Column(Float, nullable=False, default=0.0)

    __table_args__ = (
        # Not unique: the model may repeat a task id within one plan
        Index("idx_schedule_item_plan_item", "plan_id", "item_id"),
        Index("idx_schedule_item_date", "date"),
    )

    def __repr__(self) -> str:
        return f"<ScheduleItemRecord(plan_id={self.plan_id}, item_id={self.item_id})>"


class TransactionRecord(Base):
    """Expense or credit recorded against a plan's budget."""

    __tablename__ = "plan_transactions"

    plan = relationship("PlanRecord", back_populates="transactions")

    id = Column(String(64), primary_key=True)
    plan_id = Column(
        String(64),
        ForeignKey("plans.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    description = Column(String(500), nullable=False)
    amount = Column(Float, nullable=False)
    type = Column(String(16), nullable=False)  # expense | credit
    created_at = Column(DateTime(timezone=True), nullable=False)

    # Optional PDF receipt, base64 encoded
    receipt_name = Column(String(255), nullable=True)
    receipt_type = Column(String(64), nullable=True)
    receipt_data = Column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<TransactionRecord(id={self.id}, type={self.type}, amount={self.amount})>"


__all__ = ["PlanRecord", "ScheduleItemRecord", "TransactionRecord"]
