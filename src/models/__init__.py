"""
Models package for TimeCraft.

Exports the SQLAlchemy tables and the pydantic domain types.

Usage:
    from src.models import PlanRecord, ScheduleItemRecord, TransactionRecord
    from src.models import Plan, ScheduleItem, Transaction
"""

from src.models.base import Base
from src.models.plan import PlanRecord, ScheduleItemRecord, TransactionRecord
from src.models.schedule import (
    Plan,
    Priority,
    Receipt,
    ScheduleItem,
    Transaction,
    TransactionCreate,
    TransactionType,
)

__all__ = [
    # Base
    "Base",
    # Tables
    "PlanRecord",
    "ScheduleItemRecord",
    "TransactionRecord",
    # Domain types
    "Plan",
    "Priority",
    "Receipt",
    "ScheduleItem",
    "Transaction",
    "TransactionCreate",
    "TransactionType",
]
