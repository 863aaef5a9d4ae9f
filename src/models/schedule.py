"""
Schedule Domain Types for TimeCraft.

Pydantic models for the records the application passes around: schedule
items produced by the model, saved plans, and budget transactions.

Field names are snake_case in Python. The camelCase names used by the
model's JSON output and by the browser client ("startTime", "planId",
"userInput") are accepted as aliases and produced by
`model_dump(by_alias=True)`.
"""

from __future__ import annotations

import base64
import binascii
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

RECEIPT_CONTENT_TYPE = "application/pdf"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Enums
# =============================================================================


class Priority(StrEnum):
    """Priority levels the model is asked to assign."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class TransactionType(StrEnum):
    """Direction of a budget transaction."""

    EXPENSE = "expense"
    CREDIT = "credit"


# =============================================================================
# Schedule
# =============================================================================


class ScheduleItem(_CamelModel):
    """One timed task on the schedule.

    Times are 12-hour strings ("9:30 AM"). They are not validated here:
    items whose times do not parse stay in the schedule and are only left
    out of the timeline layout.
    """

    id: str = Field(..., min_length=1)
    task: str
    date: str  # YYYY-MM-DD
    start_time: str
    end_time: str
    duration: str = ""
    # High / Medium / Low, but free text from the model is kept as-is
    priority: str = Priority.MEDIUM.value
    completed: bool = False
    cost: float = 0.0  # USD
    plan_id: str | None = None

    @field_validator("cost", mode="before")
    @classmethod
    def _missing_cost_is_zero(cls, v: object) -> object:
        return 0.0 if v is None else v


# =============================================================================
# Transactions
# =============================================================================


class Receipt(_CamelModel):
    """PDF receipt attached to a transaction, stored inline as base64."""

    name: str = Field(..., min_length=1, max_length=255)
    type: str = RECEIPT_CONTENT_TYPE
    data: str

    @field_validator("type")
    @classmethod
    def _pdf_only(cls, v: str) -> str:
        if v != RECEIPT_CONTENT_TYPE:
            raise ValueError("Only PDF files are accepted for receipts.")
        return v

    @field_validator("data")
    @classmethod
    def _valid_base64(cls, v: str) -> str:
        try:
            base64.b64decode(v, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("Receipt data must be base64 encoded.") from exc
        return v


class TransactionCreate(_CamelModel):
    """Fields supplied by the user when recording a transaction."""

    description: str = Field(..., min_length=1, max_length=500)
    amount: float = Field(..., gt=0)
    type: TransactionType = TransactionType.EXPENSE
    receipt: Receipt | None = None

    @field_validator("description")
    @classmethod
    def _strip_description(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Please enter a description.")
        return stripped


class Transaction(TransactionCreate):
    """Recorded transaction; `date` is an ISO-8601 timestamp."""

    id: str
    date: str


# =============================================================================
# Plans
# =============================================================================


class Plan(_CamelModel):
    """A saved schedule with its optional budget and transactions."""

    id: str
    name: str = Field(..., min_length=1, max_length=200)
    user_input: str = ""
    schedule: list[ScheduleItem] = Field(default_factory=list)
    created_at: str  # ISO-8601
    budget: float | None = Field(default=None, ge=0)
    transactions: list[Transaction] = Field(default_factory=list)


__all__ = [
    "RECEIPT_CONTENT_TYPE",
    "Priority",
    "TransactionType",
    "ScheduleItem",
    "Receipt",
    "TransactionCreate",
    "Transaction",
    "Plan",
]
