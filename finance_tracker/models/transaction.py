"""
Core Transaction Models for Finance Tracker

These models define the strict schemas for every record in the ledger.
They are designed to:
1. Enforce the record invariants before anything leaves the process
2. Provide clear validation error messages
3. Map cleanly onto the remote API's JSON (`_id`, `type`, `date`)

DESIGN DECISION: Two models, not one.
TransactionDraft is what a user submits (no id yet, date optional).
TransactionRecord is what the remote store hands back (id assigned,
canonical values). The ledger only ever holds TransactionRecord.
"""

import math
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


DEFAULT_CATEGORY = "General"
ALL_CATEGORIES = "All"

TITLE_MAX_LENGTH = 60
CATEGORY_MAX_LENGTH = 30


class TransactionKind(str, Enum):
    """Direction of money flow."""
    INCOME = "income"
    EXPENSE = "expense"


def _default_category(value: Any) -> Any:
    """Blank or missing categories fall back to "General"."""
    if value is None:
        return DEFAULT_CATEGORY
    if isinstance(value, str) and not value.strip():
        return DEFAULT_CATEGORY
    return value


def _require_finite(value: Decimal) -> Decimal:
    # The wire format is a JSON number, so the value must also fit a float
    if not value.is_finite() or not math.isfinite(float(value)):
        raise ValueError("Amount must be a finite number")
    return value


class TransactionDraft(BaseModel):
    """
    User input for a create or update.

    Unknown fields are rejected so a typo in a form binding fails loudly
    instead of being silently dropped.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
        extra="forbid",
    )

    title: str = Field(
        ...,
        min_length=1,
        max_length=TITLE_MAX_LENGTH,
        description="Short label such as 'Fuel' or 'Salary'"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Positive amount; direction comes from kind"
    )
    kind: TransactionKind = Field(
        ...,
        alias="type",
        description="income or expense"
    )
    category: str = Field(
        default=DEFAULT_CATEGORY,
        max_length=CATEGORY_MAX_LENGTH,
    )
    occurred_at: Optional[datetime] = Field(
        default=None,
        alias="date",
        description="When the transaction happened; filled with 'now' on create"
    )

    @field_validator('category', mode='before')
    @classmethod
    def default_category(cls, v: Any) -> Any:
        return _default_category(v)

    @field_validator('amount')
    @classmethod
    def amount_is_finite(cls, v: Decimal) -> Decimal:
        return _require_finite(v)

    def to_payload(self) -> dict[str, Any]:
        """
        Convert to the JSON body the transactions API expects.

        occurred_at is left out when unset so an update keeps the stored date.
        """
        payload: dict[str, Any] = {
            "title": self.title,
            "amount": float(self.amount),
            "type": self.kind.value,
            "category": self.category,
        }
        if self.occurred_at is not None:
            payload["date"] = self.occurred_at.isoformat()
        return payload


class TransactionRecord(BaseModel):
    """
    A transaction as acknowledged by the remote store.

    CRITICAL: Records are immutable. An update produces a new record from
    the server response; nothing edits a record in place.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    id: str = Field(
        ...,
        min_length=1,
        alias="_id",
        description="Opaque identifier assigned by the remote store"
    )
    title: str = Field(
        ...,
        min_length=1,
        max_length=TITLE_MAX_LENGTH,
    )
    amount: Decimal = Field(
        ...,
        gt=0,
    )
    kind: TransactionKind = Field(
        ...,
        alias="type",
    )
    category: str = Field(
        default=DEFAULT_CATEGORY,
        max_length=CATEGORY_MAX_LENGTH,
    )
    occurred_at: datetime = Field(
        ...,
        alias="date",
        description="When the transaction happened (not when it was saved)"
    )

    # Server bookkeeping, carried through untouched
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    @field_validator('id', mode='before')
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        """Some backends hand out numeric ids; the ledger treats all ids as strings."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator('category', mode='before')
    @classmethod
    def default_category(cls, v: Any) -> Any:
        return _default_category(v)

    @field_validator('amount')
    @classmethod
    def amount_is_finite(cls, v: Decimal) -> Decimal:
        return _require_finite(v)

    @property
    def is_expense(self) -> bool:
        return self.kind == TransactionKind.EXPENSE

    @property
    def is_income(self) -> bool:
        return self.kind == TransactionKind.INCOME

    def to_draft(self) -> TransactionDraft:
        """Pre-fill an edit form with this record's values."""
        return TransactionDraft(
            title=self.title,
            amount=self.amount,
            kind=self.kind,
            category=self.category,
            occurred_at=self.occurred_at,
        )


class DeleteConfirmation(BaseModel):
    """What the remote store returns after a delete."""

    id: str = Field(..., min_length=1)

    @field_validator('id', mode='before')
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


class ValidationIssue(BaseModel):
    """A single reason a draft was rejected."""

    field: str = Field(..., description="Field with the issue")
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'too_long', 'invalid_value')"
    )
    message: str = Field(..., description="Human-readable description of the issue")
