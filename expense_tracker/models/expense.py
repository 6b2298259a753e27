from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .category import Category
from .constants import CURRENCIES, normalize_currency


class Expense(BaseModel):
    """A single expense in its original currency.

    Records are immutable; an edit is a delete followed by a new record.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    amount: float = Field(..., gt=0, allow_inf_nan=False)
    category: Category
    date: datetime
    currency: str
    note: str = ""

    @field_validator("currency")
    @classmethod
    def valid_currency(cls, v: str) -> str:
        v = normalize_currency(v)
        if v not in CURRENCIES:
            raise ValueError("unsupported currency")
        return v

    @field_validator("date")
    @classmethod
    def naive_timestamp(cls, v: datetime) -> datetime:
        # Aware timestamps are reduced to their wall-clock time
        return v.replace(tzinfo=None) if v.tzinfo is not None else v


class ExpenseIn(BaseModel):
    amount: float = Field(..., gt=0, allow_inf_nan=False)
    category: Category
    date: Optional[datetime] = None
    currency: str
    note: str = ""

    @field_validator("currency")
    @classmethod
    def valid_currency(cls, v: str) -> str:
        v = normalize_currency(v)
        if v not in CURRENCIES:
            raise ValueError("unsupported currency")
        return v

    def to_expense(self, now: Optional[datetime] = None) -> Expense:
        return Expense(
            amount=self.amount,
            category=self.category,
            date=self.date or now or datetime.now(),
            currency=self.currency,
            note=self.note,
        )


class ExpenseOut(BaseModel):
    id: UUID
    amount: float
    category: Category
    group: str
    date: datetime
    currency: str
    note: str
    display_currency: Optional[str] = None
    converted_amount: Optional[float] = None
