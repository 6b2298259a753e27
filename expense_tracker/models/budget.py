from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import BASE_CURRENCY, CURRENCIES, normalize_currency


class BudgetSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    monthly_budget: float = Field(0, ge=0, allow_inf_nan=False)
    currency: str = BASE_CURRENCY

    @field_validator("currency")
    @classmethod
    def valid_currency(cls, v: str) -> str:
        v = normalize_currency(v)
        if v not in CURRENCIES:
            raise ValueError("unsupported currency")
        return v

    @classmethod
    def default(cls) -> "BudgetSettings":
        return cls(monthly_budget=0, currency=BASE_CURRENCY)


class BudgetStatus(BaseModel):
    display_currency: str
    monthly_budget: float
    spent_amount: float
    remaining: float
    progress: float
    percent_used: float
    warn: bool
    danger: bool
    warn_threshold: int
    danger_threshold: int
