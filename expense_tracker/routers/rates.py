from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from expense_tracker.routers.deps import get_tracker, validate_currency
from expense_tracker.services.money import round2
from expense_tracker.services.tracker import TrackerService

"""Rates router.

Endpoints:
    - GET  /rates          -> current table (empty until loaded)
    - POST /rates/refresh  -> fetch from the configured provider
    - GET  /rates/convert  -> strict conversion; `converted` is null when a
                              code has no rate

A failed refresh is not an error: the previous table stays in place and the
response reports `updated: false`.
"""

router = APIRouter(prefix="/rates", tags=["rates"])


class RateTableOut(BaseModel):
    base: str
    rates: Dict[str, float]
    fetched_at: Optional[datetime]
    ready: bool


class RefreshOut(BaseModel):
    updated: bool
    ready: bool
    fetched_at: Optional[datetime]


class ConversionOut(BaseModel):
    amount: float
    from_currency: str
    to_currency: str
    rate: Optional[float]
    converted: Optional[float]
    rates_ready: bool


@router.get("", response_model=RateTableOut, summary="Current exchange rate table")
async def get_rates(tracker: TrackerService = Depends(get_tracker)):
    table = tracker.rates.table()
    return RateTableOut(
        base=table.base,
        rates=table.rates,
        fetched_at=table.fetched_at,
        ready=not table.is_empty,
    )


@router.post("/refresh", response_model=RefreshOut, summary="Fetch fresh exchange rates")
async def refresh_rates(tracker: TrackerService = Depends(get_tracker)):
    updated = await tracker.rates.refresh_async()
    return RefreshOut(
        updated=updated,
        ready=tracker.rates_ready(),
        fetched_at=tracker.rates.table().fetched_at,
    )


@router.get("/convert", response_model=ConversionOut, summary="Convert an amount")
async def convert(
    amount: float = Query(..., ge=0),
    from_currency: str = Query(..., alias="from"),
    to_currency: str = Query(..., alias="to"),
    tracker: TrackerService = Depends(get_tracker),
):
    result = tracker.converter().explain(
        amount, validate_currency(from_currency), validate_currency(to_currency)
    )
    return ConversionOut(
        amount=result.amount,
        from_currency=result.from_currency,
        to_currency=result.to_currency,
        rate=result.rate,
        converted=None if result.converted is None else round2(result.converted),
        rates_ready=tracker.rates_ready(),
    )
