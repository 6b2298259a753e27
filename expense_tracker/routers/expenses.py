from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from expense_tracker.models import Expense, ExpenseIn, ExpenseOut, TimeFrame
from expense_tracker.routers.deps import get_tracker, reference_now, validate_currency
from expense_tracker.services.money import round2
from expense_tracker.services.tracker import TrackerService

router = APIRouter(prefix="/expenses", tags=["expenses"])


# Helpers ----------------------------------------------------------
def _to_out(
    expense: Expense, tracker: TrackerService, currency: Optional[str] = None
) -> ExpenseOut:
    converted = None
    if currency is not None:
        converted = round2(tracker.converted_amount(expense, currency))
    return ExpenseOut(
        id=expense.id,
        amount=expense.amount,
        category=expense.category,
        group=expense.category.group.value,
        date=expense.date,
        currency=expense.currency,
        note=expense.note,
        display_currency=currency,
        converted_amount=converted,
    )


# Routes -----------------------------------------------------------
@router.post("", response_model=ExpenseOut, status_code=201, summary="Record an expense")
async def create_expense(
    payload: ExpenseIn,
    tracker: TrackerService = Depends(get_tracker),
):
    expense = payload.to_expense()
    try:
        tracker.add_expense(expense)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return _to_out(expense, tracker)


@router.get(
    "",
    response_model=List[ExpenseOut],
    summary="List expenses in store order, optionally limited to a time frame",
)
async def list_expenses_endpoint(
    frame: TimeFrame = Query(TimeFrame.ALL, description="Time window to list"),
    currency: Optional[str] = Query(
        None, description="Also report each amount converted to this currency"
    ),
    now: datetime = Depends(reference_now),
    tracker: TrackerService = Depends(get_tracker),
):
    if currency is not None:
        currency = validate_currency(currency)
    return [_to_out(e, tracker, currency) for e in tracker.list_expenses(frame, now)]


@router.get("/{expense_id}", response_model=ExpenseOut, summary="Fetch one expense")
async def get_expense_endpoint(
    expense_id: UUID,
    currency: Optional[str] = Query(None),
    tracker: TrackerService = Depends(get_tracker),
):
    expense = tracker.get_expense(expense_id)
    if expense is None:
        raise HTTPException(status_code=404, detail="expense not found")
    if currency is not None:
        currency = validate_currency(currency)
    return _to_out(expense, tracker, currency)


@router.delete("/{expense_id}", summary="Delete an expense")
async def delete_expense_endpoint(
    expense_id: UUID,
    tracker: TrackerService = Depends(get_tracker),
):
    if not tracker.delete_expense(expense_id):
        raise HTTPException(status_code=404, detail="expense not found")
    return {"status": "deleted", "id": str(expense_id)}
