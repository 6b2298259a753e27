from datetime import datetime

from fastapi import APIRouter, Depends

from expense_tracker.models import BudgetSettings, BudgetStatus
from expense_tracker.routers.deps import display_currency, get_tracker, reference_now
from expense_tracker.services.money import round2
from expense_tracker.services.tracker import TrackerService

router = APIRouter(prefix="/budget", tags=["budget"])


@router.get("", response_model=BudgetSettings, summary="Current monthly budget")
async def get_budget(tracker: TrackerService = Depends(get_tracker)):
    return tracker.budget


@router.put("", response_model=BudgetSettings, summary="Replace the monthly budget")
async def put_budget(
    payload: BudgetSettings,
    tracker: TrackerService = Depends(get_tracker),
):
    return tracker.set_budget(payload)


@router.get(
    "/status",
    response_model=BudgetStatus,
    summary="This month's spend against the budget, in the display currency",
)
async def budget_status_endpoint(
    currency: str = Depends(display_currency),
    now: datetime = Depends(reference_now),
    tracker: TrackerService = Depends(get_tracker),
):
    status = tracker.budget_status(currency, now)
    return status.model_copy(
        update={
            "monthly_budget": round2(status.monthly_budget),
            "spent_amount": round2(status.spent_amount),
            "remaining": round2(status.remaining),
            "progress": round(status.progress, 4),
            "percent_used": round2(status.percent_used),
        }
    )
