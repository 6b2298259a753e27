from fastapi import APIRouter, Depends

from expense_tracker.routers.deps import get_tracker
from expense_tracker.services.tracker import TrackerService

router = APIRouter(tags=["health"])


@router.get("/health", summary="Liveness and rate readiness")
async def health(tracker: TrackerService = Depends(get_tracker)):
    return {
        "status": "ok",
        "rates_ready": tracker.rates_ready(),
        "expenses": len(tracker.expenses()),
    }
