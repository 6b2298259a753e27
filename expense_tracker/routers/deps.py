from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import HTTPException, Query, Request

from expense_tracker.models import CURRENCIES
from expense_tracker.models.constants import normalize_currency
from expense_tracker.services.tracker import TrackerService

"""Shared router dependencies.

The tracker lives on `app.state` so each application instance (and each test
client) carries its own state and database.
"""


def get_tracker(request: Request) -> TrackerService:
    return request.app.state.tracker


def validate_currency(code: str) -> str:
    code = normalize_currency(code)
    if code not in CURRENCIES:
        raise HTTPException(status_code=400, detail="unsupported currency")
    return code


def display_currency(
    request: Request,
    currency: Optional[str] = Query(
        None, description="Display currency (defaults to the configured one)"
    ),
) -> str:
    if currency is None:
        return request.app.state.settings.default_display_currency
    return validate_currency(currency)


def reference_now(
    now: Optional[datetime] = Query(
        None, description="Reference instant for time windows (defaults to the server clock)"
    ),
) -> datetime:
    if now is None:
        return datetime.now()
    return now.replace(tzinfo=None) if now.tzinfo is not None else now
