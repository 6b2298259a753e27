from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from expense_tracker.models import Category, TimeFrame
from expense_tracker.routers.deps import display_currency, get_tracker, reference_now
from expense_tracker.services import insights, wellness
from expense_tracker.services.analytics_utils import (
    by_category,
    by_day,
    by_weekday,
    category_trends,
    compute_period_summary,
    compute_trend_data,
    convert_expenses,
)
from expense_tracker.services.money import round2
from expense_tracker.services.timeframes import filter_window, previous_window, window
from expense_tracker.services.tracker import TrackerService

router = APIRouter(prefix="/analytics", tags=["analytics"])


class SummaryOut(BaseModel):
    frame: TimeFrame
    currency: str
    total: float
    previous_total: Optional[float]
    change_percentage: float
    transaction_count: int
    active_categories: int
    daily_average: float
    consistency: float
    essential_percentage: float
    discretionary_percentage: float
    savings_potential: float
    rates_ready: bool


class CategoryBreakdownItem(BaseModel):
    category: Category
    group: str
    total: float
    percent: float


class DailyTotal(BaseModel):
    date: date
    total: float


class WeekdayItem(BaseModel):
    weekday: str
    total: float
    count: int
    average: float


class TrendPoint(BaseModel):
    date: date
    daily_total: float
    cumulative_total: float


class CategoryTrendItem(BaseModel):
    category: Category
    amount: float
    previous_amount: float
    change_percentage: float
    share: float
    trend: str


class TrendOut(BaseModel):
    points: List[TrendPoint]
    categories: List[CategoryTrendItem]


class WellnessOut(BaseModel):
    frame: TimeFrame
    currency: str
    score: float
    tier: str
    title: str
    description: str
    color: str
    icon: str
    spending_ratio: float
    total_spending: float
    period_budget: float
    base_score: float
    trend_penalty: float
    essential_penalty: float
    consistency_penalty: float
    bonus: float


class PatternOut(BaseModel):
    title: str
    description: str
    icon: str
    color: str


class RecommendationOut(BaseModel):
    title: str
    description: str
    icon: str
    color: str
    potential_saving: Optional[float]


class InsightsOut(BaseModel):
    patterns: List[PatternOut]
    recommendations: List[RecommendationOut]


def _frame_items(tracker: TrackerService, frame: TimeFrame, currency: str, now: datetime):
    expenses = filter_window(tracker.expenses(), window(frame, now))
    return convert_expenses(expenses, tracker.converter(), currency)


@router.get("/summary", response_model=SummaryOut, summary="Headline figures for a period")
async def summary_endpoint(
    frame: TimeFrame = Query(TimeFrame.MONTH),
    currency: str = Depends(display_currency),
    now: datetime = Depends(reference_now),
    tracker: TrackerService = Depends(get_tracker),
):
    s = compute_period_summary(tracker.expenses(), tracker.converter(), currency, frame, now)
    return SummaryOut(
        frame=s.frame,
        currency=s.currency,
        total=round2(s.total),
        previous_total=None if s.previous_total is None else round2(s.previous_total),
        change_percentage=round2(s.change_percentage),
        transaction_count=s.transaction_count,
        active_categories=s.active_categories,
        daily_average=round2(s.daily_average),
        consistency=round(s.consistency, 4),
        essential_percentage=round2(s.essential_percentage),
        discretionary_percentage=round2(s.discretionary_percentage),
        savings_potential=round2(s.savings_potential),
        rates_ready=tracker.rates_ready(),
    )


@router.get(
    "/categories",
    response_model=List[CategoryBreakdownItem],
    summary="Category totals, largest first",
)
async def categories_endpoint(
    frame: TimeFrame = Query(TimeFrame.MONTH),
    currency: str = Depends(display_currency),
    now: datetime = Depends(reference_now),
    tracker: TrackerService = Depends(get_tracker),
):
    return [
        CategoryBreakdownItem(
            category=row.category,
            group=row.category.group.value,
            total=round2(row.total),
            percent=round2(row.percent),
        )
        for row in by_category(_frame_items(tracker, frame, currency, now))
    ]


@router.get("/daily", response_model=List[DailyTotal], summary="Totals per calendar day")
async def daily_endpoint(
    frame: TimeFrame = Query(TimeFrame.MONTH),
    currency: str = Depends(display_currency),
    now: datetime = Depends(reference_now),
    tracker: TrackerService = Depends(get_tracker),
):
    days = by_day(_frame_items(tracker, frame, currency, now))
    return [DailyTotal(date=d, total=round2(t)) for d, t in days.items()]


@router.get("/weekdays", response_model=List[WeekdayItem], summary="Totals per weekday")
async def weekdays_endpoint(
    frame: TimeFrame = Query(TimeFrame.MONTH),
    currency: str = Depends(display_currency),
    now: datetime = Depends(reference_now),
    tracker: TrackerService = Depends(get_tracker),
):
    return [
        WeekdayItem(
            weekday=w.weekday, total=round2(w.total), count=w.count, average=round2(w.average)
        )
        for w in by_weekday(_frame_items(tracker, frame, currency, now))
    ]


@router.get(
    "/trend",
    response_model=TrendOut,
    summary="Daily and cumulative trend plus per-category change vs the previous period",
)
async def trend_endpoint(
    frame: TimeFrame = Query(TimeFrame.MONTH),
    currency: str = Depends(display_currency),
    now: datetime = Depends(reference_now),
    tracker: TrackerService = Depends(get_tracker),
):
    current = _frame_items(tracker, frame, currency, now)
    prev_window = previous_window(frame, now)
    previous = (
        convert_expenses(
            filter_window(tracker.expenses(), prev_window), tracker.converter(), currency
        )
        if prev_window is not None
        else []
    )
    return TrendOut(
        points=[
            TrendPoint(
                date=p.date,
                daily_total=round2(p.daily_total),
                cumulative_total=round2(p.cumulative_total),
            )
            for p in compute_trend_data(current)
        ],
        categories=[
            CategoryTrendItem(
                category=t.category,
                amount=round2(t.amount),
                previous_amount=round2(t.previous_amount),
                change_percentage=round2(t.change_percentage),
                share=round(t.share, 4),
                trend=t.trend,
            )
            for t in category_trends(current, previous)
        ],
    )


@router.get("/wellness", response_model=WellnessOut, summary="Financial wellness score")
async def wellness_endpoint(
    frame: TimeFrame = Query(TimeFrame.MONTH),
    currency: str = Depends(display_currency),
    now: datetime = Depends(reference_now),
    tracker: TrackerService = Depends(get_tracker),
):
    try:
        result = wellness.compute_wellness(
            tracker.expenses(), tracker.budget, frame, tracker.converter(), currency, now
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    desc = wellness.describe(result.score, frame)
    return WellnessOut(
        frame=frame,
        currency=currency,
        score=round(result.score, 1),
        tier=desc.tier,
        title=desc.title,
        description=desc.description,
        color=desc.color,
        icon=desc.icon,
        spending_ratio=round(result.spending_ratio, 4),
        total_spending=round2(result.total_spending),
        period_budget=round2(result.period_budget),
        base_score=round(result.base_score, 1),
        trend_penalty=round(result.trend_penalty, 1),
        essential_penalty=round(result.essential_penalty, 1),
        consistency_penalty=round(result.consistency_penalty, 1),
        bonus=round(result.bonus, 1),
    )


@router.get("/insights", response_model=InsightsOut, summary="Spending patterns and tips")
async def insights_endpoint(
    frame: TimeFrame = Query(TimeFrame.MONTH),
    currency: str = Depends(display_currency),
    now: datetime = Depends(reference_now),
    tracker: TrackerService = Depends(get_tracker),
):
    expenses = tracker.expenses()
    converter = tracker.converter()
    patterns = insights.identify_patterns(expenses, converter, currency, frame, now)
    recs = insights.generate_recommendations(expenses, converter, currency, frame, now)
    return InsightsOut(
        patterns=[
            PatternOut(title=p.title, description=p.description, icon=p.icon, color=p.color)
            for p in patterns
        ],
        recommendations=[
            RecommendationOut(
                title=r.title,
                description=r.description,
                icon=r.icon,
                color=r.color,
                potential_saving=None
                if r.potential_saving is None
                else round2(r.potential_saving),
            )
            for r in recs
        ],
    )
