from datetime import datetime

import pytest

from expense_tracker.models import Category, TimeFrame
from expense_tracker.services import insights
from expense_tracker.services.analytics_utils import convert_expenses

from conftest import NOW, make_expense


def _patterns(expenses, converter, frame=TimeFrame.MONTH):
    return {p.title: p for p in insights.identify_patterns(expenses, converter, "USD", frame, NOW)}


def _recs(expenses, converter, frame=TimeFrame.MONTH):
    return {
        r.title: r for r in insights.generate_recommendations(expenses, converter, "USD", frame, NOW)
    }


def test_empty_set_produces_nothing(converter):
    assert insights.identify_patterns([], converter, "USD", TimeFrame.MONTH, NOW) == []
    assert insights.generate_recommendations([], converter, "USD", TimeFrame.MONTH, NOW) == []


def test_largest_transaction(converter):
    patterns = _patterns(
        [
            make_expense(20, Category.GROCERIES, date=datetime(2024, 3, 2)),
            make_expense(150, Category.DINING, date=datetime(2024, 3, 1, 19)),
        ],
        converter,
    )
    text = patterns["Largest Transaction"].description
    assert "USD 150.00" in text
    assert "Dining Out" in text
    assert "Mar 01, 2024" in text


def test_peak_time_ties_go_to_earlier_bucket(converter):
    expenses = [
        make_expense(5, date=datetime(2024, 3, 4, 19)),
        make_expense(5, date=datetime(2024, 3, 5, 9)),
    ]
    peak = _patterns(expenses, converter)["Peak Spending Time"]
    assert peak.description == (
        "You make most of your purchases during Morning (5AM-12PM) (1 transactions)"
    )


def test_time_of_day_buckets():
    assert insights.time_of_day(5) == "Morning (5AM-12PM)"
    assert insights.time_of_day(12) == "Afternoon (12PM-5PM)"
    assert insights.time_of_day(21) == "Evening (5PM-10PM)"
    assert insights.time_of_day(22) == "Night (10PM-5AM)"
    assert insights.time_of_day(3) == "Night (10PM-5AM)"


def test_spending_frequency_uses_calendar_length(converter):
    expenses = [
        make_expense(1, date=datetime(2024, 3, d, h)) for d in (1, 2, 3) for h in (9, 18)
    ]
    freq = _patterns(expenses, converter)["Spending Frequency"]
    assert freq.description == (
        "You make purchases on 10% of days, averaging 0.2 transactions per day"
    )


def test_common_combination(converter):
    expenses = [
        make_expense(10, Category.GROCERIES, date=datetime(2024, 3, 1)),
        make_expense(10, Category.DINING, date=datetime(2024, 3, 1)),
        make_expense(10, Category.GROCERIES, date=datetime(2024, 3, 2)),
        make_expense(10, Category.DINING, date=datetime(2024, 3, 2)),
        make_expense(10, Category.GROCERIES, date=datetime(2024, 3, 3)),
        make_expense(10, Category.TRANSPORT, date=datetime(2024, 3, 3)),
    ]
    combo = _patterns(expenses, converter)["Common Combinations"]
    assert combo.description == (
        "You often combine Dining Out with Groceries purchases on the same day"
    )


def test_no_combination_without_shared_days(converter):
    patterns = _patterns([make_expense(10, Category.GROCERIES)], converter)
    assert "Common Combinations" not in patterns


def test_weekly_peak_uses_average_per_transaction(converter):
    expenses = [
        # Monday: many small purchases, larger total
        *[make_expense(10, date=datetime(2024, 3, 11, 10)) for _ in range(5)],
        # Tuesday: one larger purchase
        make_expense(30, date=datetime(2024, 3, 12, 10)),
    ]
    peak = _patterns(expenses, converter)["Weekly Peak"]
    assert "Tuesdays" in peak.description


def test_longest_spending_streak(converter):
    items = convert_expenses(
        [
            make_expense(1, date=datetime(2024, 3, 1)),
            make_expense(1, date=datetime(2024, 3, 2)),
            make_expense(1, date=datetime(2024, 3, 2, 20)),
            make_expense(1, date=datetime(2024, 3, 3)),
            make_expense(1, date=datetime(2024, 3, 5)),
        ],
        converter,
        "USD",
    )
    assert insights.longest_spending_streak(items) == 3
    assert insights.longest_spending_streak([]) == 0


def test_monthly_trend(converter):
    expenses = [
        make_expense(100, date=datetime(2024, 2, 10)),
        make_expense(150, date=datetime(2024, 3, 10)),
    ]
    trend = _patterns(expenses, converter)["Monthly Trend"]
    assert trend.description == "Your spending has increased by 50.0% compared to last month"
    assert trend.color == "red"
    first = _patterns([make_expense(20)], converter)["Monthly Trend"]
    assert first.description == "First month of tracking expenses"


def test_recommendations_triggered(converter):
    expenses = [
        make_expense(300, Category.DINING, date=datetime(2024, 3, 9, 23)),  # Saturday night
        make_expense(100, Category.GROCERIES, date=datetime(2024, 3, 11, 10)),
        make_expense(50, Category.SUBSCRIPTION, date=datetime(2024, 3, 12, 10)),
    ]
    recs = _recs(expenses, converter)
    assert recs["Optimize Dining Out Spending"].potential_saving == pytest.approx(20.0)
    assert recs["Weekend Budget Plan"].potential_saving == pytest.approx(90.0)
    assert recs["Review Subscriptions"].potential_saving == pytest.approx(12.5)
    assert recs["Balance Food Expenses"].potential_saving == pytest.approx(90.0)
    assert recs["Late Night Spending"].potential_saving == pytest.approx(150.0)
    assert "Reduce Impulse Buys" not in recs
    assert "Savings Opportunity" not in recs


def test_impulse_buys(converter):
    expenses = [
        make_expense(1000, Category.RENT, date=datetime(2024, 3, 1, 10)),
        *[make_expense(1, Category.SHOPPING, date=datetime(2024, 3, 4, 10)) for _ in range(4)],
    ]
    recs = _recs(expenses, converter)
    assert recs["Reduce Impulse Buys"].potential_saving == pytest.approx(2.4)
    assert "Late Night Spending" not in recs


def test_small_groceries_are_not_impulse_buys(converter):
    expenses = [
        make_expense(1000, Category.RENT, date=datetime(2024, 3, 1, 10)),
        *[make_expense(1, Category.GROCERIES, date=datetime(2024, 3, 4, 10)) for _ in range(4)],
    ]
    assert "Reduce Impulse Buys" not in _recs(expenses, converter)


def test_savings_opportunity_when_essentials_low(converter):
    recs = _recs([make_expense(100, Category.SHOPPING, date=datetime(2024, 3, 4, 10))], converter)
    assert recs["Savings Opportunity"].potential_saving == pytest.approx(20.0)
    assert "Balance Food Expenses" not in recs
