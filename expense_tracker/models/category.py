"""Expense categories and their fixed grouping."""

from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, List


class CategoryGroup(str, Enum):
    ESSENTIAL = "Essential"
    LIFESTYLE = "Lifestyle"
    PERSONAL_CARE = "Personal Care"
    FINANCIAL = "Financial"
    MISCELLANEOUS = "Miscellaneous"


class Category(str, Enum):
    # Essential
    GROCERIES = "Groceries"
    DINING = "Dining Out"
    TRANSPORT = "Transport"
    UTILITIES = "Utilities"
    RENT = "Rent/Mortgage"
    HEALTHCARE = "Healthcare"

    # Lifestyle
    ENTERTAINMENT = "Entertainment"
    SHOPPING = "Shopping"
    TRAVEL = "Travel"
    FITNESS = "Fitness"
    EDUCATION = "Education"
    SUBSCRIPTION = "Subscriptions"

    # Personal care
    CLOTHING = "Clothing"
    BEAUTY = "Beauty & Care"
    GIFTS = "Gifts"

    # Financial
    INSURANCE = "Insurance"
    INVESTMENT = "Investment"
    SAVINGS = "Savings"
    TAXES = "Taxes"

    # Miscellaneous
    PETS = "Pets"
    MAINTENANCE = "Maintenance"
    OTHER = "Other"

    @property
    def group(self) -> CategoryGroup:
        return CATEGORY_GROUPS[self]


CATEGORY_GROUPS: Dict[Category, CategoryGroup] = {
    Category.GROCERIES: CategoryGroup.ESSENTIAL,
    Category.DINING: CategoryGroup.ESSENTIAL,
    Category.TRANSPORT: CategoryGroup.ESSENTIAL,
    Category.UTILITIES: CategoryGroup.ESSENTIAL,
    Category.RENT: CategoryGroup.ESSENTIAL,
    Category.HEALTHCARE: CategoryGroup.ESSENTIAL,
    Category.ENTERTAINMENT: CategoryGroup.LIFESTYLE,
    Category.SHOPPING: CategoryGroup.LIFESTYLE,
    Category.TRAVEL: CategoryGroup.LIFESTYLE,
    Category.FITNESS: CategoryGroup.LIFESTYLE,
    Category.EDUCATION: CategoryGroup.LIFESTYLE,
    Category.SUBSCRIPTION: CategoryGroup.LIFESTYLE,
    Category.CLOTHING: CategoryGroup.PERSONAL_CARE,
    Category.BEAUTY: CategoryGroup.PERSONAL_CARE,
    Category.GIFTS: CategoryGroup.PERSONAL_CARE,
    Category.INSURANCE: CategoryGroup.FINANCIAL,
    Category.INVESTMENT: CategoryGroup.FINANCIAL,
    Category.SAVINGS: CategoryGroup.FINANCIAL,
    Category.TAXES: CategoryGroup.FINANCIAL,
    Category.PETS: CategoryGroup.MISCELLANEOUS,
    Category.MAINTENANCE: CategoryGroup.MISCELLANEOUS,
    Category.OTHER: CategoryGroup.MISCELLANEOUS,
}

ESSENTIAL_CATEGORIES: FrozenSet[Category] = frozenset(
    c for c, g in CATEGORY_GROUPS.items() if g is CategoryGroup.ESSENTIAL
)
DISCRETIONARY_CATEGORIES: FrozenSet[Category] = frozenset(
    c for c, g in CATEGORY_GROUPS.items() if g is CategoryGroup.LIFESTYLE
)

# Wider set used when estimating savings potential
SAVINGS_CANDIDATE_CATEGORIES: FrozenSet[Category] = frozenset(
    {
        Category.ENTERTAINMENT,
        Category.SHOPPING,
        Category.DINING,
        Category.SUBSCRIPTION,
        Category.TRAVEL,
        Category.BEAUTY,
    }
)


def categories_in_group(group: CategoryGroup) -> List[Category]:
    return [c for c in Category if CATEGORY_GROUPS[c] is group]
