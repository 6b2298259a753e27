"""Static presentation metadata (icons / colours) for categories and groups.

Kept out of the computational services; only the API's category listing and
insight payloads read it.
"""

from typing import Dict

from .category import Category, CategoryGroup

CATEGORY_ICONS: Dict[Category, str] = {
    Category.GROCERIES: "cart.fill",
    Category.DINING: "fork.knife",
    Category.TRANSPORT: "car.fill",
    Category.UTILITIES: "bolt.fill",
    Category.RENT: "house.fill",
    Category.HEALTHCARE: "cross.fill",
    Category.ENTERTAINMENT: "tv.fill",
    Category.SHOPPING: "bag.fill",
    Category.TRAVEL: "airplane",
    Category.FITNESS: "figure.run",
    Category.EDUCATION: "book.fill",
    Category.SUBSCRIPTION: "repeat.circle.fill",
    Category.CLOTHING: "tshirt.fill",
    Category.BEAUTY: "sparkles",
    Category.GIFTS: "gift.fill",
    Category.INSURANCE: "shield.fill",
    Category.INVESTMENT: "chart.line.uptrend.xyaxis",
    Category.SAVINGS: "banknote.fill",
    Category.TAXES: "doc.text.fill",
    Category.PETS: "pawprint.fill",
    Category.MAINTENANCE: "wrench.fill",
    Category.OTHER: "square.grid.2x2.fill",
}

GROUP_ICONS: Dict[CategoryGroup, str] = {
    CategoryGroup.ESSENTIAL: "house.fill",
    CategoryGroup.LIFESTYLE: "star.fill",
    CategoryGroup.PERSONAL_CARE: "heart.fill",
    CategoryGroup.FINANCIAL: "banknote.fill",
    CategoryGroup.MISCELLANEOUS: "ellipsis.circle.fill",
}

GROUP_COLORS: Dict[CategoryGroup, str] = {
    CategoryGroup.ESSENTIAL: "blue",
    CategoryGroup.LIFESTYLE: "purple",
    CategoryGroup.PERSONAL_CARE: "pink",
    CategoryGroup.FINANCIAL: "green",
    CategoryGroup.MISCELLANEOUS: "gray",
}


def category_metadata(category: Category) -> Dict[str, str]:
    group = category.group
    return {
        "name": category.value,
        "group": group.value,
        "icon": CATEGORY_ICONS[category],
        "color": GROUP_COLORS[group],
    }
