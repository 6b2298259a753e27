from typing import Dict, List

from fastapi import APIRouter

from expense_tracker.models import CategoryGroup
from expense_tracker.models.category import categories_in_group
from expense_tracker.models.presentation import GROUP_COLORS, GROUP_ICONS, category_metadata

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", summary="Categories grouped for pickers, with icon and colour")
async def list_categories() -> List[Dict[str, object]]:
    return [
        {
            "group": group.value,
            "icon": GROUP_ICONS[group],
            "color": GROUP_COLORS[group],
            "categories": [category_metadata(c) for c in categories_in_group(group)],
        }
        for group in CategoryGroup
    ]
