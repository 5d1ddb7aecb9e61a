# routers/public.py

"""
Public menu, served by slug without authentication.

Only an active and published business is visible; anything else is the
same 404 as an unknown slug. Unavailable items are left out.
"""

from collections import defaultdict

from fastapi import APIRouter, Depends

from core.errors import NotFound
from core.repositories import (
    BusinessRepository,
    CategoryRepository,
    FoodTypeRepository,
    ItemRepository,
)
from dependencies.services import (
    get_business_repository,
    get_category_repository,
    get_food_type_repository,
    get_item_repository,
)
from models.menu import PublicMenu


router = APIRouter(
    prefix="/menu",
    tags=["Public Menu"],
)


@router.get("/{slug}", summary="Get a published menu by slug")
def get_public_menu(
    slug: str,
    businesses: BusinessRepository = Depends(get_business_repository),
    categories: CategoryRepository = Depends(get_category_repository),
    items: ItemRepository = Depends(get_item_repository),
    food_types: FoodTypeRepository = Depends(get_food_type_repository),
):
    business = businesses.find_published_by_slug(slug.strip().lower())
    if not business:
        raise NotFound("Menu not found")

    cats = categories.find_by_business(business["id"])
    available = items.find_available_by_categories([c["id"] for c in cats])

    tags = defaultdict(list)
    for tag in food_types.tags_for_items([i["id"] for i in available]):
        tags[tag["item_id"]].append(tag["food_type_id"])

    by_category = defaultdict(list)
    for item in available:
        by_category[item["category_id"]].append({**item, "food_type_ids": tags[item["id"]]})

    menu = PublicMenu(
        business=business,
        categories=[{**c, "items": by_category[c["id"]]} for c in cats],
        food_types=food_types.find_by_business(business["id"]),
    )
    return {"success": True, "data": menu.model_dump()}
