# models/menu.py

from typing import List, Optional
from pydantic import BaseModel, Field

from models.category import CategoryRead
from models.food_type import FoodTypeRead
from models.item import ItemRead


# -------------------------------------------------
# Public menu (no owner or admin fields)
# -------------------------------------------------
class PublicBusiness(BaseModel):
    name: str
    slug: str
    business_type: str
    description: Optional[str] = None
    logo_url: Optional[str] = None


class PublicItem(ItemRead):
    food_type_ids: List[str] = Field(default_factory=list)


class PublicCategory(CategoryRead):
    items: List[PublicItem] = Field(default_factory=list)


class PublicMenu(BaseModel):
    business: PublicBusiness
    categories: List[PublicCategory] = Field(default_factory=list)
    food_types: List[FoodTypeRead] = Field(default_factory=list)
