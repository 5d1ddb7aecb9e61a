# models/item.py

from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from models.fields import require_value


class ItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=160)
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    image_url: Optional[str] = None

    @field_validator("name", mode="before")
    def name_not_blank(cls, v, info):
        return require_value(v, info.field_name)


class ItemUpdate(BaseModel):
    # description and image_url can be cleared with null, the rest cannot
    name: Optional[str] = Field(None, min_length=1, max_length=160)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    image_url: Optional[str] = None
    is_available: Optional[bool] = None

    @field_validator("name", "price", "is_available", mode="before")
    def reject_null_or_blank(cls, v, info):
        return require_value(v, info.field_name)


class ItemRead(BaseModel):
    id: str
    category_id: str
    name: str
    description: Optional[str] = None
    price: float
    image_url: Optional[str] = None
    is_available: bool = True
    sort_order: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


# -------------------------------------------------
# Food type tags on an item
# -------------------------------------------------
class ItemTagsUpdate(BaseModel):
    """Replaces the item's tags; an empty list clears them."""
    food_type_ids: List[str] = Field(default_factory=list)
