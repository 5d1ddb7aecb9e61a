# models/food_type.py

from typing import Optional
from pydantic import BaseModel, Field, field_validator

from models.fields import require_value


class FoodTypeCreate(BaseModel):
    """A business-scoped tag such as "Vegan" or "Halal"."""
    name: str = Field(..., min_length=1, max_length=60)
    icon: Optional[str] = Field(None, max_length=16)

    @field_validator("name", mode="before")
    def name_not_blank(cls, v, info):
        return require_value(v, info.field_name)


class FoodTypeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=60)
    icon: Optional[str] = Field(None, max_length=16)

    @field_validator("name", mode="before")
    def name_not_null_or_blank(cls, v, info):
        return require_value(v, info.field_name)


class FoodTypeRead(BaseModel):
    id: str
    business_id: str
    name: str
    icon: Optional[str] = None
    created_at: Optional[str] = None
