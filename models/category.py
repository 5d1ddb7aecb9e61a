# models/category.py

from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from models.fields import require_value


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)

    @field_validator("name", mode="before")
    def name_not_blank(cls, v, info):
        return require_value(v, info.field_name)


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)

    @field_validator("name", mode="before")
    def name_not_null_or_blank(cls, v, info):
        return require_value(v, info.field_name)


class CategoryRead(BaseModel):
    id: str
    business_id: str
    name: str
    sort_order: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


# -------------------------------------------------
# Reorder (shared by categories and items)
# -------------------------------------------------
class SortEntry(BaseModel):
    id: str
    sort_order: int = Field(..., ge=0)


class ReorderRequest(BaseModel):
    entries: List[SortEntry] = Field(..., min_length=1)
