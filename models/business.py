# models/business.py

from typing import Optional
from pydantic import BaseModel, Field, field_validator

from models.enums import BusinessType
from models.fields import require_value


# -------------------------------------------------
# Create
# -------------------------------------------------
class BusinessCreate(BaseModel):
    """
    Used when creating a business.
    owner_id and slug are assigned server-side.
    """
    name: str = Field(..., min_length=1, max_length=120)
    business_type: BusinessType = BusinessType.restaurant
    description: Optional[str] = None
    is_published: bool = False

    @field_validator("name", mode="before")
    def name_not_blank(cls, v, info):
        return require_value(v, info.field_name)


# -------------------------------------------------
# Update (PUT, partial)
# -------------------------------------------------
class BusinessUpdate(BaseModel):
    """
    Omitted fields are left alone. name, slug and the flags may be
    omitted but not sent as null; description and logo_url can be cleared.
    """
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    slug: Optional[str] = None
    description: Optional[str] = None
    logo_url: Optional[str] = None
    is_active: Optional[bool] = None
    is_published: Optional[bool] = None

    @field_validator("name", "slug", "is_active", "is_published", mode="before")
    def reject_null_or_blank(cls, v, info):
        return require_value(v, info.field_name)


class BusinessToggle(BaseModel):
    is_active: bool


# -------------------------------------------------
# Read
# -------------------------------------------------
class BusinessRead(BaseModel):
    id: str
    owner_id: str
    name: str
    slug: str
    business_type: str
    description: Optional[str] = None
    logo_url: Optional[str] = None
    is_active: bool = True
    is_published: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
