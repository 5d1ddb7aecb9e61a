# models/user.py

from typing import Optional
from pydantic import BaseModel, EmailStr

from models.enums import Role


# ===============================================================
# PROFILE (public.profiles)
# ===============================================================

class ProfileRead(BaseModel):
    """Profile row as returned to API consumers."""
    id: str
    auth_user_id: Optional[str] = None
    email: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    role: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ProfileUpdate(BaseModel):
    """
    Self-service profile edit.
    Extra keys are accepted and then stripped (role, id, ...) before saving.
    """
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None

    model_config = {"extra": "allow"}


# ===============================================================
# ADMIN USER MANAGEMENT
# ===============================================================

class AdminUserRead(BaseModel):
    id: str                          # profile id
    auth_user_id: Optional[str] = None
    email: str = "unknown"
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    role: str = Role.user.value
    created_at: Optional[str] = None
    last_sign_in_at: Optional[str] = None
    business_count: int = 0


class RoleUpdate(BaseModel):
    role: Role


class UserInvite(BaseModel):
    email: EmailStr
    role: Role = Role.user
