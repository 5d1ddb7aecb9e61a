# models/principal.py

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from models.enums import Role


# ===============================================================
# IDENTITY PROVIDER RECORD (Supabase Auth user, normalized)
# ===============================================================
class ExternalIdentity(BaseModel):
    """Mirrors the parts of auth.users the backend relies on."""

    id: str
    email: Optional[str] = None
    user_metadata: Dict[str, Any] = Field(default_factory=dict)
    identities: List[Dict[str, Any]] = Field(default_factory=list)
    last_sign_in_at: Optional[str] = None
    created_at: Optional[str] = None


# ===============================================================
# PRINCIPAL: the authenticated actor for one request
# ===============================================================
class Principal(BaseModel):
    identity_id: str                 # Supabase Auth UID
    profile_id: str                  # profiles.id (local row)
    role: Role = Role.user
    email: str = ""

    display_name: Optional[str] = None
    avatar_url: Optional[str] = None

    model_config = ConfigDict(frozen=True)
