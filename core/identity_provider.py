# core/identity_provider.py

from typing import List, Optional

from supabase import Client

from core.errors import IdentityProviderError, InvalidCredential
from core.logging_config import logger
from models.principal import ExternalIdentity


# -----------------------------------------------------
# Normalize Supabase list_users() result
# -----------------------------------------------------
def extract_user_list(result):
    if isinstance(result, list):
        return result
    if isinstance(result, dict) and "users" in result:
        return result["users"]
    users_attr = getattr(result, "users", None)
    if users_attr is not None:
        return users_attr
    return []


def _stringify(value) -> Optional[str]:
    if value is None:
        return None
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def to_external_identity(user) -> ExternalIdentity:
    """Supabase gotrue User (object or dict) → ExternalIdentity."""
    get = user.get if isinstance(user, dict) else lambda key, default=None: getattr(user, key, default)

    identities = []
    for ident in get("identities") or []:
        if isinstance(ident, dict):
            identities.append(ident)
        elif hasattr(ident, "model_dump"):
            identities.append(ident.model_dump(mode="json"))

    return ExternalIdentity(
        id=str(get("id")),
        email=get("email"),
        user_metadata=get("user_metadata") or {},
        identities=identities,
        last_sign_in_at=_stringify(get("last_sign_in_at")),
        created_at=_stringify(get("created_at")),
    )


# ============================================================
# Supabase Auth (GoTrue) identity provider
# ============================================================
class SupabaseIdentityProvider:
    def __init__(self, client: Client):
        if client is None:
            raise RuntimeError("Supabase client not configured")
        self.client = client

    def verify_token(self, token: str) -> ExternalIdentity:
        """
        Validate a JWT with GoTrue. Called on every request; the result is
        never cached beyond the token's own lifetime.
        """
        try:
            resp = self.client.auth.get_user(token)
        except Exception as e:
            logger.warning(f"Token verification failed: {type(e).__name__}")
            raise InvalidCredential() from e

        if not resp or not getattr(resp, "user", None):
            raise InvalidCredential()

        return to_external_identity(resp.user)

    def create_identity(self, email: str, password: str, *, email_confirm: bool = True) -> ExternalIdentity:
        try:
            resp = self.client.auth.admin.create_user(
                {
                    "email": email,
                    "password": password,
                    "email_confirm": email_confirm,
                }
            )
        except Exception as e:
            raise IdentityProviderError("create_user", e) from e

        return to_external_identity(resp.user)

    def delete_identity(self, identity_id: str) -> None:
        try:
            self.client.auth.admin.delete_user(identity_id)
        except Exception as e:
            raise IdentityProviderError("delete_user", e) from e

    def list_identities(self, email: Optional[str] = None) -> List[ExternalIdentity]:
        try:
            raw = self.client.auth.admin.list_users()
        except Exception as e:
            raise IdentityProviderError("list_users", e) from e

        users = [to_external_identity(u) for u in extract_user_list(raw)]
        if email is None:
            return users

        wanted = email.strip().lower()
        return [u for u in users if (u.email or "").lower() == wanted]
