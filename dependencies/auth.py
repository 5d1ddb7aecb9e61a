from typing import Optional, Union

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from core.access_gate import AccessGate, AccessGrant
from core.identity import IdentityResolver
from dependencies.services import get_access_gate, get_identity_resolver
from models.enums import Action, Resource, Role
from models.principal import Principal


# auto_error=False so a missing token surfaces as MissingCredential (401)
bearer_scheme = HTTPBearer(auto_error=False)


# ============================================================
# AUTH DECODING (Supabase: validates JWT + resolves profile)
# ============================================================
def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    resolver: IdentityResolver = Depends(get_identity_resolver),
) -> Principal:
    token = credentials.credentials if credentials else None
    return resolver.resolve(token)


# ============================================================
# PERMISSION CHECK (matrix via the access gate)
# ============================================================
def can(action: Union[Action, str], resource: Union[Resource, str]):
    """
    Usage:
        grant: AccessGrant = Depends(can(Action.update, Resource.business))

    Raises PermissionDenied on deny. When grant.requires_ownership is set the
    handler must run the ownership verifier before touching the record.
    """

    def dependency(
        principal: Principal = Depends(get_current_principal),
        gate: AccessGate = Depends(get_access_gate),
    ) -> AccessGrant:
        decision = gate.require(principal, action, resource)
        return AccessGrant(principal=principal, decision=decision)

    return dependency


# ============================================================
# ROLE CHECKER (role-tier endpoints, bypasses the matrix)
# ============================================================
def requires_role(*allowed_roles: Union[Role, str]):
    def checker(principal: Principal = Depends(get_current_principal)) -> Principal:
        return AccessGate.require_role(principal, *allowed_roles)
    return checker
