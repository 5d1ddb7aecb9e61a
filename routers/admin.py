# routers/admin.py

from collections import Counter

from fastapi import APIRouter, Depends

from core.access_gate import AccessGate, AccessGrant
from core.cascade import CascadeDeletion
from core.errors import IdentityProviderError, MenuApiError, NotFound, PermissionDenied, ValidationFailed
from core.identity_provider import SupabaseIdentityProvider
from core.logging_config import logger
from core.ownership import OwnershipVerifier
from core.permissions import is_role_at_least
from core.repositories import (
    BusinessRepository,
    CategoryRepository,
    ItemRepository,
    ProfileRepository,
)
from core.utils import generate_temp_password
from dependencies.auth import can, requires_role
from dependencies.services import (
    get_business_repository,
    get_cascade,
    get_category_repository,
    get_identity_provider,
    get_item_repository,
    get_ownership_verifier,
    get_profile_repository,
)
from models.business import BusinessRead, BusinessToggle
from models.enums import Action, Resource, Role
from models.principal import Principal
from models.user import AdminUserRead, ProfileRead, RoleUpdate, UserInvite


router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
)


# Roles only a super_admin may hand out
ELEVATED_ROLES = {Role.admin.value, Role.super_admin.value}


# -----------------------------------------------------
# Helper: last super_admin guard
# -----------------------------------------------------
def ensure_not_last_super_admin(profiles: ProfileRepository, target: dict, operation: str):
    if target.get("role") != Role.super_admin.value:
        return
    if profiles.count(role=Role.super_admin.value) <= 1:
        raise ValidationFailed(f"Cannot {operation} the last super admin")


# =====================================================
# DASHBOARD
# =====================================================
@router.get("/stats", summary="Platform counters")
def admin_stats(
    grant: AccessGrant = Depends(can(Action.read, Resource.admin_dashboard)),
    profiles: ProfileRepository = Depends(get_profile_repository),
    businesses: BusinessRepository = Depends(get_business_repository),
    categories: CategoryRepository = Depends(get_category_repository),
    items: ItemRepository = Depends(get_item_repository),
):
    return {
        "success": True,
        "data": {
            "total_users": profiles.count(),
            "total_businesses": businesses.count(),
            "active_businesses": businesses.count(active_only=True),
            "total_categories": categories.count(),
            "total_items": items.count(),
        },
    }


# =====================================================
# BUSINESSES
# =====================================================
@router.get("/businesses", summary="List every business")
def admin_list_businesses(
    principal: Principal = Depends(requires_role(Role.admin, Role.super_admin)),
    businesses: BusinessRepository = Depends(get_business_repository),
):
    rows = businesses.find_all()
    return {"success": True, "data": [BusinessRead(**r).model_dump() for r in rows]}


@router.patch("/businesses/{business_id}/toggle", summary="Activate / deactivate a business")
def admin_toggle_business(
    business_id: str,
    payload: BusinessToggle,
    grant: AccessGrant = Depends(can(Action.update, Resource.business)),
    verifier: OwnershipVerifier = Depends(get_ownership_verifier),
    businesses: BusinessRepository = Depends(get_business_repository),
):
    verifier.require(grant, Resource.business, business_id)

    updated = businesses.update(business_id, {"is_active": payload.is_active})
    if not updated:
        raise NotFound("Business not found")

    logger.info(
        f"Business {business_id} set is_active={payload.is_active} by profile {grant.principal.profile_id}"
    )
    return {"success": True, "data": BusinessRead(**updated).model_dump()}


@router.delete("/businesses/{business_id}", summary="Delete any business")
def admin_delete_business(
    business_id: str,
    grant: AccessGrant = Depends(can(Action.delete, Resource.business)),
    verifier: OwnershipVerifier = Depends(get_ownership_verifier),
    businesses: BusinessRepository = Depends(get_business_repository),
    cascade: CascadeDeletion = Depends(get_cascade),
):
    verifier.require(grant, Resource.business, business_id)

    if not businesses.find_by_id(business_id):
        raise NotFound("Business not found")

    categories_removed, items_removed = cascade.delete_business_tree(business_id)
    logger.info(
        f"[admin] Business {business_id} deleted by profile {grant.principal.profile_id} "
        f"({categories_removed} categories, {items_removed} items)"
    )
    return {"success": True, "message": "Business deleted successfully"}


# =====================================================
# USERS
# =====================================================
@router.get("/users", summary="List users with auth metadata")
def admin_list_users(
    grant: AccessGrant = Depends(can(Action.read, Resource.user)),
    profiles: ProfileRepository = Depends(get_profile_repository),
    businesses: BusinessRepository = Depends(get_business_repository),
    identity_provider: SupabaseIdentityProvider = Depends(get_identity_provider),
):
    rows = profiles.list_all()

    try:
        identities = {i.id: i for i in identity_provider.list_identities()}
    except IdentityProviderError as e:
        # Profiles alone are still a usable listing
        logger.warning(f"Could not list auth users: {e.reason}")
        identities = {}

    business_counts = Counter(str(owner) for owner in businesses.owner_ids())

    users = []
    for row in rows:
        identity = identities.get(row.get("auth_user_id") or "")
        users.append(
            AdminUserRead(
                id=row["id"],
                auth_user_id=row.get("auth_user_id"),
                email=row.get("email") or (identity.email if identity else None) or "unknown",
                full_name=row.get("full_name"),
                avatar_url=row.get("avatar_url"),
                role=row.get("role") or Role.user.value,
                created_at=row.get("created_at"),
                last_sign_in_at=identity.last_sign_in_at if identity else None,
                business_count=business_counts.get(str(row["id"]), 0),
            ).model_dump()
        )

    return {"success": True, "data": users}


@router.patch("/users/{profile_id}/role", summary="Change a user's role")
def admin_update_role(
    profile_id: str,
    payload: RoleUpdate,
    grant: AccessGrant = Depends(can(Action.update, Resource.user)),
    profiles: ProfileRepository = Depends(get_profile_repository),
):
    AccessGate.ensure_not_self(grant.principal, profile_id, "change the role of")

    target = profiles.find_by_id(profile_id)
    if not target:
        raise NotFound("User not found")

    new_role = payload.role.value
    touches_elevated = new_role in ELEVATED_ROLES or target.get("role") in ELEVATED_ROLES
    if touches_elevated and not is_role_at_least(grant.principal.role, Role.super_admin):
        raise PermissionDenied("Only a super admin can grant or revoke admin roles")

    if new_role != Role.super_admin.value:
        ensure_not_last_super_admin(profiles, target, "demote")

    updated = profiles.update_role(profile_id, new_role)
    if not updated:
        raise NotFound("User not found")

    logger.info(
        f"Role of profile {profile_id} changed {target.get('role')} → {new_role} "
        f"by {grant.principal.profile_id}"
    )
    return {"success": True, "data": ProfileRead(**updated).model_dump()}


@router.delete("/users/{profile_id}", summary="Delete a user and everything they own")
def admin_delete_user(
    profile_id: str,
    grant: AccessGrant = Depends(can(Action.delete, Resource.user)),
    profiles: ProfileRepository = Depends(get_profile_repository),
    cascade: CascadeDeletion = Depends(get_cascade),
):
    AccessGate.ensure_not_self(grant.principal, profile_id, "delete")

    target = profiles.find_by_id(profile_id)
    if not target:
        raise NotFound("User not found")
    if target.get("role") in ELEVATED_ROLES and not is_role_at_least(grant.principal.role, Role.super_admin):
        raise PermissionDenied("Only a super admin can delete admin accounts")
    ensure_not_last_super_admin(profiles, target, "delete")

    report = cascade.delete_principal(profile_id)
    logger.info(f"[admin] User {profile_id} deleted by profile {grant.principal.profile_id}")

    return {
        "success": True,
        "message": "User deleted successfully",
        "data": {
            "businesses_deleted": len(report.businesses_deleted),
            "categories_deleted": report.categories_deleted,
            "items_deleted": report.items_deleted,
            "media_removed": report.media_removed,
            "identity_deleted": report.identity_deleted,
            "warnings": report.warnings,
        },
    }


@router.post("/users/invite", status_code=201, summary="Invite a user")
def admin_invite_user(
    payload: UserInvite,
    grant: AccessGrant = Depends(can(Action.create, Resource.user)),
    profiles: ProfileRepository = Depends(get_profile_repository),
    identity_provider: SupabaseIdentityProvider = Depends(get_identity_provider),
):
    role = payload.role.value
    if role in ELEVATED_ROLES and not is_role_at_least(grant.principal.role, Role.super_admin):
        raise PermissionDenied("Only a super admin can invite admins")

    email = payload.email.strip().lower()
    if identity_provider.list_identities(email=email):
        raise ValidationFailed("A user with this email already exists")

    identity = identity_provider.create_identity(email, generate_temp_password())

    try:
        profile = profiles.provision(identity.id, email, role=role, overwrite=True)
        if not profile:
            raise MenuApiError("Failed to create profile for invited user")
    except Exception:
        # Roll back so the email can be invited again
        try:
            identity_provider.delete_identity(identity.id)
        except IdentityProviderError as rollback_error:
            logger.error(
                f"Rollback of auth user {identity.id} failed: {rollback_error.reason}"
            )
        raise

    logger.info(f"[admin] Invited {email} as {role} by profile {grant.principal.profile_id}")
    return {
        "success": True,
        "message": "User invited successfully",
        "data": ProfileRead(**profile).model_dump(),
    }
