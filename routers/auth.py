from fastapi import APIRouter, Depends

from core.access_gate import AccessGrant
from core.errors import NotFound, ValidationFailed
from core.logging_config import logger
from core.permissions import strip_protected_fields
from core.repositories import ProfileRepository
from dependencies.auth import can, get_current_principal
from dependencies.services import get_profile_repository
from models.enums import Action, Resource
from models.principal import Principal
from models.user import ProfileRead, ProfileUpdate


router = APIRouter(
    prefix="/auth",
    tags=["Auth"],
)


# ============================================================
# CURRENT USER
# ============================================================
@router.get("/me", summary="Current authenticated user")
def read_me(principal: Principal = Depends(get_current_principal)):
    return {
        "success": True,
        "data": {
            "user": {
                "id": principal.identity_id,
                "email": principal.email,
                "full_name": principal.display_name,
                "avatar_url": principal.avatar_url,
            },
            "profileId": principal.profile_id,
            "role": principal.role.value,
        },
    }


# ============================================================
# UPDATE OWN PROFILE
# ============================================================
@router.put("/me", summary="Update current user profile")
def update_me(
    payload: ProfileUpdate,
    grant: AccessGrant = Depends(can(Action.update, Resource.profile)),
    profiles: ProfileRepository = Depends(get_profile_repository),
):
    # Only explicitly sent fields; role / id / auth_user_id are dropped
    updates = strip_protected_fields(Resource.profile, payload.model_dump(exclude_unset=True))
    updates = {k: v for k, v in updates.items() if k in ProfileUpdate.model_fields}
    if not updates:
        raise ValidationFailed("No fields provided to update.")

    # The target is always the caller's own profile
    updated = profiles.update(grant.principal.profile_id, updates)
    if not updated:
        raise NotFound("Profile not found")

    logger.info(f"Profile {grant.principal.profile_id} updated: {sorted(updates)}")
    return {"success": True, "data": ProfileRead(**updated).model_dump()}
