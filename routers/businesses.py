from fastapi import APIRouter, Depends, Request

from core.access_gate import AccessGrant
from core.cascade import CascadeDeletion
from core.config import settings
from core.errors import MenuApiError, NotFound, ValidationFailed
from core.logging_config import logger
from core.ownership import OwnershipVerifier
from core.permissions import strip_protected_fields
from core.rate_limiter import get_rate_limit_identifier, require_rate_limit
from core.repositories import BusinessRepository
from core.utils import generate_slug, is_valid_slug, random_suffix, sanitize
from dependencies.auth import can
from dependencies.services import get_business_repository, get_cascade, get_ownership_verifier
from models.business import BusinessCreate, BusinessRead, BusinessUpdate
from models.enums import Action, Resource


router = APIRouter(
    prefix="/business",
    tags=["Business"],
)

SLUG_ATTEMPTS = 10


def unique_slug(businesses: BusinessRepository, name: str) -> str:
    base = generate_slug(name)
    slug = base
    for _ in range(SLUG_ATTEMPTS):
        if not businesses.slug_exists(slug):
            return slug
        slug = f"{base}-{random_suffix()}"
    raise ValidationFailed("Could not generate a unique slug, try another name.")


# -----------------------------------------------------
# CREATE
# -----------------------------------------------------
@router.post("", status_code=201, summary="Create a business")
def create_business(
    payload: BusinessCreate,
    request: Request,
    grant: AccessGrant = Depends(can(Action.create, Resource.business)),
    businesses: BusinessRepository = Depends(get_business_repository),
):
    require_rate_limit(
        request,
        identifier=get_rate_limit_identifier(request, grant.principal.profile_id),
        max_requests=settings.BUSINESS_CREATE_MAX_REQUESTS,
        window_seconds=settings.BUSINESS_CREATE_WINDOW_SECONDS,
        scope="business_create",
    )

    business = businesses.create(
        owner_id=grant.principal.profile_id,
        name=payload.name.strip(),
        slug=unique_slug(businesses, payload.name),
        business_type=payload.business_type.value,
        description=payload.description,
        is_published=payload.is_published,
    )
    if not business:
        raise MenuApiError("Failed to create business")

    logger.info(f"Business {business['id']} created by profile {grant.principal.profile_id}")
    return {
        "success": True,
        "data": BusinessRead(**business).model_dump(),
        "message": "Business created successfully",
    }


# -----------------------------------------------------
# LIST: all for global read, own for read:own
# -----------------------------------------------------
@router.get("", summary="List businesses")
def list_businesses(
    scope: str = "all",
    grant: AccessGrant = Depends(can(Action.read, Resource.business)),
    businesses: BusinessRepository = Depends(get_business_repository),
):
    if grant.requires_ownership or scope == "own":
        rows = businesses.find_by_owner(grant.principal.profile_id)
    else:
        rows = businesses.find_all()

    return {"success": True, "data": [BusinessRead(**r).model_dump() for r in rows]}


# -----------------------------------------------------
# GET ONE
# -----------------------------------------------------
@router.get("/{business_id}", summary="Get a business")
def get_business(
    business_id: str,
    grant: AccessGrant = Depends(can(Action.read, Resource.business)),
    verifier: OwnershipVerifier = Depends(get_ownership_verifier),
    businesses: BusinessRepository = Depends(get_business_repository),
):
    verifier.require(grant, Resource.business, business_id)

    business = businesses.find_by_id(business_id)
    if not business:
        raise NotFound("Business not found")

    return {"success": True, "data": BusinessRead(**business).model_dump()}


# -----------------------------------------------------
# UPDATE
# -----------------------------------------------------
@router.put("/{business_id}", summary="Update a business")
def update_business(
    business_id: str,
    payload: BusinessUpdate,
    grant: AccessGrant = Depends(can(Action.update, Resource.business)),
    verifier: OwnershipVerifier = Depends(get_ownership_verifier),
    businesses: BusinessRepository = Depends(get_business_repository),
):
    verifier.require(grant, Resource.business, business_id)

    existing = businesses.find_by_id(business_id)
    if not existing:
        raise NotFound("Business not found")

    updates = strip_protected_fields(Resource.business, payload.model_dump(exclude_unset=True))
    updates = sanitize(updates)
    if not updates:
        raise ValidationFailed("No fields provided to update.")

    slug = updates.get("slug")
    if slug and slug != existing["slug"]:
        if not is_valid_slug(slug):
            raise ValidationFailed("Invalid slug format. Use lowercase alphanumeric and hyphens only.")
        if businesses.slug_exists(slug):
            raise ValidationFailed("Slug is already taken.")

    updated = businesses.update(business_id, updates)
    if not updated:
        raise NotFound("Business not found")

    return {"success": True, "data": BusinessRead(**updated).model_dump()}


# -----------------------------------------------------
# DELETE: bottom-up (tags → food types → items → categories → business)
# -----------------------------------------------------
@router.delete("/{business_id}", summary="Delete a business")
def delete_business(
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
        f"Business {business_id} deleted by profile {grant.principal.profile_id} "
        f"({categories_removed} categories, {items_removed} items)"
    )
    return {"success": True, "message": "Business deleted successfully"}
