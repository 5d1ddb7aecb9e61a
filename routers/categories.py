# routers/categories.py

from fastapi import APIRouter, Depends

from core.access_gate import AccessGrant
from core.cascade import CascadeDeletion
from core.errors import MenuApiError, NotFound, ValidationFailed
from core.logging_config import logger
from core.ownership import OwnershipVerifier
from core.repositories import CategoryRepository
from dependencies.auth import can
from dependencies.services import get_cascade, get_category_repository, get_ownership_verifier
from models.category import CategoryCreate, CategoryRead, CategoryUpdate, ReorderRequest
from models.enums import Action, Resource


router = APIRouter(tags=["Categories"])


# -----------------------------------------------------
# CREATE: appended at the end of the business menu
# -----------------------------------------------------
@router.post("/business/{business_id}/categories", status_code=201, summary="Create a category")
def create_category(
    business_id: str,
    payload: CategoryCreate,
    grant: AccessGrant = Depends(can(Action.create, Resource.category)),
    verifier: OwnershipVerifier = Depends(get_ownership_verifier),
    categories: CategoryRepository = Depends(get_category_repository),
):
    # The parent business decides ownership of a new category, and must exist
    # even under a global grant
    verifier.require(grant, Resource.business, business_id, must_exist=True)

    sort_order = categories.max_sort_order(business_id) + 1
    category = categories.create(business_id, payload.name.strip(), sort_order)
    if not category:
        raise MenuApiError("Failed to create category")

    return {"success": True, "data": CategoryRead(**category).model_dump()}


# -----------------------------------------------------
# LIST for a business
# -----------------------------------------------------
@router.get("/business/{business_id}/categories", summary="List categories of a business")
def list_categories(
    business_id: str,
    grant: AccessGrant = Depends(can(Action.read, Resource.category)),
    verifier: OwnershipVerifier = Depends(get_ownership_verifier),
    categories: CategoryRepository = Depends(get_category_repository),
):
    verifier.require(grant, Resource.business, business_id)

    rows = categories.find_by_business(business_id)
    return {"success": True, "data": [CategoryRead(**r).model_dump() for r in rows]}


# -----------------------------------------------------
# REORDER (declared before /{category_id})
# -----------------------------------------------------
@router.put("/categories/reorder", summary="Reorder categories")
def reorder_categories(
    payload: ReorderRequest,
    grant: AccessGrant = Depends(can(Action.update, Resource.category)),
    verifier: OwnershipVerifier = Depends(get_ownership_verifier),
    categories: CategoryRepository = Depends(get_category_repository),
):
    ids = [entry.id for entry in payload.entries]
    if len(set(ids)) != len(ids):
        raise ValidationFailed("Duplicate category ids in reorder request.")

    # All or nothing: every id is checked (owned, or at least present) before
    # the first write
    verifier.require_all(grant, Resource.category, ids, must_exist=True)

    for entry in payload.entries:
        categories.update_sort_order(entry.id, entry.sort_order)

    return {"success": True, "message": f"Reordered {len(ids)} categories"}


# -----------------------------------------------------
# UPDATE
# -----------------------------------------------------
@router.put("/categories/{category_id}", summary="Update a category")
def update_category(
    category_id: str,
    payload: CategoryUpdate,
    grant: AccessGrant = Depends(can(Action.update, Resource.category)),
    verifier: OwnershipVerifier = Depends(get_ownership_verifier),
    categories: CategoryRepository = Depends(get_category_repository),
):
    verifier.require(grant, Resource.category, category_id)

    updates = payload.model_dump(exclude_unset=True)
    if not updates:
        raise ValidationFailed("No fields provided to update.")

    updated = categories.update(category_id, updates)
    if not updated:
        raise NotFound("Category not found")

    return {"success": True, "data": CategoryRead(**updated).model_dump()}


# -----------------------------------------------------
# DELETE (item tags and items first, then the category)
# -----------------------------------------------------
@router.delete("/categories/{category_id}", summary="Delete a category")
def delete_category(
    category_id: str,
    grant: AccessGrant = Depends(can(Action.delete, Resource.category)),
    verifier: OwnershipVerifier = Depends(get_ownership_verifier),
    categories: CategoryRepository = Depends(get_category_repository),
    cascade: CascadeDeletion = Depends(get_cascade),
):
    verifier.require(grant, Resource.category, category_id)

    if not categories.find_by_id(category_id):
        raise NotFound("Category not found")

    items_removed = cascade.delete_category_tree(category_id)
    logger.info(f"Category {category_id} deleted with {items_removed} items")
    return {"success": True, "message": "Category deleted successfully"}
