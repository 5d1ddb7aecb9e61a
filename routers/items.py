# routers/items.py

from fastapi import APIRouter, Depends

from core.access_gate import AccessGrant
from core.errors import MenuApiError, NotFound, ValidationFailed
from core.ownership import OwnershipVerifier
from core.repositories import FoodTypeRepository, ItemRepository
from dependencies.auth import can
from dependencies.services import (
    get_food_type_repository,
    get_item_repository,
    get_ownership_verifier,
)
from models.category import ReorderRequest
from models.enums import Action, Resource
from models.item import ItemCreate, ItemRead, ItemUpdate


router = APIRouter(tags=["Items"])


# -----------------------------------------------------
# CREATE: appended at the end of the category
# -----------------------------------------------------
@router.post("/categories/{category_id}/items", status_code=201, summary="Create an item")
def create_item(
    category_id: str,
    payload: ItemCreate,
    grant: AccessGrant = Depends(can(Action.create, Resource.item)),
    verifier: OwnershipVerifier = Depends(get_ownership_verifier),
    items: ItemRepository = Depends(get_item_repository),
):
    verifier.require(grant, Resource.category, category_id, must_exist=True)

    sort_order = items.max_sort_order(category_id) + 1
    item = items.create(category_id, payload.model_dump(), sort_order)
    if not item:
        raise MenuApiError("Failed to create item")

    return {"success": True, "data": ItemRead(**item).model_dump()}


# -----------------------------------------------------
# LIST for a category
# -----------------------------------------------------
@router.get("/categories/{category_id}/items", summary="List items of a category")
def list_items(
    category_id: str,
    grant: AccessGrant = Depends(can(Action.read, Resource.item)),
    verifier: OwnershipVerifier = Depends(get_ownership_verifier),
    items: ItemRepository = Depends(get_item_repository),
):
    verifier.require(grant, Resource.category, category_id)

    rows = items.find_by_category(category_id)
    return {"success": True, "data": [ItemRead(**r).model_dump() for r in rows]}


# -----------------------------------------------------
# REORDER (declared before /{item_id})
# -----------------------------------------------------
@router.put("/items/reorder", summary="Reorder items")
def reorder_items(
    payload: ReorderRequest,
    grant: AccessGrant = Depends(can(Action.update, Resource.item)),
    verifier: OwnershipVerifier = Depends(get_ownership_verifier),
    items: ItemRepository = Depends(get_item_repository),
):
    ids = [entry.id for entry in payload.entries]
    if len(set(ids)) != len(ids):
        raise ValidationFailed("Duplicate item ids in reorder request.")

    verifier.require_all(grant, Resource.item, ids, must_exist=True)

    for entry in payload.entries:
        items.update_sort_order(entry.id, entry.sort_order)

    return {"success": True, "message": f"Reordered {len(ids)} items"}


# -----------------------------------------------------
# UPDATE
# -----------------------------------------------------
@router.put("/items/{item_id}", summary="Update an item")
def update_item(
    item_id: str,
    payload: ItemUpdate,
    grant: AccessGrant = Depends(can(Action.update, Resource.item)),
    verifier: OwnershipVerifier = Depends(get_ownership_verifier),
    items: ItemRepository = Depends(get_item_repository),
):
    verifier.require(grant, Resource.item, item_id)

    updates = payload.model_dump(exclude_unset=True)
    if not updates:
        raise ValidationFailed("No fields provided to update.")

    updated = items.update(item_id, updates)
    if not updated:
        raise NotFound("Item not found")

    return {"success": True, "data": ItemRead(**updated).model_dump()}


# -----------------------------------------------------
# DELETE (tags first, then the item)
# -----------------------------------------------------
@router.delete("/items/{item_id}", summary="Delete an item")
def delete_item(
    item_id: str,
    grant: AccessGrant = Depends(can(Action.delete, Resource.item)),
    verifier: OwnershipVerifier = Depends(get_ownership_verifier),
    items: ItemRepository = Depends(get_item_repository),
    food_types: FoodTypeRepository = Depends(get_food_type_repository),
):
    verifier.require(grant, Resource.item, item_id)

    food_types.delete_tags_for_items([item_id])
    if not items.delete_by_id(item_id):
        raise NotFound("Item not found")

    return {"success": True, "message": "Item deleted successfully"}
