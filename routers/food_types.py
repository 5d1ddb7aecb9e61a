# routers/food_types.py

from fastapi import APIRouter, Depends

from core.access_gate import AccessGrant
from core.errors import MenuApiError, NotFound, ValidationFailed
from core.logging_config import logger
from core.ownership import OwnershipVerifier
from core.repositories import CategoryRepository, FoodTypeRepository, ItemRepository
from dependencies.auth import can
from dependencies.services import (
    get_category_repository,
    get_food_type_repository,
    get_item_repository,
    get_ownership_verifier,
)
from models.enums import Action, Resource
from models.food_type import FoodTypeCreate, FoodTypeRead, FoodTypeUpdate
from models.item import ItemTagsUpdate


router = APIRouter(tags=["Food Types"])


# -----------------------------------------------------
# CREATE under a business
# -----------------------------------------------------
@router.post("/business/{business_id}/food-types", status_code=201, summary="Create a food type")
def create_food_type(
    business_id: str,
    payload: FoodTypeCreate,
    grant: AccessGrant = Depends(can(Action.create, Resource.food_type)),
    verifier: OwnershipVerifier = Depends(get_ownership_verifier),
    food_types: FoodTypeRepository = Depends(get_food_type_repository),
):
    verifier.require(grant, Resource.business, business_id, must_exist=True)

    food_type = food_types.create(business_id, payload.name.strip(), payload.icon)
    if not food_type:
        raise MenuApiError("Failed to create food type")

    return {"success": True, "data": FoodTypeRead(**food_type).model_dump()}


# -----------------------------------------------------
# LIST for a business
# -----------------------------------------------------
@router.get("/business/{business_id}/food-types", summary="List food types of a business")
def list_food_types(
    business_id: str,
    grant: AccessGrant = Depends(can(Action.read, Resource.food_type)),
    verifier: OwnershipVerifier = Depends(get_ownership_verifier),
    food_types: FoodTypeRepository = Depends(get_food_type_repository),
):
    verifier.require(grant, Resource.business, business_id)

    rows = food_types.find_by_business(business_id)
    return {"success": True, "data": [FoodTypeRead(**r).model_dump() for r in rows]}


# -----------------------------------------------------
# UPDATE
# -----------------------------------------------------
@router.put("/food-types/{food_type_id}", summary="Update a food type")
def update_food_type(
    food_type_id: str,
    payload: FoodTypeUpdate,
    grant: AccessGrant = Depends(can(Action.update, Resource.food_type)),
    verifier: OwnershipVerifier = Depends(get_ownership_verifier),
    food_types: FoodTypeRepository = Depends(get_food_type_repository),
):
    verifier.require(grant, Resource.food_type, food_type_id)

    updates = payload.model_dump(exclude_unset=True)
    if not updates:
        raise ValidationFailed("No fields provided to update.")

    updated = food_types.update(food_type_id, updates)
    if not updated:
        raise NotFound("Food type not found")

    return {"success": True, "data": FoodTypeRead(**updated).model_dump()}


# -----------------------------------------------------
# DELETE (item tags first, then the food type)
# -----------------------------------------------------
@router.delete("/food-types/{food_type_id}", summary="Delete a food type")
def delete_food_type(
    food_type_id: str,
    grant: AccessGrant = Depends(can(Action.delete, Resource.food_type)),
    verifier: OwnershipVerifier = Depends(get_ownership_verifier),
    food_types: FoodTypeRepository = Depends(get_food_type_repository),
):
    verifier.require(grant, Resource.food_type, food_type_id)

    if not food_types.delete_by_id(food_type_id):
        raise NotFound("Food type not found")

    return {"success": True, "message": "Food type deleted successfully"}


# =====================================================
# ITEM TAGS
# =====================================================
def item_business_id(
    item_id: str, items: ItemRepository, categories: CategoryRepository
) -> str:
    category_id = items.category_of(item_id)
    business_id = categories.business_of(category_id) if category_id else None
    if not business_id:
        raise NotFound("Item not found")
    return business_id


@router.get("/items/{item_id}/food-types", summary="List the food types tagged on an item")
def get_item_food_types(
    item_id: str,
    grant: AccessGrant = Depends(can(Action.read, Resource.item)),
    verifier: OwnershipVerifier = Depends(get_ownership_verifier),
    food_types: FoodTypeRepository = Depends(get_food_type_repository),
):
    verifier.require(grant, Resource.item, item_id, must_exist=True)

    rows = food_types.find_by_ids(food_types.tag_ids_for_item(item_id))
    return {"success": True, "data": [FoodTypeRead(**r).model_dump() for r in rows]}


@router.put("/items/{item_id}/food-types", summary="Replace the food types tagged on an item")
def set_item_food_types(
    item_id: str,
    payload: ItemTagsUpdate,
    grant: AccessGrant = Depends(can(Action.update, Resource.item)),
    verifier: OwnershipVerifier = Depends(get_ownership_verifier),
    items: ItemRepository = Depends(get_item_repository),
    categories: CategoryRepository = Depends(get_category_repository),
    food_types: FoodTypeRepository = Depends(get_food_type_repository),
):
    verifier.require(grant, Resource.item, item_id, must_exist=True)

    # Order-preserving dedupe
    wanted = list(dict.fromkeys(payload.food_type_ids))

    # Tags may only come from the item's own business
    business_id = item_business_id(item_id, items, categories)
    allowed = set(food_types.ids_for_business(business_id))
    foreign = [fid for fid in wanted if fid not in allowed]
    if foreign:
        raise ValidationFailed(f"Unknown food type for this business: {', '.join(foreign)}")

    food_types.set_item_tags(item_id, wanted)
    logger.info(f"Item {item_id} tagged with {len(wanted)} food types")

    rows = food_types.find_by_ids(wanted)
    return {"success": True, "data": [FoodTypeRead(**r).model_dump() for r in rows]}
