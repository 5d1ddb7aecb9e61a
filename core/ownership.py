# core/ownership.py

from typing import Callable, Dict, Iterable, Optional, Union

from core.errors import NotFound
from core.repositories import (
    BusinessRepository,
    CategoryRepository,
    FoodTypeRepository,
    ItemRepository,
)
from models.enums import Decision, Resource


NOT_FOUND_DETAILS = {
    Resource.business: "Business not found",
    Resource.category: "Category not found",
    Resource.item: "Item not found",
    Resource.food_type: "Food type not found",
}


class OwnershipVerifier:
    """
    Resolves a record to its root owner (a profile id) and compares.

        business  → owner_id
        category  → business → owner_id
        item      → category → business → owner_id
        food_type → business → owner_id

    A missing record and a record owned by someone else both come back as
    "not owned", and `require` reports both as the same NotFound.
    """

    def __init__(
        self,
        businesses: BusinessRepository,
        categories: CategoryRepository,
        items: ItemRepository,
        food_types: FoodTypeRepository,
    ):
        self.businesses = businesses
        self.categories = categories
        self.items = items
        self.food_types = food_types
        self._resolvers: Dict[Resource, Callable[[str], Optional[str]]] = {
            Resource.business: self.business_owner,
            Resource.category: self.category_owner,
            Resource.item: self.item_owner,
            Resource.food_type: self.food_type_owner,
        }

    # -----------------------------------------------------
    # Root-owner resolvers
    # -----------------------------------------------------
    def business_owner(self, business_id: str) -> Optional[str]:
        return self.businesses.owner_of(business_id)

    def category_owner(self, category_id: str) -> Optional[str]:
        business_id = self.categories.business_of(category_id)
        return self.business_owner(business_id) if business_id else None

    def item_owner(self, item_id: str) -> Optional[str]:
        category_id = self.items.category_of(item_id)
        return self.category_owner(category_id) if category_id else None

    def food_type_owner(self, food_type_id: str) -> Optional[str]:
        business_id = self.food_types.business_of(food_type_id)
        return self.business_owner(business_id) if business_id else None

    def owner_of(self, resource: Union[Resource, str], resource_id: str) -> Optional[str]:
        resolver = self._resolvers.get(Resource(str(resource)))
        if resolver is None:
            raise ValueError(f"No ownership chain for resource '{resource}'")
        return resolver(resource_id)

    # -----------------------------------------------------
    # Checks
    # -----------------------------------------------------
    def is_owner(self, resource: Union[Resource, str], resource_id: str, profile_id: str) -> bool:
        owner_id = self.owner_of(resource, resource_id)
        return owner_id is not None and str(owner_id) == str(profile_id)

    def exists(self, resource: Union[Resource, str], resource_id: str) -> bool:
        return self.owner_of(resource, resource_id) is not None

    def require(
        self,
        grant,
        resource: Union[Resource, str],
        resource_id: str,
        *,
        must_exist: bool = False,
    ) -> None:
        """
        Enforce an access grant for one record.
        `allow` passes untouched unless must_exist is set, in which case the
        record is looked up; `allow_if_owner` must own the record.
        Use must_exist for parents of new rows and for batch writes, where
        a global grant would otherwise reach a record that is not there.
        """
        if grant.decision is Decision.allow:
            if not must_exist or self.exists(resource, resource_id):
                return
        elif grant.decision is Decision.allow_if_owner and self.is_owner(
            resource, resource_id, grant.principal.profile_id
        ):
            return
        raise NotFound(NOT_FOUND_DETAILS.get(Resource(str(resource)), "Resource not found"))

    def require_all(
        self,
        grant,
        resource: Union[Resource, str],
        resource_ids: Iterable[str],
        *,
        must_exist: bool = False,
    ) -> None:
        for resource_id in resource_ids:
            self.require(grant, resource, resource_id, must_exist=must_exist)
