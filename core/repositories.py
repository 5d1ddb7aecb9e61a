# core/repositories.py

from typing import Dict, List, Optional, Sequence

from core.supabase_helpers import Row, RowStore
from core.utils import escape_like, sanitize, utc_now_iso


# =================================================================
# PROFILES: public.profiles (auth_user_id is the back-reference to
# the Supabase Auth user; the auth user never points at the profile)
# =================================================================
class ProfileRepository:
    table = "profiles"
    columns = "id, auth_user_id, email, full_name, avatar_url, role, created_at, updated_at"

    def __init__(self, store: RowStore):
        self.store = store

    def find_by_id(self, profile_id: str) -> Optional[Row]:
        return self.store.select_one(self.table, {"id": profile_id}, columns=self.columns)

    def find_by_auth_user_id(self, auth_user_id: str) -> Optional[Row]:
        return self.store.select_one(
            self.table, {"auth_user_id": auth_user_id}, columns=self.columns
        )

    def find_unlinked_by_email(self, email: str) -> Optional[Row]:
        # Case-insensitive: legacy rows keep whatever case was typed at signup
        address = (email or "").strip()
        if not address:
            return None
        return self.store.select_one(
            self.table,
            columns=self.columns,
            null_columns=["auth_user_id"],
            ilike_filters={"email": escape_like(address)},
        )

    def link_identity(self, profile_id: str, auth_user_id: str) -> Optional[Row]:
        """
        Adopt a legacy profile. Only writes while auth_user_id is still
        NULL, so a repeat (or a concurrent request) matches nothing.
        """
        return self.store.update(
            self.table,
            {"id": profile_id},
            {"auth_user_id": auth_user_id, "updated_at": utc_now_iso()},
            null_columns=["auth_user_id"],
        )

    def provision(
        self,
        auth_user_id: str,
        email: str,
        full_name: Optional[str] = None,
        avatar_url: Optional[str] = None,
        role: Optional[str] = None,
        *,
        overwrite: bool = False,
    ) -> Optional[Row]:
        data = {
            "auth_user_id": auth_user_id,
            "email": email,
            "full_name": full_name,
            "avatar_url": avatar_url,
        }
        if role is not None:
            data["role"] = role
        return self.store.upsert(
            self.table,
            data,
            on_conflict="auth_user_id",
            ignore_duplicates=not overwrite,
        )

    def list_all(self) -> List[Row]:
        return self.store.select(self.table, order_by="created_at", descending=True)

    def update(self, profile_id: str, updates: Dict) -> Optional[Row]:
        data = sanitize(updates)
        data["updated_at"] = utc_now_iso()
        return self.store.update(self.table, {"id": profile_id}, data)

    def update_role(self, profile_id: str, role: str) -> Optional[Row]:
        return self.store.update(
            self.table, {"id": profile_id}, {"role": role, "updated_at": utc_now_iso()}
        )

    def count(self, role: Optional[str] = None) -> int:
        return self.store.count(self.table, {"role": role} if role else None)

    def delete(self, profile_id: str) -> List[Row]:
        return self.store.delete(self.table, {"id": profile_id})


# =================================================================
# BUSINESSES
# =================================================================
class BusinessRepository:
    table = "businesses"

    def __init__(self, store: RowStore):
        self.store = store

    def create(self, owner_id: str, name: str, slug: str, business_type: str,
               description: Optional[str] = None, is_published: bool = False) -> Optional[Row]:
        return self.store.insert(self.table, {
            "owner_id": owner_id,
            "name": name,
            "slug": slug,
            "business_type": business_type,
            "description": description or None,
            "is_published": is_published,
        })

    def find_all(self) -> List[Row]:
        return self.store.select(self.table, order_by="created_at", descending=True)

    def find_by_owner(self, owner_id: str) -> List[Row]:
        return self.store.select(
            self.table, {"owner_id": owner_id}, order_by="created_at", descending=True
        )

    def find_by_id(self, business_id: str) -> Optional[Row]:
        return self.store.select_one(self.table, {"id": business_id})

    def find_published_by_slug(self, slug: str) -> Optional[Row]:
        return self.store.select_one(
            self.table, {"slug": slug, "is_active": True, "is_published": True}
        )

    def owner_of(self, business_id: str) -> Optional[str]:
        row = self.store.select_one(self.table, {"id": business_id}, columns="id, owner_id")
        return row["owner_id"] if row else None

    def owner_ids(self) -> List[str]:
        return [r["owner_id"] for r in self.store.select(self.table, columns="owner_id")]

    def slug_exists(self, slug: str) -> bool:
        return self.store.select_one(self.table, {"slug": slug}, columns="id") is not None

    def update(self, business_id: str, updates: Dict) -> Optional[Row]:
        data = dict(updates)
        data["updated_at"] = utc_now_iso()
        return self.store.update(self.table, {"id": business_id}, data)

    def count(self, active_only: bool = False) -> int:
        return self.store.count(self.table, {"is_active": True} if active_only else None)

    def delete_by_id(self, business_id: str) -> List[Row]:
        return self.store.delete(self.table, {"id": business_id})


# =================================================================
# CATEGORIES (belong to exactly one business)
# =================================================================
class CategoryRepository:
    table = "categories"

    def __init__(self, store: RowStore):
        self.store = store

    def create(self, business_id: str, name: str, sort_order: int) -> Optional[Row]:
        return self.store.insert(
            self.table, {"business_id": business_id, "name": name, "sort_order": sort_order}
        )

    def find_by_business(self, business_id: str) -> List[Row]:
        return self.store.select(self.table, {"business_id": business_id}, order_by="sort_order")

    def find_by_id(self, category_id: str) -> Optional[Row]:
        return self.store.select_one(self.table, {"id": category_id})

    def business_of(self, category_id: str) -> Optional[str]:
        row = self.store.select_one(self.table, {"id": category_id}, columns="id, business_id")
        return row["business_id"] if row else None

    def ids_for_business(self, business_id: str) -> List[str]:
        rows = self.store.select(self.table, {"business_id": business_id}, columns="id")
        return [r["id"] for r in rows]

    def max_sort_order(self, business_id: str) -> int:
        rows = self.store.select(
            self.table, {"business_id": business_id},
            columns="sort_order", order_by="sort_order", descending=True, limit=1,
        )
        return rows[0]["sort_order"] if rows else -1

    def update(self, category_id: str, updates: Dict) -> Optional[Row]:
        data = sanitize(updates)
        data["updated_at"] = utc_now_iso()
        return self.store.update(self.table, {"id": category_id}, data)

    def update_sort_order(self, category_id: str, sort_order: int) -> Optional[Row]:
        return self.store.update(self.table, {"id": category_id}, {"sort_order": sort_order})

    def count(self) -> int:
        return self.store.count(self.table)

    def delete_by_id(self, category_id: str) -> List[Row]:
        return self.store.delete(self.table, {"id": category_id})

    def delete_by_business(self, business_id: str) -> List[Row]:
        return self.store.delete(self.table, {"business_id": business_id})


# =================================================================
# ITEMS (belong to exactly one category)
# =================================================================
class ItemRepository:
    table = "items"

    def __init__(self, store: RowStore):
        self.store = store

    def create(self, category_id: str, data: Dict, sort_order: int) -> Optional[Row]:
        row = sanitize(data)
        row.update({"category_id": category_id, "sort_order": sort_order})
        return self.store.insert(self.table, row)

    def find_by_category(self, category_id: str) -> List[Row]:
        return self.store.select(self.table, {"category_id": category_id}, order_by="sort_order")

    def category_of(self, item_id: str) -> Optional[str]:
        row = self.store.select_one(self.table, {"id": item_id}, columns="id, category_id")
        return row["category_id"] if row else None

    def ids_for_categories(self, category_ids: Sequence[str]) -> List[str]:
        if not category_ids:
            return []
        rows = self.store.select(
            self.table, in_filters={"category_id": list(category_ids)}, columns="id"
        )
        return [r["id"] for r in rows]

    def find_available_by_categories(self, category_ids: Sequence[str]) -> List[Row]:
        if not category_ids:
            return []
        return self.store.select(
            self.table,
            {"is_available": True},
            in_filters={"category_id": list(category_ids)},
            order_by="sort_order",
        )

    def max_sort_order(self, category_id: str) -> int:
        rows = self.store.select(
            self.table, {"category_id": category_id},
            columns="sort_order", order_by="sort_order", descending=True, limit=1,
        )
        return rows[0]["sort_order"] if rows else -1

    def update(self, item_id: str, updates: Dict) -> Optional[Row]:
        data = sanitize(updates)
        data["updated_at"] = utc_now_iso()
        return self.store.update(self.table, {"id": item_id}, data)

    def update_sort_order(self, item_id: str, sort_order: int) -> Optional[Row]:
        return self.store.update(self.table, {"id": item_id}, {"sort_order": sort_order})

    def count(self) -> int:
        return self.store.count(self.table)

    def delete_by_id(self, item_id: str) -> List[Row]:
        return self.store.delete(self.table, {"id": item_id})

    def delete_by_category_ids(self, category_ids: Sequence[str]) -> List[Row]:
        if not category_ids:
            return []
        return self.store.delete(self.table, in_filters={"category_id": list(category_ids)})


# =================================================================
# FOOD TYPES: per-business tags (Vegan, Halal, Spicy...) and the
# item_food_types join table that attaches them to items
# =================================================================
class FoodTypeRepository:
    table = "food_types"
    tags_table = "item_food_types"

    def __init__(self, store: RowStore):
        self.store = store

    def create(self, business_id: str, name: str, icon: Optional[str] = None) -> Optional[Row]:
        return self.store.insert(
            self.table, {"business_id": business_id, "name": name, "icon": icon or None}
        )

    def find_by_business(self, business_id: str) -> List[Row]:
        return self.store.select(self.table, {"business_id": business_id}, order_by="name")

    def find_by_id(self, food_type_id: str) -> Optional[Row]:
        return self.store.select_one(self.table, {"id": food_type_id})

    def find_by_ids(self, food_type_ids: Sequence[str]) -> List[Row]:
        if not food_type_ids:
            return []
        return self.store.select(
            self.table, in_filters={"id": list(food_type_ids)}, order_by="name"
        )

    def business_of(self, food_type_id: str) -> Optional[str]:
        row = self.store.select_one(self.table, {"id": food_type_id}, columns="id, business_id")
        return row["business_id"] if row else None

    def ids_for_business(self, business_id: str) -> List[str]:
        rows = self.store.select(self.table, {"business_id": business_id}, columns="id")
        return [r["id"] for r in rows]

    def update(self, food_type_id: str, updates: Dict) -> Optional[Row]:
        return self.store.update(self.table, {"id": food_type_id}, sanitize(updates))

    def delete_by_id(self, food_type_id: str) -> List[Row]:
        self.store.delete(self.tags_table, {"food_type_id": food_type_id})
        return self.store.delete(self.table, {"id": food_type_id})

    def delete_by_business(self, business_id: str) -> List[Row]:
        return self.store.delete(self.table, {"business_id": business_id})

    # -------------------------------------------------------------
    # Item tags
    # -------------------------------------------------------------
    def tags_for_items(self, item_ids: Sequence[str]) -> List[Row]:
        if not item_ids:
            return []
        return self.store.select(
            self.tags_table, in_filters={"item_id": list(item_ids)}, columns="item_id, food_type_id"
        )

    def tag_ids_for_item(self, item_id: str) -> List[str]:
        return [t["food_type_id"] for t in self.tags_for_items([item_id])]

    def set_item_tags(self, item_id: str, food_type_ids: Sequence[str]) -> None:
        """Replace every tag on the item."""
        self.store.delete(self.tags_table, {"item_id": item_id})
        for food_type_id in food_type_ids:
            self.store.insert(self.tags_table, {"item_id": item_id, "food_type_id": food_type_id})

    def delete_tags_for_items(self, item_ids: Sequence[str]) -> List[Row]:
        if not item_ids:
            return []
        return self.store.delete(self.tags_table, in_filters={"item_id": list(item_ids)})

    def delete_tags_for_food_types(self, food_type_ids: Sequence[str]) -> List[Row]:
        if not food_type_ids:
            return []
        return self.store.delete(self.tags_table, in_filters={"food_type_id": list(food_type_ids)})
