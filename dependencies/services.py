# dependencies/services.py

"""
FastAPI providers for the core services.

Everything is built per request from a single Supabase client, except the
permission matrix, which is built once at startup and kept on app.state.
Tests swap collaborators with app.dependency_overrides.
"""

from fastapi import Depends, Request
from supabase import Client

from core.access_gate import AccessGate
from core.cascade import CascadeDeletion
from core.config import settings
from core.errors import MenuApiError
from core.identity import IdentityResolver
from core.identity_provider import SupabaseIdentityProvider
from core.media_host import SupabaseStorageMediaHost
from core.ownership import OwnershipVerifier
from core.permissions import PermissionMatrix
from core.repositories import (
    BusinessRepository,
    CategoryRepository,
    FoodTypeRepository,
    ItemRepository,
    ProfileRepository,
)
from core.supabase_client import get_supabase_client
from core.supabase_helpers import RowStore


# ============================================================
# Collaborators
# ============================================================
def get_client() -> Client:
    client = get_supabase_client()
    if client is None:
        raise MenuApiError("Supabase client not configured")
    return client


def get_row_store(client: Client = Depends(get_client)) -> RowStore:
    return RowStore(client)


def get_identity_provider(client: Client = Depends(get_client)) -> SupabaseIdentityProvider:
    return SupabaseIdentityProvider(client)


def get_media_host(client: Client = Depends(get_client)) -> SupabaseStorageMediaHost:
    return SupabaseStorageMediaHost(client)


# ============================================================
# Authorization
# ============================================================
def get_permission_matrix(request: Request) -> PermissionMatrix:
    return request.app.state.permission_matrix


def get_access_gate(matrix: PermissionMatrix = Depends(get_permission_matrix)) -> AccessGate:
    return AccessGate(matrix)


# ============================================================
# Repositories
# ============================================================
def get_profile_repository(store: RowStore = Depends(get_row_store)) -> ProfileRepository:
    return ProfileRepository(store)


def get_business_repository(store: RowStore = Depends(get_row_store)) -> BusinessRepository:
    return BusinessRepository(store)


def get_category_repository(store: RowStore = Depends(get_row_store)) -> CategoryRepository:
    return CategoryRepository(store)


def get_item_repository(store: RowStore = Depends(get_row_store)) -> ItemRepository:
    return ItemRepository(store)


def get_food_type_repository(store: RowStore = Depends(get_row_store)) -> FoodTypeRepository:
    return FoodTypeRepository(store)


# ============================================================
# Core services
# ============================================================
def get_ownership_verifier(
    businesses: BusinessRepository = Depends(get_business_repository),
    categories: CategoryRepository = Depends(get_category_repository),
    items: ItemRepository = Depends(get_item_repository),
    food_types: FoodTypeRepository = Depends(get_food_type_repository),
) -> OwnershipVerifier:
    return OwnershipVerifier(businesses, categories, items, food_types)


def get_identity_resolver(
    identity_provider=Depends(get_identity_provider),
    profiles: ProfileRepository = Depends(get_profile_repository),
) -> IdentityResolver:
    return IdentityResolver(identity_provider, profiles)


def get_cascade(
    profiles: ProfileRepository = Depends(get_profile_repository),
    businesses: BusinessRepository = Depends(get_business_repository),
    categories: CategoryRepository = Depends(get_category_repository),
    items: ItemRepository = Depends(get_item_repository),
    food_types: FoodTypeRepository = Depends(get_food_type_repository),
    identity_provider=Depends(get_identity_provider),
    media_host=Depends(get_media_host),
) -> CascadeDeletion:
    return CascadeDeletion(
        profiles,
        businesses,
        categories,
        items,
        food_types,
        identity_provider,
        media_host,
        media_buckets=settings.MEDIA_BUCKETS,
    )
