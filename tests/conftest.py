# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.

The Supabase-backed collaborators are replaced by in-memory doubles with the
same interface, so routes and services run end to end without a network.
"""

import copy
import itertools
import re
import uuid
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from core.errors import IdentityProviderError, InvalidCredential, MediaHostError, RowStoreError
from core.media_host import ObjectRef
from core.rate_limiter import reset_rate_limits
from core.repositories import (
    BusinessRepository,
    CategoryRepository,
    FoodTypeRepository,
    ItemRepository,
    ProfileRepository,
)
from dependencies.services import get_identity_provider, get_media_host, get_row_store
from main import create_app
from models.principal import ExternalIdentity


# =================================================================
# Row store double
# =================================================================
TABLE_DEFAULTS = {
    "profiles": {"role": "user", "auth_user_id": None, "full_name": None, "avatar_url": None},
    "businesses": {"is_active": True, "is_published": False, "description": None, "logo_url": None},
    "categories": {"sort_order": 0},
    "items": {"is_available": True, "sort_order": 0, "description": None, "image_url": None},
    "food_types": {"icon": None},
    "item_food_types": {},
}


class InMemoryRowStore:
    """
    Same surface as core.supabase_helpers.RowStore.

    Failures are injected per (operation, table):
        store.fail_on[("delete", "items")] = "connection reset"
    """

    def __init__(self):
        self.tables = {name: [] for name in TABLE_DEFAULTS}
        self.fail_on = {}
        self.calls = []
        self._clock = itertools.count(1)

    # -------------------------------------------------------------
    # helpers
    # -------------------------------------------------------------
    def _check(self, operation, table):
        self.calls.append((operation, table))
        reason = self.fail_on.get((operation, table))
        if reason:
            raise RowStoreError(operation, table, Exception(reason))

    @staticmethod
    def _like(pattern):
        """ILIKE pattern → regex: % and _ are wildcards, backslash escapes."""
        parts, chars = [], iter(pattern)
        for ch in chars:
            if ch == "\\":
                parts.append(re.escape(next(chars, "")))
            elif ch == "%":
                parts.append(".*")
            elif ch == "_":
                parts.append(".")
            else:
                parts.append(re.escape(ch))
        return re.compile("".join(parts), re.IGNORECASE | re.DOTALL)

    @classmethod
    def _matches(cls, row, filters=None, in_filters=None, null_columns=None, ilike_filters=None):
        for key, val in (filters or {}).items():
            if row.get(key) != val:
                return False
        for key, pattern in (ilike_filters or {}).items():
            if not cls._like(pattern).fullmatch(str(row.get(key) or "")):
                return False
        for key, values in (in_filters or {}).items():
            if row.get(key) not in list(values):
                return False
        for column in null_columns or ():
            if row.get(column) is not None:
                return False
        return True

    def add(self, table, **fields):
        """Seed a row directly (no failure injection)."""
        row = dict(TABLE_DEFAULTS[table])
        row.setdefault("id", str(uuid.uuid4()))
        row["created_at"] = f"2025-01-01T00:00:{next(self._clock):02d}+00:00"
        row.update(fields)
        self.tables[table].append(row)
        return copy.deepcopy(row)

    def rows(self, table):
        return copy.deepcopy(self.tables[table])

    # -------------------------------------------------------------
    # RowStore interface
    # -------------------------------------------------------------
    def select(self, table, filters=None, *, columns="*", in_filters=None,
               null_columns=None, ilike_filters=None, order_by=None, descending=False, limit=None):
        self._check("select", table)
        rows = [
            r for r in self.tables[table]
            if self._matches(r, filters, in_filters, null_columns, ilike_filters)
        ]
        if order_by:
            rows = sorted(rows, key=lambda r: r.get(order_by) or 0, reverse=descending)
        if limit is not None:
            rows = rows[:limit]
        return copy.deepcopy(rows)

    def select_one(self, table, filters=None, *, columns="*", null_columns=None, ilike_filters=None):
        rows = self.select(
            table, filters, columns=columns, null_columns=null_columns,
            ilike_filters=ilike_filters, limit=1,
        )
        return rows[0] if rows else None

    def count(self, table, filters=None, *, in_filters=None):
        self._check("count", table)
        return len([r for r in self.tables[table] if self._matches(r, filters, in_filters)])

    def insert(self, table, data):
        self._check("insert", table)
        return self.add(table, **dict(data))

    def upsert(self, table, data, *, on_conflict, ignore_duplicates=False):
        self._check("upsert", table)
        existing = [r for r in self.tables[table] if r.get(on_conflict) == data.get(on_conflict)]
        if existing:
            if ignore_duplicates:
                return None
            existing[0].update(dict(data))
            return copy.deepcopy(existing[0])
        return self.add(table, **dict(data))

    def update(self, table, filters, data, *, null_columns=None):
        if not filters:
            raise ValueError("Refusing to update without filters")
        self._check("update", table)
        matched = [r for r in self.tables[table] if self._matches(r, filters, null_columns=null_columns)]
        for row in matched:
            row.update(dict(data))
        return copy.deepcopy(matched[0]) if matched else None

    def delete(self, table, filters=None, *, in_filters=None):
        if not filters and not in_filters:
            raise ValueError("Refusing to delete without filters")
        self._check("delete", table)
        removed = [r for r in self.tables[table] if self._matches(r, filters, in_filters)]
        self.tables[table] = [r for r in self.tables[table] if r not in removed]
        return copy.deepcopy(removed)


# =================================================================
# Identity provider double
# =================================================================
class FakeIdentityProvider:
    def __init__(self):
        self.identities = {}
        self.tokens = {}
        self.deleted = []
        self.fail_delete = None
        self.fail_list = None

    def register(self, email=None, metadata=None, identity_id=None, token=None):
        identity = ExternalIdentity(
            id=identity_id or str(uuid.uuid4()),
            email=email,
            user_metadata=metadata or {},
        )
        self.identities[identity.id] = identity
        token = token or f"token-{identity.id}"
        self.tokens[token] = identity
        return identity, token

    def verify_token(self, token):
        identity = self.tokens.get(token)
        if identity is None or identity.id not in self.identities:
            raise InvalidCredential()
        return identity

    def create_identity(self, email, password, *, email_confirm=True):
        identity, _ = self.register(email=email)
        return identity

    def delete_identity(self, identity_id):
        if self.fail_delete:
            raise IdentityProviderError("delete_user", Exception(self.fail_delete))
        self.identities.pop(identity_id, None)
        self.deleted.append(identity_id)

    def list_identities(self, email=None):
        if self.fail_list:
            raise IdentityProviderError("list_users", Exception(self.fail_list))
        users = list(self.identities.values())
        if email is None:
            return users
        return [u for u in users if (u.email or "").lower() == email.lower()]


# =================================================================
# Media host double
# =================================================================
class FakeMediaHost:
    def __init__(self):
        self.objects = {}
        self.fail_list = set()
        self.fail_delete = set()

    def put(self, bucket, path):
        self.objects.setdefault(bucket, []).append(path)

    def list(self, bucket, folder):
        if bucket in self.fail_list:
            raise MediaHostError("list", bucket, Exception("bucket unavailable"))
        prefix = f"{folder}/"
        return [ObjectRef(bucket, p) for p in self.objects.get(bucket, []) if p.startswith(prefix)]

    def delete_many(self, bucket, refs):
        if bucket in self.fail_delete:
            raise MediaHostError("remove", bucket, Exception("permission denied"))
        paths = {ref.path for ref in refs}
        before = len(self.objects.get(bucket, []))
        self.objects[bucket] = [p for p in self.objects.get(bucket, []) if p not in paths]
        return before - len(self.objects[bucket])


# =================================================================
# Fixtures
# =================================================================
@pytest.fixture
def store():
    return InMemoryRowStore()


@pytest.fixture
def identity_provider():
    return FakeIdentityProvider()


@pytest.fixture
def media_host():
    return FakeMediaHost()


@pytest.fixture
def repos(store):
    return {
        "profiles": ProfileRepository(store),
        "businesses": BusinessRepository(store),
        "categories": CategoryRepository(store),
        "items": ItemRepository(store),
        "food_types": FoodTypeRepository(store),
    }


@pytest.fixture(scope="function")
def app(store, identity_provider, media_host):
    """Create a test FastAPI application wired to the in-memory doubles."""
    app = create_app()
    app.dependency_overrides[get_row_store] = lambda: store
    app.dependency_overrides[get_identity_provider] = lambda: identity_provider
    app.dependency_overrides[get_media_host] = lambda: media_host
    return app


@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(store, identity_provider):
    """
    Seed a linked profile + auth identity and return
    (profile, auth headers).
    """

    def _make(role="user", email=None, full_name=None):
        email = email or f"{uuid.uuid4().hex[:8]}@example.com"
        identity, token = identity_provider.register(email=email)
        profile = store.add(
            "profiles",
            auth_user_id=identity.id,
            email=email,
            full_name=full_name,
            role=role,
        )
        return profile, {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
def menu(store):
    """Seed business → categories → items for an owner profile id."""

    def _seed(owner_id, name="Cafe", categories=1, items_per_category=1):
        business = store.add(
            "businesses",
            owner_id=owner_id,
            name=name,
            slug=f"{name.lower()}-{uuid.uuid4().hex[:6]}",
            business_type="restaurant",
        )
        cats, its = [], []
        for c in range(categories):
            category = store.add("categories", business_id=business["id"], name=f"Cat {c}", sort_order=c)
            cats.append(category)
            for i in range(items_per_category):
                its.append(store.add(
                    "items", category_id=category["id"], name=f"Item {c}.{i}", price=5.0, sort_order=i
                ))
        return business, cats, its

    return _seed


@pytest.fixture(autouse=True)
def reset_limits():
    """Reset the rate limiter before each test."""
    reset_rate_limits()
    yield
    reset_rate_limits()
