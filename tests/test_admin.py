# tests/test_admin.py

"""
Tests for admin endpoints: dashboard, business moderation and user management.
"""

import pytest
from fastapi.testclient import TestClient

from core.errors import ValidationFailed
from core.repositories import ProfileRepository
from routers.admin import ensure_not_last_super_admin


# -----------------------------------------------------
# Dashboard / businesses
# -----------------------------------------------------
def test_stats_requires_dashboard_permission(client: TestClient, make_user):
    _, headers = make_user(role="user")

    response = client.get("/admin/stats", headers=headers)

    assert response.status_code == 403
    assert response.json()["success"] is False


def test_stats_counts(client: TestClient, make_user, menu, store):
    admin, headers = make_user(role="admin")
    business, _, _ = menu(admin["id"], categories=2, items_per_category=3)
    store.add("businesses", owner_id=admin["id"], name="Closed", slug="closed",
              business_type="gaming_gear", is_active=False)

    data = client.get("/admin/stats", headers=headers).json()["data"]

    assert data == {
        "total_users": 1,
        "total_businesses": 2,
        "active_businesses": 1,
        "total_categories": 2,
        "total_items": 6,
    }


def test_admin_business_list_is_role_gated(client: TestClient, make_user, menu):
    menu("someone")
    _, user_headers = make_user(role="user")
    _, admin_headers = make_user(role="admin")

    assert client.get("/admin/businesses", headers=user_headers).status_code == 403
    assert len(client.get("/admin/businesses", headers=admin_headers).json()["data"]) == 1


def test_toggle_business(client: TestClient, make_user, menu, store):
    _, headers = make_user(role="admin")
    business, _, _ = menu("someone")

    response = client.patch(
        f"/admin/businesses/{business['id']}/toggle", json={"is_active": False}, headers=headers
    )

    assert response.status_code == 200
    assert store.rows("businesses")[0]["is_active"] is False


def test_admin_delete_missing_business(client: TestClient, make_user):
    _, headers = make_user(role="admin")

    assert client.delete("/admin/businesses/nope", headers=headers).status_code == 404


def test_admin_delete_business_tree(client: TestClient, make_user, menu, store):
    _, headers = make_user(role="admin")
    business, _, _ = menu("someone", categories=2)

    assert client.delete(f"/admin/businesses/{business['id']}", headers=headers).status_code == 200
    assert store.rows("categories") == []


# -----------------------------------------------------
# Users
# -----------------------------------------------------
def test_list_users_includes_business_count(client: TestClient, make_user, menu):
    admin, headers = make_user(role="admin")
    owner, _ = make_user(role="user", email="owner@example.com")
    menu(owner["id"])
    menu(owner["id"], name="Second")

    response = client.get("/admin/users", headers=headers)

    assert response.status_code == 200
    by_id = {u["id"]: u for u in response.json()["data"]}
    assert by_id[owner["id"]]["business_count"] == 2
    assert by_id[owner["id"]]["email"] == "owner@example.com"
    assert by_id[admin["id"]]["business_count"] == 0


def test_list_users_survives_identity_provider_outage(client: TestClient, make_user, identity_provider):
    _, headers = make_user(role="admin")
    identity_provider.fail_list = "auth down"

    response = client.get("/admin/users", headers=headers)

    assert response.status_code == 200
    assert len(response.json()["data"]) == 1


def test_user_cannot_list_users(client: TestClient, make_user):
    _, headers = make_user(role="user")

    assert client.get("/admin/users", headers=headers).status_code == 403


def test_self_demotion_is_rejected(client: TestClient, make_user, store):
    admin, headers = make_user(role="super_admin")

    response = client.patch(f"/admin/users/{admin['id']}/role", json={"role": "user"}, headers=headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "Cannot change the role of your own account"
    assert store.rows("profiles")[0]["role"] == "super_admin"


def test_self_deletion_is_rejected(client: TestClient, make_user, store):
    admin, headers = make_user(role="admin")

    response = client.delete(f"/admin/users/{admin['id']}", headers=headers)

    assert response.status_code == 400
    assert len(store.rows("profiles")) == 1


def test_only_super_admin_grants_admin(client: TestClient, make_user):
    _, admin_headers = make_user(role="admin")
    _, super_headers = make_user(role="super_admin")
    target, _ = make_user(role="user")

    denied = client.patch(f"/admin/users/{target['id']}/role", json={"role": "admin"}, headers=admin_headers)
    granted = client.patch(f"/admin/users/{target['id']}/role", json={"role": "admin"}, headers=super_headers)

    assert denied.status_code == 403
    assert granted.status_code == 200
    assert granted.json()["data"]["role"] == "admin"


def test_invalid_role_is_rejected(client: TestClient, make_user):
    _, headers = make_user(role="super_admin")
    target, _ = make_user()

    response = client.patch(f"/admin/users/{target['id']}/role", json={"role": "owner"}, headers=headers)

    assert response.status_code == 422


def test_last_super_admin_guard(store):
    profiles = ProfileRepository(store)
    only = store.add("profiles", role="super_admin", email="root@example.com")

    with pytest.raises(ValidationFailed):
        ensure_not_last_super_admin(profiles, only, "demote")

    store.add("profiles", role="super_admin", email="second@example.com")
    ensure_not_last_super_admin(profiles, only, "demote")


def test_delete_user_runs_cascade(client: TestClient, make_user, menu, store, identity_provider):
    _, headers = make_user(role="admin")
    target, _ = make_user(role="user")
    menu(target["id"], categories=2, items_per_category=1)

    response = client.delete(f"/admin/users/{target['id']}", headers=headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["businesses_deleted"] == 1
    assert data["categories_deleted"] == 2
    assert data["items_deleted"] == 2
    assert data["identity_deleted"] is True
    assert target["auth_user_id"] in identity_provider.deleted
    assert target["id"] not in [p["id"] for p in store.rows("profiles")]


def test_delete_missing_user(client: TestClient, make_user):
    _, headers = make_user(role="admin")

    assert client.delete("/admin/users/00000000-0000-0000-0000-000000000000", headers=headers).status_code == 404


def test_cascade_failure_returns_generic_error(client: TestClient, make_user, menu, store):
    _, headers = make_user(role="admin")
    target, _ = make_user(role="user")
    business, _, _ = menu(target["id"])
    store.fail_on[("delete", "items")] = "statement timeout"

    response = client.delete(f"/admin/users/{target['id']}", headers=headers)

    assert response.status_code == 500
    assert response.json() == {"success": False, "detail": "Failed to delete user"}
    assert "delete_businesses" not in response.text
    assert business["id"] not in response.text


def test_admin_cannot_delete_super_admin(client: TestClient, make_user, store):
    _, headers = make_user(role="admin")
    target, _ = make_user(role="super_admin")

    assert client.delete(f"/admin/users/{target['id']}", headers=headers).status_code == 403
    assert len(store.rows("profiles")) == 2


# -----------------------------------------------------
# Invite
# -----------------------------------------------------
def test_invite_creates_identity_and_profile(client: TestClient, make_user, store, identity_provider):
    _, headers = make_user(role="admin")

    response = client.post("/admin/users/invite", json={"email": "Chef@Example.com"}, headers=headers)

    assert response.status_code == 201
    profile = response.json()["data"]
    assert profile["email"] == "chef@example.com"
    assert profile["role"] == "user"
    assert profile["auth_user_id"] in identity_provider.identities


def test_invite_existing_email_is_rejected(client: TestClient, make_user):
    _, headers = make_user(role="admin")
    make_user(email="taken@example.com")

    response = client.post("/admin/users/invite", json={"email": "taken@example.com"}, headers=headers)

    assert response.status_code == 400


def test_invite_rolls_back_identity_when_profile_fails(client: TestClient, make_user, store, identity_provider):
    _, headers = make_user(role="admin")
    before = set(identity_provider.identities)
    store.fail_on[("upsert", "profiles")] = "connection refused"

    response = client.post("/admin/users/invite", json={"email": "ghost@example.com"}, headers=headers)

    assert response.status_code == 500
    assert set(identity_provider.identities) == before
    assert len(identity_provider.deleted) == 1


def test_admin_cannot_invite_admin(client: TestClient, make_user):
    _, headers = make_user(role="admin")

    response = client.post(
        "/admin/users/invite", json={"email": "boss@example.com", "role": "admin"}, headers=headers
    )

    assert response.status_code == 403
