# tests/test_auth.py

"""
Tests for authentication endpoints.
"""

from fastapi.testclient import TestClient


def test_me_requires_token(client: TestClient):
    response = client.get("/auth/me")

    assert response.status_code == 401
    assert response.json() == {"success": False, "detail": "Unauthorized: No token provided"}


def test_me_rejects_invalid_token(client: TestClient):
    response = client.get("/auth/me", headers={"Authorization": "Bearer garbage"})

    assert response.status_code == 401
    assert response.json()["success"] is False


def test_me_returns_principal(client: TestClient, make_user):
    profile, headers = make_user(role="admin", email="boss@example.com", full_name="Boss")

    response = client.get("/auth/me", headers=headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["profileId"] == profile["id"]
    assert data["role"] == "admin"
    assert data["user"]["id"] == profile["auth_user_id"]
    assert data["user"]["email"] == "boss@example.com"
    assert data["user"]["full_name"] == "Boss"


def test_first_request_provisions_profile(client: TestClient, identity_provider, store):
    _, token = identity_provider.register(
        email="fresh@example.com", metadata={"user_name": "fresh", "avatar": "a.png"}
    )

    response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    assert response.json()["data"]["role"] == "user"
    assert response.json()["data"]["user"]["full_name"] == "fresh"
    assert len(store.rows("profiles")) == 1


def test_profile_init_failure_is_500(client: TestClient, identity_provider, store):
    _, token = identity_provider.register(email="broken@example.com")
    store.fail_on[("select", "profiles")] = "connection refused"

    response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 500
    assert response.json()["detail"] == "Unable to initialize your profile right now."


def test_update_me_strips_protected_fields(client: TestClient, make_user, store):
    profile, headers = make_user(role="user")

    response = client.put(
        "/auth/me",
        json={"full_name": "New Name", "role": "super_admin", "auth_user_id": "hijack"},
        headers=headers,
    )

    assert response.status_code == 200
    saved = store.rows("profiles")[0]
    assert saved["full_name"] == "New Name"
    assert saved["role"] == "user"
    assert saved["auth_user_id"] == profile["auth_user_id"]


def test_update_me_with_only_protected_fields(client: TestClient, make_user):
    _, headers = make_user()

    response = client.put("/auth/me", json={"role": "admin"}, headers=headers)

    assert response.status_code == 400
