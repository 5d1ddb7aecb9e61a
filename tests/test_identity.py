# tests/test_identity.py

"""
Tests for bearer token → principal resolution.
"""

import pytest

from core.errors import InvalidCredential, MissingCredential, ProfileInitFailed
from core.identity import IdentityResolver, first_present, resolve_role, NAME_METADATA_KEYS
from models.enums import Role


@pytest.fixture
def resolver(identity_provider, repos):
    return IdentityResolver(identity_provider, repos["profiles"])


def test_missing_token(resolver):
    with pytest.raises(MissingCredential):
        resolver.resolve(None)
    with pytest.raises(MissingCredential):
        resolver.resolve("   ")


def test_invalid_token(resolver):
    with pytest.raises(InvalidCredential):
        resolver.resolve("not-a-token")


def test_existing_profile_is_used(resolver, identity_provider, store):
    identity, token = identity_provider.register(email="owner@example.com")
    profile = store.add("profiles", auth_user_id=identity.id, email="owner@example.com", role="admin")

    principal = resolver.resolve(token)

    assert principal.profile_id == profile["id"]
    assert principal.identity_id == identity.id
    assert principal.role is Role.admin


def test_first_sight_provisions_profile(resolver, identity_provider, store):
    identity, token = identity_provider.register(
        email="new@example.com",
        metadata={"name": "Second", "full_name": "First", "picture": "https://img/p.png"},
    )

    principal = resolver.resolve(token)

    profiles = store.rows("profiles")
    assert len(profiles) == 1
    assert profiles[0]["auth_user_id"] == identity.id
    assert principal.role is Role.user
    # full_name outranks name
    assert principal.display_name == "First"
    assert principal.avatar_url == "https://img/p.png"


def test_same_credential_twice_yields_same_profile(resolver, identity_provider, store):
    _, token = identity_provider.register(email="twice@example.com")

    first = resolver.resolve(token)
    second = resolver.resolve(token)

    assert first.profile_id == second.profile_id
    assert len(store.rows("profiles")) == 1


def test_legacy_profile_is_linked_once(resolver, identity_provider, store):
    legacy = store.add("profiles", email="legacy@example.com", auth_user_id=None, full_name="Legacy")
    identity, token = identity_provider.register(email="legacy@example.com")

    first = resolver.resolve(token)
    second = resolver.resolve(token)

    assert first.profile_id == legacy["id"] == second.profile_id
    rows = store.rows("profiles")
    assert len(rows) == 1
    assert rows[0]["auth_user_id"] == identity.id
    assert first.display_name == "Legacy"


def test_link_identity_is_conditional(repos, store):
    legacy = store.add("profiles", email="race@example.com", auth_user_id=None)
    profiles = repos["profiles"]

    assert profiles.link_identity(legacy["id"], "auth-a") is not None
    # Already linked, the second writer matches nothing
    assert profiles.link_identity(legacy["id"], "auth-b") is None
    assert store.rows("profiles")[0]["auth_user_id"] == "auth-a"


def test_stored_profile_fields_win_over_metadata(resolver, identity_provider, store):
    identity, token = identity_provider.register(
        email="x@example.com", metadata={"full_name": "From Provider", "avatar_url": "meta.png"}
    )
    store.add("profiles", auth_user_id=identity.id, email="x@example.com", full_name="Stored", avatar_url=None)

    principal = resolver.resolve(token)

    assert principal.display_name == "Stored"
    assert principal.avatar_url == "meta.png"


def test_row_store_failure_is_profile_init_failure(resolver, identity_provider, store):
    _, token = identity_provider.register(email="down@example.com")
    store.fail_on[("upsert", "profiles")] = "connection refused"

    with pytest.raises(ProfileInitFailed) as exc:
        resolver.resolve(token)
    assert exc.value.status_code == 500


def test_unknown_role_falls_back_to_user():
    assert resolve_role("owner") is Role.user
    assert resolve_role(None) is Role.user
    assert resolve_role("super_admin") is Role.super_admin


def test_first_present_skips_empty_values():
    assert first_present({"full_name": "", "name": "Ana"}, NAME_METADATA_KEYS) == "Ana"
    assert first_present({}, NAME_METADATA_KEYS) is None


def test_legacy_profile_email_matches_case_insensitively(resolver, identity_provider, store):
    legacy = store.add("profiles", email="Foo@X.com", auth_user_id=None)
    identity, token = identity_provider.register(email="foo@x.com")

    principal = resolver.resolve(token)

    assert principal.profile_id == legacy["id"]
    rows = store.rows("profiles")
    assert len(rows) == 1
    assert rows[0]["auth_user_id"] == identity.id


def test_email_wildcards_match_literally(repos, store):
    store.add("profiles", email="ab@example.com", auth_user_id=None)

    # "_" would match any single character if it were not escaped
    assert repos["profiles"].find_unlinked_by_email("a_@example.com") is None
    assert repos["profiles"].find_unlinked_by_email("%@example.com") is None
    assert repos["profiles"].find_unlinked_by_email("  AB@example.com ")["email"] == "ab@example.com"
