# tests/test_access_gate.py

import pytest

from core.access_gate import AccessGate, AccessGrant
from core.errors import PermissionDenied, SelfActionForbidden
from core.permissions import build_default_matrix
from models.enums import Action, Decision, Resource, Role
from models.principal import Principal


def principal(role=Role.user, profile_id="p-1"):
    return Principal(identity_id=f"auth-{profile_id}", profile_id=profile_id, role=role)


@pytest.fixture
def gate():
    return AccessGate(build_default_matrix())


def test_user_gets_ownership_scoped_decision(gate):
    assert gate.authorize(principal(), Action.update, Resource.business) is Decision.allow_if_owner
    assert gate.authorize(principal(), Action.delete, Resource.item) is Decision.allow_if_owner


def test_user_global_create_is_allow(gate):
    assert gate.authorize(principal(), Action.create, Resource.business) is Decision.allow


def test_admin_manage_allows_all_actions(gate):
    admin = principal(Role.admin)
    for action in (Action.read, Action.update, Action.delete):
        assert gate.authorize(admin, action, Resource.business) is Decision.allow


def test_deny_for_unlisted_resource(gate):
    assert gate.authorize(principal(), Action.read, Resource.admin_dashboard) is Decision.deny


def test_require_raises_on_deny(gate):
    with pytest.raises(PermissionDenied) as exc:
        gate.require(principal(), Action.delete, Resource.user)
    assert exc.value.status_code == 403
    assert "delete" in exc.value.detail


def test_grant_requires_ownership_flag():
    assert AccessGrant(principal(), Decision.allow_if_owner).requires_ownership
    assert not AccessGrant(principal(), Decision.allow).requires_ownership


def test_require_role():
    admin = principal(Role.admin)
    assert AccessGate.require_role(admin, Role.admin, Role.super_admin) is admin
    with pytest.raises(PermissionDenied):
        AccessGate.require_role(principal(), Role.admin, Role.super_admin)


def test_ensure_not_self():
    actor = principal(Role.super_admin, profile_id="me")
    AccessGate.ensure_not_self(actor, "someone-else", "delete")
    with pytest.raises(SelfActionForbidden) as exc:
        AccessGate.ensure_not_self(actor, "me", "delete")
    assert exc.value.status_code == 400
