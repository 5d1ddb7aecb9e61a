# core/permissions.py

from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Mapping, Union

from models.enums import Action, Resource, Role


OWN_SUFFIX = ":own"


# ============================================
# CENTRALIZED ROLE → RESOURCE → PERMISSIONS MAP
# ============================================
# A permission is an action ("read") or an ownership-scoped action
# ("read:own"). "manage" implies every action on that resource.
# A resource missing from a role's map means deny-all.
DEFAULT_PERMISSIONS: Dict[str, Dict[str, list]] = {

    # =====================================================
    # USER: business owner, works on their own menus only
    # =====================================================
    "user": {
        "business": ["create", "read:own", "update:own", "delete:own"],
        "category": ["create:own", "read:own", "update:own", "delete:own"],
        "item":     ["create:own", "read:own", "update:own", "delete:own"],
        "food_type": ["create:own", "read:own", "update:own", "delete:own"],
        "profile":  ["read:own", "update:own"],
        # no user management, no admin dashboard
    },

    # =====================================================
    # ADMIN: platform admin
    # =====================================================
    "admin": {
        "business":        ["create", "read", "update", "delete", "manage"],
        "category":        ["create", "read", "update", "delete", "manage"],
        "item":            ["create", "read", "update", "delete", "manage"],
        "food_type":       ["create", "read", "update", "delete", "manage"],
        "profile":         ["create", "read", "update", "delete"],
        "user":            ["create", "read", "update", "delete", "manage"],
        "admin_dashboard": ["read", "manage"],
    },

    # =====================================================
    # SUPER ADMIN: superset of admin
    # =====================================================
    "super_admin": {
        "business":        ["manage"],
        "category":        ["manage"],
        "item":            ["manage"],
        "food_type":       ["manage"],
        "profile":         ["manage"],
        "user":            ["manage"],
        "admin_dashboard": ["manage"],
    },
}


# Role hierarchy (higher index = more privileges)
ROLE_HIERARCHY = (Role.user, Role.admin, Role.super_admin)


# Fields callers may never write through update payloads
PROTECTED_FIELDS: Mapping[str, FrozenSet[str]] = MappingProxyType({
    "profile":  frozenset({"id", "auth_user_id", "role", "created_at"}),
    "business": frozenset({"id", "owner_id", "created_at"}),
    "user":     frozenset({"id", "role", "created_at"}),
})


def _validate_permission(permission: str) -> str:
    action, _, scope = permission.partition(":")
    if action not in Action.list():
        raise ValueError(f"Unknown action in permission '{permission}'")
    if scope and f":{scope}" != OWN_SUFFIX:
        raise ValueError(f"Unknown scope in permission '{permission}'")
    if action == Action.manage.value and scope:
        raise ValueError("'manage' cannot be ownership-scoped")
    return permission


class PermissionMatrix:
    """
    Immutable role → resource → permission-set table.

    Built once at startup and injected into the access gate; lookups never
    raise for unknown roles or resources, they deny.
    """

    def __init__(self, table: Mapping[str, Mapping[str, Iterable[str]]]):
        frozen = {}
        for role, resources in table.items():
            role_key = Role(role).value
            frozen[role_key] = MappingProxyType({
                Resource(resource).value: frozenset(
                    _validate_permission(p) for p in permissions
                )
                for resource, permissions in resources.items()
            })
        self._table = MappingProxyType(frozen)

    def permissions_for(
        self, role: Union[Role, str], resource: Union[Resource, str]
    ) -> FrozenSet[str]:
        resources = self._table.get(str(role))
        if resources is None:
            return frozenset()
        return resources.get(str(resource), frozenset())

    def has_permission(
        self,
        role: Union[Role, str],
        action: Union[Action, str],
        resource: Union[Resource, str],
        is_own: bool = False,
    ) -> bool:
        permissions = self.permissions_for(role, resource)
        if not permissions:
            return False

        action = str(action)

        # Global permission, or manage (implies all actions)
        if action in permissions or Action.manage.value in permissions:
            return True

        # Ownership-scoped permission
        return is_own and f"{action}{OWN_SUFFIX}" in permissions


def build_default_matrix() -> PermissionMatrix:
    return PermissionMatrix(DEFAULT_PERMISSIONS)


def is_role_at_least(role: Union[Role, str], required: Union[Role, str]) -> bool:
    try:
        return ROLE_HIERARCHY.index(Role(str(role))) >= ROLE_HIERARCHY.index(Role(str(required)))
    except ValueError:
        return False


def strip_protected_fields(resource: Union[Resource, str], payload: Mapping) -> dict:
    protected = PROTECTED_FIELDS.get(str(resource), frozenset())
    return {k: v for k, v in payload.items() if k not in protected}
