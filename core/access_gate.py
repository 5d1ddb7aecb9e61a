# core/access_gate.py

from dataclasses import dataclass
from typing import Union

from core.errors import PermissionDenied, SelfActionForbidden
from core.logging_config import logger
from core.permissions import PermissionMatrix
from models.enums import Action, Decision, Resource, Role
from models.principal import Principal


@dataclass(frozen=True)
class AccessGrant:
    """A non-deny decision, handed to route handlers by `can()`."""

    principal: Principal
    decision: Decision

    @property
    def requires_ownership(self) -> bool:
        return self.decision is Decision.allow_if_owner


class AccessGate:
    """
    Request-time authorization over an injected PermissionMatrix.

    `authorize` never raises. An `allow_if_owner` decision obliges the caller
    to run the ownership verifier before touching the record, and to report a
    failed check exactly like a missing record.
    """

    def __init__(self, matrix: PermissionMatrix):
        self.matrix = matrix

    def authorize(
        self,
        principal: Principal,
        action: Union[Action, str],
        resource: Union[Resource, str],
    ) -> Decision:
        if self.matrix.has_permission(principal.role, action, resource, is_own=False):
            return Decision.allow
        if self.matrix.has_permission(principal.role, action, resource, is_own=True):
            return Decision.allow_if_owner
        return Decision.deny

    def require(
        self,
        principal: Principal,
        action: Union[Action, str],
        resource: Union[Resource, str],
    ) -> Decision:
        """authorize(), raising PermissionDenied on deny."""
        decision = self.authorize(principal, action, resource)
        if decision is Decision.deny:
            logger.info(
                f"Denied {action} on {resource} for profile {principal.profile_id} ({principal.role})"
            )
            raise PermissionDenied(f"You do not have permission to {action} this {resource}")
        return decision

    # -----------------------------------------------------
    # Role-tier escape hatch (bypasses the matrix)
    # -----------------------------------------------------
    @staticmethod
    def require_role(principal: Principal, *allowed_roles: Union[Role, str]) -> Principal:
        allowed = {str(r) for r in allowed_roles}
        if str(principal.role) not in allowed:
            raise PermissionDenied("You do not have the required role for this action")
        return principal

    # -----------------------------------------------------
    # Self-protection for user-management endpoints
    # -----------------------------------------------------
    @staticmethod
    def ensure_not_self(principal: Principal, target_profile_id: str, operation: str):
        if target_profile_id == principal.profile_id:
            raise SelfActionForbidden(f"Cannot {operation} your own account")
