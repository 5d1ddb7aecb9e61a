# core/errors.py

from typing import Optional


# ============================================================
# Base error: carries an HTTP status and a client-safe detail
# ============================================================
class MenuApiError(Exception):
    status_code = 500
    default_detail = "Internal server error"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


# ============================================================
# Identity layer
# ============================================================
class AuthError(MenuApiError):
    status_code = 401
    default_detail = "Unauthorized"


class MissingCredential(AuthError):
    default_detail = "Unauthorized: No token provided"


class InvalidCredential(AuthError):
    default_detail = "Your session is invalid or expired. Please sign in again."


class ProfileInitFailed(AuthError):
    # No caller can proceed without a profile id, so this is a server fault
    status_code = 500
    default_detail = "Unable to initialize your profile right now."


# ============================================================
# Gate layer
# ============================================================
class PermissionDenied(MenuApiError):
    status_code = 403
    default_detail = "Permission denied"


class SelfActionForbidden(PermissionDenied):
    status_code = 400
    default_detail = "You cannot perform this action on your own account."


class NotFound(MenuApiError):
    status_code = 404
    default_detail = "Resource not found"


class ValidationFailed(MenuApiError):
    status_code = 400
    default_detail = "Invalid request"


class RateLimited(MenuApiError):
    status_code = 429
    default_detail = "Too many requests, please try again later"

    def __init__(self, detail: Optional[str] = None, headers: Optional[dict] = None):
        super().__init__(detail)
        self.headers = headers or {}


# ============================================================
# Collaborator failures
# ============================================================
class RowStoreError(MenuApiError):
    def __init__(self, operation: str, table: str, cause: Exception):
        self.operation = operation
        self.table = table
        self.reason = extract_supabase_error(cause)
        self.status_code = classify_supabase_error(self.reason)
        super().__init__(f"{operation} on {table} failed")


class IdentityProviderError(MenuApiError):
    def __init__(self, operation: str, cause: Exception):
        self.operation = operation
        self.reason = extract_supabase_error(cause)
        super().__init__(f"Identity provider {operation} failed")


class MediaHostError(MenuApiError):
    def __init__(self, operation: str, bucket: str, cause: Exception):
        self.operation = operation
        self.bucket = bucket
        self.reason = extract_supabase_error(cause)
        super().__init__(f"Storage {operation} on {bucket} failed")


# ============================================================
# Orchestrator
# ============================================================
class CascadeStepFailed(MenuApiError):
    """
    A fatal step of the user deletion cascade failed.

    `step` and `resource_id` are for operator logs only; the client sees the
    generic detail.
    """

    default_detail = "Failed to delete user"

    def __init__(self, step: str, resource_id: str, reason: str = ""):
        self.step = step
        self.resource_id = resource_id
        self.reason = reason
        super().__init__()

    def __str__(self):
        return f"cascade step '{self.step}' failed for {self.resource_id}: {self.reason}"


# ============================================================
# Supabase error helpers
# ============================================================
def extract_supabase_error(error: Exception) -> str:
    """
    Safely extract readable details from Supabase Python client errors.
    Handles:
      • PostgREST errors
      • GoTrue (Auth) errors
      • Storage errors
      • Generic Python exceptions
    """

    # Case 1: Supabase Auth / GoTrue / PostgREST errors
    message = getattr(error, "message", None)
    if message:
        return str(message)

    # Case 2: Supabase errors with args (common)
    if getattr(error, "args", None):
        return str(error.args[0])

    # Case 3: Plain string fallback
    return str(error) or "Unknown Supabase error"


def classify_supabase_error(detail: str) -> int:
    """Map common PostgREST failures onto client status codes."""
    lowered = detail.lower()
    if "duplicate" in lowered or "unique" in lowered:
        return 409
    if "foreign key" in lowered:
        return 400
    return 500
