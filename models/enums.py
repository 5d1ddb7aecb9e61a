from enum import Enum


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string
    and provides a .list() method for UI dropdowns.
    """

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]


# -----------------------------------------------------
# ROLE
# -----------------------------------------------------
class Role(BaseStrEnum):
    """A principal holds exactly one role at a time."""

    user = "user"
    admin = "admin"
    super_admin = "super_admin"


# -----------------------------------------------------
# RESOURCE
# -----------------------------------------------------
class Resource(BaseStrEnum):
    """Protected entity classes."""

    business = "business"
    category = "category"
    item = "item"
    food_type = "food_type"
    profile = "profile"
    user = "user"
    admin_dashboard = "admin_dashboard"


# -----------------------------------------------------
# ACTION
# -----------------------------------------------------
class Action(BaseStrEnum):
    """`manage` implies every other action on the same resource."""

    create = "create"
    read = "read"
    update = "update"
    delete = "delete"
    manage = "manage"


# -----------------------------------------------------
# ACCESS DECISION
# -----------------------------------------------------
class Decision(BaseStrEnum):
    allow = "allow"
    allow_if_owner = "allow_if_owner"
    deny = "deny"


# -----------------------------------------------------
# BUSINESS TYPE
# -----------------------------------------------------
class BusinessType(BaseStrEnum):
    restaurant = "restaurant"
    gaming_gear = "gaming_gear"
