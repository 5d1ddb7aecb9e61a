# -------------------------
# Enums
# -------------------------
from .enums import (
    Role,
    Resource,
    Action,
    Decision,
    BusinessType,
)

# -------------------------
# Identity / Principal
# -------------------------
from .principal import (
    ExternalIdentity,
    Principal,
)

# -------------------------
# Profiles & Admin User Management
# -------------------------
from .user import (
    ProfileRead,
    ProfileUpdate,
    AdminUserRead,
    RoleUpdate,
    UserInvite,
)

# -------------------------
# Business Models
# -------------------------
from .business import (
    BusinessCreate,
    BusinessUpdate,
    BusinessToggle,
    BusinessRead,
)

# -------------------------
# Menu Models
# -------------------------
from .category import (
    CategoryCreate,
    CategoryUpdate,
    CategoryRead,
    SortEntry,
    ReorderRequest,
)
from .item import (
    ItemCreate,
    ItemUpdate,
    ItemRead,
)
