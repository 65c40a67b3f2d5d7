"""
CareCore Auth Package

Caller context, the closed permission enumeration and the injected
permission policy.
"""

from carecore.auth.models import Permission, UserContext, UserRole
from carecore.auth.policy import (
    DEFAULT_ROLE_PERMISSIONS,
    PermissionPolicy,
    RolePermissionPolicy,
    require_permission,
    require_same_organization,
)

__all__ = [
    "Permission",
    "UserContext",
    "UserRole",
    "DEFAULT_ROLE_PERMISSIONS",
    "PermissionPolicy",
    "RolePermissionPolicy",
    "require_permission",
    "require_same_organization",
]
