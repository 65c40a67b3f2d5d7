"""
Permission Policy

Injected capability check consulted before every read or mutation.
The default policy maps roles to a fixed permission set.
"""

from typing import Protocol

import structlog

from carecore.auth.models import Permission, UserContext, UserRole
from carecore.errors import PermissionDeniedError

logger = structlog.get_logger(__name__)


class PermissionPolicy(Protocol):
    """Capability lookup supplied by the hosting application."""

    def has_permission(self, context: UserContext, permission: Permission) -> bool:
        ...


_READ_PLANS_AND_TASKS = {
    Permission.CARE_PLANS_READ,
    Permission.TASKS_READ,
    Permission.PROGRESS_NOTES_READ,
}

DEFAULT_ROLE_PERMISSIONS: dict[UserRole, frozenset[Permission]] = {
    # Admins - everything
    UserRole.ADMIN: frozenset(Permission),
    UserRole.SYSTEM: frozenset(Permission),

    # Coordinators - own the plan lifecycle
    UserRole.COORDINATOR: frozenset(_READ_PLANS_AND_TASKS | {
        Permission.CARE_PLANS_CREATE,
        Permission.CARE_PLANS_UPDATE,
        Permission.CARE_PLANS_ACTIVATE,
        Permission.CARE_PLANS_DELETE,
        Permission.TASKS_CREATE,
        Permission.TASKS_UPDATE,
        Permission.PROGRESS_NOTES_CREATE,
        Permission.ANALYTICS_READ,
        Permission.AUTHORIZATIONS_READ,
    }),

    # Nurses - clinical documentation and supervision
    UserRole.NURSE: frozenset(_READ_PLANS_AND_TASKS | {
        Permission.CARE_PLANS_UPDATE,
        Permission.TASKS_CREATE,
        Permission.TASKS_UPDATE,
        Permission.TASKS_COMPLETE,
        Permission.TASKS_SKIP,
        Permission.PROGRESS_NOTES_CREATE,
        Permission.AUTHORIZATIONS_DEDUCT,
    }),

    # Caregivers - perform and document tasks
    UserRole.CAREGIVER: frozenset(_READ_PLANS_AND_TASKS | {
        Permission.TASKS_UPDATE,
        Permission.TASKS_COMPLETE,
        Permission.TASKS_SKIP,
        Permission.PROGRESS_NOTES_CREATE,
        Permission.AUTHORIZATIONS_DEDUCT,
    }),

    # Billing - authorizations
    UserRole.BILLING: frozenset({
        Permission.CARE_PLANS_READ,
        Permission.TASKS_READ,
        Permission.AUTHORIZATIONS_READ,
        Permission.AUTHORIZATIONS_DEDUCT,
    }),

    # Analysts - read only
    UserRole.ANALYST: frozenset({
        Permission.CARE_PLANS_READ,
        Permission.TASKS_READ,
        Permission.ANALYTICS_READ,
    }),
}


class RolePermissionPolicy:
    """
    Role-based permission policy.

    Example:
        policy = RolePermissionPolicy()
        policy.grant(UserRole.NURSE, Permission.CARE_PLANS_ACTIVATE)
    """

    def __init__(self, role_permissions: dict[UserRole, frozenset[Permission]] | None = None):
        source = role_permissions or DEFAULT_ROLE_PERMISSIONS
        self._permissions = {role: set(perms) for role, perms in source.items()}

    def grant(self, role: UserRole, permission: Permission) -> None:
        self._permissions.setdefault(role, set()).add(permission)

    def revoke(self, role: UserRole, permission: Permission) -> None:
        self._permissions.get(role, set()).discard(permission)

    def has_permission(self, context: UserContext, permission: Permission) -> bool:
        return any(
            permission in self._permissions.get(role, ())
            for role in context.roles
        )


def require_permission(
    policy: PermissionPolicy,
    context: UserContext,
    permission: Permission,
    message: str | None = None,
) -> None:
    """Raise PermissionDeniedError unless the caller holds `permission`."""
    if policy.has_permission(context, permission):
        return

    logger.warning(
        "Permission denied",
        user_id=context.user_id,
        organization_id=context.organization_id,
        permission=permission.value,
    )
    raise PermissionDeniedError(
        message or f"Insufficient permissions: {permission.value}",
        {"permission": permission.value},
    )


def require_same_organization(context: UserContext, organization_id: str, entity: str) -> None:
    """Cross-organization access is never silently allowed."""
    if organization_id != context.organization_id:
        raise PermissionDeniedError(f"Cannot access {entity} from another organization")
