"""
Auth Domain Models

Caller identity and the closed set of capabilities the core checks.
"""

from enum import Enum

from pydantic import BaseModel, Field


class UserRole(str, Enum):
    """Home care agency roles."""
    ADMIN = "admin"
    COORDINATOR = "coordinator"
    NURSE = "nurse"
    CAREGIVER = "caregiver"
    BILLING = "billing"
    ANALYST = "analyst"
    SYSTEM = "system"


class Permission(str, Enum):
    """Capabilities, grouped by domain."""

    # Care plans
    CARE_PLANS_CREATE = "care-plans:create"
    CARE_PLANS_READ = "care-plans:read"
    CARE_PLANS_UPDATE = "care-plans:update"
    CARE_PLANS_UPDATE_ARCHIVED = "care-plans:update:archived"
    CARE_PLANS_ACTIVATE = "care-plans:activate"
    CARE_PLANS_DELETE = "care-plans:delete"

    # Tasks
    TASKS_CREATE = "tasks:create"
    TASKS_READ = "tasks:read"
    TASKS_UPDATE = "tasks:update"
    TASKS_COMPLETE = "tasks:complete"
    TASKS_SKIP = "tasks:skip"

    # Progress notes
    PROGRESS_NOTES_CREATE = "progress-notes:create"
    PROGRESS_NOTES_READ = "progress-notes:read"

    # Analytics
    ANALYTICS_READ = "analytics:read"

    # Service authorizations
    AUTHORIZATIONS_READ = "authorizations:read"
    AUTHORIZATIONS_DEDUCT = "authorizations:deduct"


class UserContext(BaseModel):
    """
    Identity and organization attached to every operation.

    Used for audit stamps (created_by / updated_by) and organization scoping.
    """

    user_id: str
    organization_id: str
    roles: list[UserRole] = Field(default_factory=list)
    display_name: str | None = None

    @property
    def primary_role(self) -> UserRole | None:
        return self.roles[0] if self.roles else None
