"""
Base Domain Models

Shared entity fields: identity, audit stamps, optimistic version, soft delete.
"""

from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


def new_id() -> str:
    return str(uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditedEntity(BaseModel):
    """Base class for persisted entities."""

    model_config = ConfigDict(from_attributes=True, validate_assignment=True)

    id: str = Field(default_factory=new_id)
    version: int = Field(default=1, description="Optimistic concurrency counter")

    created_at: datetime = Field(default_factory=utcnow)
    created_by: str | None = None
    updated_at: datetime = Field(default_factory=utcnow)
    updated_by: str | None = None

    deleted_at: datetime | None = None
    deleted_by: str | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
