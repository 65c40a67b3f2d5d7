"""Base Repository - Abstract data access pattern"""
from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Generic, TypeVar

from pydantic import BaseModel

from carecore.models import (
    AuditedEntity,
    CarePlan,
    CarePlanStatus,
    CarePlanType,
    ComplianceStatus,
    ProgressNote,
    ServiceAuthorization,
    TaskCategory,
    TaskInstance,
    TaskStatus,
)

T = TypeVar("T", bound=AuditedEntity)


class CarePlanFilters(BaseModel):
    organization_id: str | None = None
    client_id: str | None = None
    coordinator_id: str | None = None
    query: str | None = None
    status: list[CarePlanStatus] | None = None
    plan_type: list[CarePlanType] | None = None
    compliance_status: list[ComplianceStatus] | None = None
    include_deleted: bool = False


class TaskFilters(BaseModel):
    organization_id: str | None = None
    care_plan_id: str | None = None
    client_id: str | None = None
    visit_id: str | None = None
    assigned_caregiver_id: str | None = None
    status: list[TaskStatus] | None = None
    category: list[TaskCategory] | None = None
    scheduled_date_from: date | None = None
    scheduled_date_to: date | None = None
    requires_signature: bool | None = None


class BaseRepository(ABC, Generic[T]):
    """
    Base repository pattern for data access.

    Every mutating write is conditioned on the version the caller read;
    a mismatch raises StaleWriteError instead of overwriting.
    """

    entity_name = "entity"

    @abstractmethod
    async def get(self, id: str) -> T | None:
        """Get entity by ID."""
        pass

    @abstractmethod
    async def create(self, entity: T) -> T:
        """Persist a new entity."""
        pass

    @abstractmethod
    async def update(self, entity: T, expected_version: int) -> T:
        """Write `entity` if the stored version equals `expected_version`; bumps version."""
        pass

    async def exists(self, id: str) -> bool:
        """Check if entity exists."""
        return await self.get(id) is not None


class CarePlanRepository(BaseRepository[CarePlan]):
    entity_name = "CarePlan"

    @abstractmethod
    async def search(self, filters: CarePlanFilters) -> list[CarePlan]:
        pass

    @abstractmethod
    async def get_active_for_client(self, client_id: str) -> CarePlan | None:
        pass

    @abstractmethod
    async def activate_exclusive(
        self,
        plan: CarePlan,
        expected_version: int,
        updated_by: str,
    ) -> tuple[CarePlan, CarePlan | None]:
        """
        Activate `plan` and expire the client's other active plan in one step.

        Returns:
            Tuple of (activated plan, expired plan or None)
        """
        pass

    async def list_by_client(self, client_id: str) -> list[CarePlan]:
        return await self.search(CarePlanFilters(client_id=client_id))


class TaskInstanceRepository(BaseRepository[TaskInstance]):
    entity_name = "TaskInstance"

    @abstractmethod
    async def search(self, filters: TaskFilters) -> list[TaskInstance]:
        pass

    async def list_by_visit(self, visit_id: str) -> list[TaskInstance]:
        return await self.search(TaskFilters(visit_id=visit_id))


class AuthorizationRepository(BaseRepository[ServiceAuthorization]):
    entity_name = "ServiceAuthorization"

    @abstractmethod
    async def list_for_client(self, client_id: str) -> list[ServiceAuthorization]:
        pass

    @abstractmethod
    async def deduct_units(
        self,
        authorization_id: str,
        amount: Decimal,
        updated_by: str | None = None,
    ) -> ServiceAuthorization | None:
        """
        Conditional write: apply only if units_remaining >= amount at write time.

        Returns:
            Updated authorization, or None when the condition failed
        """
        pass


class ProgressNoteRepository(BaseRepository[ProgressNote]):
    entity_name = "ProgressNote"

    @abstractmethod
    async def list_by_care_plan(self, care_plan_id: str) -> list[ProgressNote]:
        pass
