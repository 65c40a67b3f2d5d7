"""
In-Memory Repositories

Development and test storage. Each store serializes writes with an
asyncio.Lock so conditional updates behave like single database statements.
Entities are copied on the way in and out; callers never hold live records.
"""

import asyncio
from decimal import Decimal
from typing import Generic

import structlog

from carecore.errors import NotFoundError, StaleWriteError
from carecore.models import CarePlan, CarePlanStatus, ProgressNote, ServiceAuthorization, TaskInstance, utcnow
from carecore.storage.base import (
    AuthorizationRepository,
    CarePlanFilters,
    CarePlanRepository,
    ProgressNoteRepository,
    T,
    TaskFilters,
    TaskInstanceRepository,
)

logger = structlog.get_logger(__name__)


class _InMemoryStore(Generic[T]):
    """Shared get/create/update behavior for the in-memory repositories."""

    entity_name = "entity"

    def __init__(self):
        self._records: dict[str, T] = {}
        self._lock = asyncio.Lock()

    async def get(self, id: str) -> T | None:
        record = self._records.get(id)
        return record.model_copy(deep=True) if record else None

    async def create(self, entity: T) -> T:
        async with self._lock:
            self._records[entity.id] = entity.model_copy(deep=True)
        return entity.model_copy(deep=True)

    async def update(self, entity: T, expected_version: int) -> T:
        async with self._lock:
            return self._write(entity, expected_version)

    def _write(self, entity: T, expected_version: int) -> T:
        """Version-checked write; caller must hold the lock."""
        current = self._records.get(entity.id)
        if current is None:
            raise NotFoundError(f"{self.entity_name} not found", self.entity_name, entity.id)
        if current.version != expected_version:
            raise StaleWriteError(self.entity_name, entity.id, expected_version, current.version)

        stored = entity.model_copy(
            deep=True,
            update={"version": current.version + 1, "updated_at": utcnow()},
        )
        self._records[entity.id] = stored
        return stored.model_copy(deep=True)

    def _values(self) -> list[T]:
        return [r.model_copy(deep=True) for r in self._records.values()]


class InMemoryCarePlanRepository(_InMemoryStore[CarePlan], CarePlanRepository):
    entity_name = "CarePlan"

    async def search(self, filters: CarePlanFilters) -> list[CarePlan]:
        plans = self._values()

        if not filters.include_deleted:
            plans = [p for p in plans if not p.is_deleted]
        if filters.organization_id:
            plans = [p for p in plans if p.organization_id == filters.organization_id]
        if filters.client_id:
            plans = [p for p in plans if p.client_id == filters.client_id]
        if filters.coordinator_id:
            plans = [p for p in plans if p.coordinator_id == filters.coordinator_id]
        if filters.status:
            plans = [p for p in plans if p.status in filters.status]
        if filters.plan_type:
            plans = [p for p in plans if p.plan_type in filters.plan_type]
        if filters.compliance_status:
            plans = [p for p in plans if p.compliance_status in filters.compliance_status]
        if filters.query:
            q = filters.query.lower()
            plans = [p for p in plans if q in p.name.lower() or q in p.plan_number.lower()]

        return sorted(plans, key=lambda p: p.created_at, reverse=True)

    async def get_active_for_client(self, client_id: str) -> CarePlan | None:
        for plan in self._records.values():
            if plan.client_id == client_id and plan.status == CarePlanStatus.ACTIVE and not plan.is_deleted:
                return plan.model_copy(deep=True)
        return None

    async def activate_exclusive(
        self,
        plan: CarePlan,
        expected_version: int,
        updated_by: str,
    ) -> tuple[CarePlan, CarePlan | None]:
        async with self._lock:
            # Nothing is written unless the plan being activated is current
            current = self._records.get(plan.id)
            if current is None:
                raise NotFoundError("CarePlan not found", self.entity_name, plan.id)
            if current.version != expected_version:
                raise StaleWriteError(self.entity_name, plan.id, expected_version, current.version)

            expired = None
            for other in list(self._records.values()):
                if (
                    other.id != plan.id
                    and other.client_id == plan.client_id
                    and other.status == CarePlanStatus.ACTIVE
                    and not other.is_deleted
                ):
                    expired = self._write(
                        other.model_copy(update={
                            "status": CarePlanStatus.EXPIRED,
                            "updated_by": updated_by,
                        }),
                        other.version,
                    )

            activated = self._write(
                plan.model_copy(update={
                    "status": CarePlanStatus.ACTIVE,
                    "updated_by": updated_by,
                }),
                expected_version,
            )
            return activated, expired


class InMemoryTaskInstanceRepository(_InMemoryStore[TaskInstance], TaskInstanceRepository):
    entity_name = "TaskInstance"

    async def search(self, filters: TaskFilters) -> list[TaskInstance]:
        tasks = self._values()

        if filters.organization_id:
            tasks = [t for t in tasks if t.organization_id == filters.organization_id]
        if filters.care_plan_id:
            tasks = [t for t in tasks if t.care_plan_id == filters.care_plan_id]
        if filters.client_id:
            tasks = [t for t in tasks if t.client_id == filters.client_id]
        if filters.visit_id:
            tasks = [t for t in tasks if t.visit_id == filters.visit_id]
        if filters.assigned_caregiver_id:
            tasks = [t for t in tasks if t.assigned_caregiver_id == filters.assigned_caregiver_id]
        if filters.status:
            tasks = [t for t in tasks if t.status in filters.status]
        if filters.category:
            tasks = [t for t in tasks if t.category in filters.category]
        if filters.scheduled_date_from:
            tasks = [t for t in tasks if t.scheduled_date >= filters.scheduled_date_from]
        if filters.scheduled_date_to:
            tasks = [t for t in tasks if t.scheduled_date <= filters.scheduled_date_to]
        if filters.requires_signature is not None:
            tasks = [t for t in tasks if t.required_signature == filters.requires_signature]

        return sorted(tasks, key=lambda t: (t.scheduled_date, t.scheduled_time or ""))


class InMemoryAuthorizationRepository(_InMemoryStore[ServiceAuthorization], AuthorizationRepository):
    entity_name = "ServiceAuthorization"

    async def list_for_client(self, client_id: str) -> list[ServiceAuthorization]:
        return [
            a for a in self._values()
            if a.client_id == client_id and not a.is_deleted
        ]

    async def deduct_units(
        self,
        authorization_id: str,
        amount: Decimal,
        updated_by: str | None = None,
    ) -> ServiceAuthorization | None:
        async with self._lock:
            current = self._records.get(authorization_id)
            if current is None:
                raise NotFoundError("Service authorization not found", self.entity_name, authorization_id)

            # Condition evaluated at write time, whatever the caller read earlier
            if current.units_remaining < amount:
                return None

            return self._write(
                current.model_copy(update={
                    "units_used": current.units_used + amount,
                    "units_remaining": current.units_remaining - amount,
                    "updated_by": updated_by,
                }),
                current.version,
            )


class InMemoryProgressNoteRepository(_InMemoryStore[ProgressNote], ProgressNoteRepository):
    entity_name = "ProgressNote"

    async def list_by_care_plan(self, care_plan_id: str) -> list[ProgressNote]:
        notes = [n for n in self._values() if n.care_plan_id == care_plan_id]
        return sorted(notes, key=lambda n: n.note_date, reverse=True)
