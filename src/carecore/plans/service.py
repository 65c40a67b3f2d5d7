"""
Care Plan Service

Owns the care plan lifecycle:

    DRAFT -> PENDING_APPROVAL -> ACTIVE -> {ON_HOLD, EXPIRED, DISCONTINUED, COMPLETED}

Activation is gated by the compliance engine and the readiness checks, and
keeps at most one ACTIVE plan per client through a single repository call.
"""

import secrets
from datetime import date, datetime, timedelta

import structlog
from pydantic import ValidationError as PydanticValidationError

from carecore.auth import Permission, PermissionPolicy, UserContext, require_permission, require_same_organization
from carecore.compliance import validate_activation
from carecore.config import get_settings
from carecore.errors import NotFoundError, PermissionDeniedError, StaleWriteError, ValidationError
from carecore.models import (
    CarePlan,
    CarePlanStatus,
    ComplianceResult,
    ComplianceStatus,
    CreateCarePlanInput,
    CreateTaskInstanceInput,
    FindingSeverity,
    TaskInstance,
    TemplateStatus,
    UpdateCarePlanInput,
    utcnow,
)
from carecore.plans.readiness import check_activation_readiness
from carecore.plans.templates import get_template_by_id
from carecore.scheduling import should_fire
from carecore.storage import CarePlanFilters, CarePlanRepository
from carecore.tasks import TaskService

logger = structlog.get_logger(__name__)


# =============================================================================
# Status transitions
# =============================================================================

# ACTIVE is only reachable through activate_care_plan
STATUS_TRANSITIONS: dict[CarePlanStatus, frozenset[CarePlanStatus]] = {
    CarePlanStatus.DRAFT: frozenset({CarePlanStatus.PENDING_APPROVAL, CarePlanStatus.DISCONTINUED}),
    CarePlanStatus.PENDING_APPROVAL: frozenset({CarePlanStatus.DRAFT, CarePlanStatus.DISCONTINUED}),
    CarePlanStatus.ACTIVE: frozenset({
        CarePlanStatus.ON_HOLD,
        CarePlanStatus.EXPIRED,
        CarePlanStatus.DISCONTINUED,
        CarePlanStatus.COMPLETED,
    }),
    CarePlanStatus.ON_HOLD: frozenset({
        CarePlanStatus.EXPIRED,
        CarePlanStatus.DISCONTINUED,
        CarePlanStatus.COMPLETED,
    }),
    CarePlanStatus.EXPIRED: frozenset(),
    CarePlanStatus.DISCONTINUED: frozenset(),
    CarePlanStatus.COMPLETED: frozenset(),
}

ACTIVATABLE_STATUSES = frozenset({
    CarePlanStatus.DRAFT,
    CarePlanStatus.PENDING_APPROVAL,
    CarePlanStatus.ON_HOLD,
})

_BASE36 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def _to_base36(value: int) -> str:
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits)) or "0"


def generate_plan_number(now: datetime | None = None) -> str:
    """CP-<base36 epoch millis>-<4 random base36 chars>."""
    millis = int((now or utcnow()).timestamp() * 1000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(4))
    return f"CP-{_to_base36(millis)}-{suffix}"


def compliance_status_for(result: ComplianceResult) -> ComplianceStatus:
    """Summarize the non-blocking findings left on a plan that may go live."""
    if not result.is_compliant:
        return ComplianceStatus.NON_COMPLIANT
    if any(f.severity == FindingSeverity.CRITICAL for f in result.errors):
        return ComplianceStatus.NON_COMPLIANT
    if any(f.severity == FindingSeverity.WARNING for f in result.warnings):
        return ComplianceStatus.PENDING_REVIEW
    return ComplianceStatus.COMPLIANT


def _check_date_range(effective: date | None, expiration: date | None) -> None:
    if effective and expiration and expiration <= effective:
        raise ValidationError(
            "Expiration date must be after effective date",
            ["Expiration date must be after effective date"],
        )


class CarePlanService:
    """
    Service for care plans.

    Features:
    - Create / read / update / soft delete with organization scoping
    - Compliance-gated activation with single-active-plan enforcement
    - Status transitions (submit, hold, discontinue, complete, expire)
    - Task generation for a visit from the plan's templates
    """

    def __init__(
        self,
        repository: CarePlanRepository,
        task_service: TaskService,
        permissions: PermissionPolicy,
    ):
        self.repository = repository
        self.task_service = task_service
        self.permissions = permissions

    # =========================================================================
    # CRUD
    # =========================================================================

    async def create_care_plan(self, input: CreateCarePlanInput, context: UserContext) -> CarePlan:
        """Create a DRAFT plan in the caller's organization."""
        require_permission(
            self.permissions, context, Permission.CARE_PLANS_CREATE,
            "Insufficient permissions to create care plans",
        )
        _check_date_range(input.effective_date, input.expiration_date)

        plan = CarePlan(
            **dict(input),
            plan_number=generate_plan_number(),
            organization_id=context.organization_id,
            status=CarePlanStatus.DRAFT,
            created_by=context.user_id,
            updated_by=context.user_id,
        )
        created = await self.repository.create(plan)

        logger.info(
            "Care plan created",
            care_plan_id=created.id,
            plan_number=created.plan_number,
            client_id=created.client_id,
        )
        return created

    async def create_care_plan_from_template(
        self,
        template_id: str,
        client_id: str,
        effective_date: date,
        context: UserContext,
        name: str | None = None,
    ) -> CarePlan:
        """Create a DRAFT plan prefilled from a library template; the caller becomes coordinator."""
        template = get_template_by_id(template_id)
        if template is None:
            raise NotFoundError("Care plan template not found", "CarePlanTemplate", template_id)

        return await self.create_care_plan(
            template.to_create_input(client_id, effective_date, name=name, coordinator_id=context.user_id),
            context,
        )

    async def get_care_plan_by_id(self, id: str, context: UserContext) -> CarePlan:
        require_permission(
            self.permissions, context, Permission.CARE_PLANS_READ,
            "Insufficient permissions to read care plans",
        )

        plan = await self.repository.get(id)
        if plan is None or plan.is_deleted:
            raise NotFoundError("Care plan not found", "CarePlan", id)
        require_same_organization(context, plan.organization_id, "care plan")
        return plan

    async def update_care_plan(
        self,
        id: str,
        input: UpdateCarePlanInput,
        context: UserContext,
        expected_version: int | None = None,
    ) -> CarePlan:
        """
        Apply a partial update.

        Args:
            id: Plan ID
            input: Fields to change; embedded lists replace the stored ones
            context: Caller
            expected_version: Version the caller edited; defaults to the current one

        Raises:
            PermissionDeniedError: plan is COMPLETED/DISCONTINUED and caller lacks the archived-update permission
            ValidationError: the merged plan is invalid, e.g. a required field set to None
            StaleWriteError: plan changed since `expected_version`
        """
        require_permission(
            self.permissions, context, Permission.CARE_PLANS_UPDATE,
            "Insufficient permissions to update care plans",
        )

        existing = await self.get_care_plan_by_id(id, context)

        if existing.is_closed and not self.permissions.has_permission(
            context, Permission.CARE_PLANS_UPDATE_ARCHIVED
        ):
            raise PermissionDeniedError("Cannot update completed or discontinued care plans")

        version = existing.version if expected_version is None else expected_version
        if version != existing.version:
            raise StaleWriteError("CarePlan", id, version, existing.version)

        changes = {name: getattr(input, name) for name in input.model_fields_set}
        _check_date_range(
            changes.get("effective_date", existing.effective_date),
            changes.get("expiration_date", existing.expiration_date),
        )

        try:
            candidate = CarePlan.model_validate(
                {**existing.model_dump(), **changes, "updated_by": context.user_id}
            )
        except PydanticValidationError as e:
            raise ValidationError(
                "Invalid care plan update",
                [f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()],
            ) from e

        updated = await self.repository.update(candidate, version)

        logger.info(
            "Care plan updated",
            care_plan_id=id,
            fields=sorted(changes),
            version=updated.version,
        )
        return updated

    async def delete_care_plan(self, id: str, context: UserContext) -> None:
        """Soft delete. Active plans must be discontinued first."""
        require_permission(
            self.permissions, context, Permission.CARE_PLANS_DELETE,
            "Insufficient permissions to delete care plans",
        )

        plan = await self.get_care_plan_by_id(id, context)
        if plan.status == CarePlanStatus.ACTIVE:
            raise ValidationError(
                "Cannot delete an active care plan. Please discontinue it first.",
                [f"status={plan.status.value}"],
            )

        await self.repository.update(
            plan.model_copy(update={
                "deleted_at": utcnow(),
                "deleted_by": context.user_id,
                "updated_by": context.user_id,
            }),
            plan.version,
        )
        logger.info("Care plan deleted", care_plan_id=id, deleted_by=context.user_id)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def activate_care_plan(
        self,
        id: str,
        context: UserContext,
        today: date | None = None,
    ) -> CarePlan:
        """
        Activate a plan.

        Runs the activation compliance check and the readiness checks, then
        activates the plan and expires the client's previous ACTIVE plan in
        one repository operation.

        Raises:
            ValidationError: plan is not ready or has BLOCKING findings;
                `errors` lists every violation, `findings` the BLOCKING ones
        """
        require_permission(
            self.permissions, context, Permission.CARE_PLANS_ACTIVATE,
            "Insufficient permissions to activate care plans",
        )

        plan = await self.get_care_plan_by_id(id, context)
        if plan.status not in ACTIVATABLE_STATUSES:
            raise ValidationError(
                f"Care plan in status {plan.status.value} cannot be activated",
                [f"status={plan.status.value}"],
            )

        today = today or date.today()
        compliance = validate_activation(plan, today=today)
        readiness_errors = check_activation_readiness(plan, today)

        if readiness_errors or not compliance.is_compliant:
            blocking = compliance.blocking
            logger.warning(
                "Care plan activation refused",
                care_plan_id=id,
                readiness_errors=len(readiness_errors),
                blocking_codes=[f.code for f in blocking],
            )
            raise ValidationError(
                "Care plan cannot be activated",
                errors=[*readiness_errors, *(f"{f.code}: {f.message}" for f in blocking)],
                findings=blocking,
            )

        ready = plan.model_copy(update={
            "compliance_status": compliance_status_for(compliance),
            "last_compliance_check": utcnow(),
        })
        activated, expired = await self.repository.activate_exclusive(ready, plan.version, context.user_id)

        logger.info(
            "Care plan activated",
            care_plan_id=activated.id,
            client_id=activated.client_id,
            compliance_status=activated.compliance_status.value,
            expired_care_plan_id=expired.id if expired else None,
        )
        return activated

    async def transition_status(
        self,
        id: str,
        status: CarePlanStatus,
        context: UserContext,
    ) -> CarePlan:
        """Move a plan along STATUS_TRANSITIONS. Activation has its own entry point."""
        require_permission(
            self.permissions, context, Permission.CARE_PLANS_UPDATE,
            "Insufficient permissions to update care plans",
        )

        if status == CarePlanStatus.ACTIVE:
            raise ValidationError(
                "Use activation to make a care plan active",
                [f"status={status.value}"],
            )

        plan = await self.get_care_plan_by_id(id, context)
        if status not in STATUS_TRANSITIONS[plan.status]:
            raise ValidationError(
                f"Cannot transition care plan from {plan.status.value} to {status.value}",
                [f"status={plan.status.value}"],
            )

        updated = await self.repository.update(
            plan.model_copy(update={"status": status, "updated_by": context.user_id}),
            plan.version,
        )
        logger.info(
            "Care plan status changed",
            care_plan_id=id,
            from_status=plan.status.value,
            to_status=status.value,
        )
        return updated

    async def submit_for_approval(self, id: str, context: UserContext) -> CarePlan:
        return await self.transition_status(id, CarePlanStatus.PENDING_APPROVAL, context)

    # =========================================================================
    # Task generation
    # =========================================================================

    async def create_tasks_for_visit(
        self,
        care_plan_id: str,
        visit_id: str,
        visit_date: date,
        context: UserContext,
    ) -> list[TaskInstance]:
        """
        Create one SCHEDULED task per ACTIVE template that fires on `visit_date`.

        Template fields are copied onto each task, so later template edits
        never change tasks already generated.
        """
        require_permission(
            self.permissions, context, Permission.TASKS_CREATE,
            "Insufficient permissions to create tasks",
        )

        plan = await self.get_care_plan_by_id(care_plan_id, context)

        tasks = []
        for template in plan.task_templates:
            if template.status != TemplateStatus.ACTIVE:
                continue
            if not should_fire(template.frequency, visit_date):
                continue

            specific_times = template.frequency.specific_times or []
            task = await self.task_service.create_task_instance(
                CreateTaskInstanceInput(
                    care_plan_id=plan.id,
                    template_id=template.id,
                    visit_id=visit_id,
                    client_id=plan.client_id,
                    assigned_caregiver_id=plan.primary_caregiver_id,
                    name=template.name,
                    description=template.description,
                    category=template.category,
                    instructions=template.instructions,
                    scheduled_date=visit_date,
                    scheduled_time=specific_times[0] if specific_times else None,
                    time_of_day=template.time_of_day[0] if template.time_of_day else None,
                    estimated_duration=template.estimated_duration,
                    required_signature=template.requires_signature,
                    required_note=template.requires_note,
                    allow_skip=template.allow_skip,
                    skip_reasons=list(template.skip_reasons),
                ),
                context,
            )
            tasks.append(task)

        logger.info(
            "Tasks generated for visit",
            care_plan_id=plan.id,
            visit_id=visit_id,
            visit_date=visit_date.isoformat(),
            count=len(tasks),
        )
        return tasks

    # =========================================================================
    # Queries
    # =========================================================================

    async def search_care_plans(self, filters: CarePlanFilters, context: UserContext) -> list[CarePlan]:
        require_permission(
            self.permissions, context, Permission.CARE_PLANS_READ,
            "Insufficient permissions to search care plans",
        )
        scoped = filters.model_copy(update={"organization_id": context.organization_id})
        return await self.repository.search(scoped)

    async def get_care_plans_by_client_id(self, client_id: str, context: UserContext) -> list[CarePlan]:
        return await self.search_care_plans(CarePlanFilters(client_id=client_id), context)

    async def get_active_care_plan_for_client(self, client_id: str, context: UserContext) -> CarePlan | None:
        require_permission(
            self.permissions, context, Permission.CARE_PLANS_READ,
            "Insufficient permissions to read care plans",
        )

        plan = await self.repository.get_active_for_client(client_id)
        if plan is not None:
            require_same_organization(context, plan.organization_id, "care plan")
        return plan

    async def get_expiring_care_plans(
        self,
        context: UserContext,
        days_until_expiration: int | None = None,
        today: date | None = None,
    ) -> list[CarePlan]:
        """ACTIVE plans whose expiration date falls within the window."""
        require_permission(
            self.permissions, context, Permission.CARE_PLANS_READ,
            "Insufficient permissions to read care plans",
        )

        if days_until_expiration is None:
            days_until_expiration = get_settings().app.expiring_plan_window_days
        today = today or date.today()
        cutoff = today + timedelta(days=days_until_expiration)

        plans = await self.repository.search(CarePlanFilters(
            organization_id=context.organization_id,
            status=[CarePlanStatus.ACTIVE],
        ))
        expiring = [
            p for p in plans
            if p.expiration_date is not None and today <= p.expiration_date <= cutoff
        ]
        return sorted(expiring, key=lambda p: p.expiration_date)
