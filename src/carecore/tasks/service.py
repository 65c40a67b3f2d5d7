"""
Task Service

Permission-checked, organization-scoped task operations. State changes go
through TaskStateMachine and are persisted with a version-checked write.
"""

from decimal import Decimal

import structlog

from carecore.auth import Permission, PermissionPolicy, UserContext, require_permission, require_same_organization
from carecore.authorizations import AuthorizationLedger, service_code_for, units_for_minutes
from carecore.errors import CareCoreError, NotFoundError
from carecore.models import (
    CompleteTaskInput,
    CreateTaskInstanceInput,
    TaskInstance,
    TaskStatus,
)
from carecore.storage import TaskFilters, TaskInstanceRepository
from carecore.tasks.state_machine import TaskStateMachine

logger = structlog.get_logger(__name__)


class TaskService:
    """
    Service for task instances.

    Features:
    - Creation in SCHEDULED state
    - Start / complete / skip / report issue / cancel / miss
    - Unit deduction for billable categories when a ledger is wired
    """

    def __init__(
        self,
        repository: TaskInstanceRepository,
        permissions: PermissionPolicy,
        ledger: AuthorizationLedger | None = None,
        state_machine: TaskStateMachine | None = None,
    ):
        self.repository = repository
        self.permissions = permissions
        self.ledger = ledger
        self.state_machine = state_machine or TaskStateMachine()

    async def create_task_instance(
        self,
        input: CreateTaskInstanceInput,
        context: UserContext,
    ) -> TaskInstance:
        """Create a task instance in its initial SCHEDULED state."""
        require_permission(
            self.permissions, context, Permission.TASKS_CREATE,
            "Insufficient permissions to create tasks",
        )

        task = TaskInstance(
            **input.model_dump(),
            organization_id=context.organization_id,
            status=TaskStatus.SCHEDULED,
            created_by=context.user_id,
            updated_by=context.user_id,
        )
        created = await self.repository.create(task)

        logger.info(
            "Task instance created",
            task_id=created.id,
            care_plan_id=created.care_plan_id,
            visit_id=created.visit_id,
            scheduled_date=created.scheduled_date.isoformat(),
        )
        return created

    async def get_task_instance_by_id(self, id: str, context: UserContext) -> TaskInstance:
        require_permission(
            self.permissions, context, Permission.TASKS_READ,
            "Insufficient permissions to read tasks",
        )

        task = await self.repository.get(id)
        if task is None:
            raise NotFoundError("Task not found", "TaskInstance", id)
        require_same_organization(context, task.organization_id, "task")
        return task

    async def start_task(self, id: str, context: UserContext) -> TaskInstance:
        require_permission(self.permissions, context, Permission.TASKS_UPDATE)
        task = await self.get_task_instance_by_id(id, context)
        started = self.state_machine.start(task, context.user_id)
        return await self.repository.update(started, task.version)

    async def complete_task(
        self,
        id: str,
        input: CompleteTaskInput,
        context: UserContext,
        billable_units: Decimal | int | None = None,
    ) -> TaskInstance:
        """
        Complete a task.

        The completion is written first with a version-checked update. When
        a ledger is configured and the task category is billable, units are
        then deducted; if the ledger refuses, the task is written back to its
        prior state and the ledger error is raised. A stale task write never
        reaches the ledger. Units default to the task's estimated duration in
        15-minute increments.

        Raises:
            ValidationError: task closed or requirements unmet
            NoMatchingAuthorizationError, AuthorizationExhaustedError: ledger refused
            StaleWriteError: task changed since it was read
        """
        require_permission(
            self.permissions, context, Permission.TASKS_COMPLETE,
            "Insufficient permissions to complete tasks",
        )

        task = await self.get_task_instance_by_id(id, context)
        completed = self.state_machine.complete(task, input, context.user_id)

        saved = await self.repository.update(completed, task.version)

        units = self._billable_units(task, billable_units)
        if units:
            try:
                await self.ledger.deduct_for_task(saved, units, context)
            except CareCoreError:
                await self.repository.update(task, saved.version)
                logger.warning(
                    "Task completion reverted",
                    task_id=task.id,
                    units=str(units),
                )
                raise

        return saved

    async def skip_task(
        self,
        id: str,
        reason: str,
        context: UserContext,
        note: str | None = None,
    ) -> TaskInstance:
        require_permission(
            self.permissions, context, Permission.TASKS_SKIP,
            "Insufficient permissions to skip tasks",
        )

        task = await self.get_task_instance_by_id(id, context)
        skipped = self.state_machine.skip(task, reason, context.user_id, note=note)
        return await self.repository.update(skipped, task.version)

    async def report_task_issue(
        self,
        id: str,
        issue_description: str,
        context: UserContext,
    ) -> TaskInstance:
        require_permission(
            self.permissions, context, Permission.TASKS_UPDATE,
            "Insufficient permissions to report task issues",
        )

        task = await self.get_task_instance_by_id(id, context)
        flagged = self.state_machine.report_issue(task, issue_description, context.user_id)
        return await self.repository.update(flagged, task.version)

    async def cancel_task(self, id: str, context: UserContext, reason: str | None = None) -> TaskInstance:
        require_permission(self.permissions, context, Permission.TASKS_UPDATE)
        task = await self.get_task_instance_by_id(id, context)
        cancelled = self.state_machine.cancel(task, context.user_id, reason=reason)
        return await self.repository.update(cancelled, task.version)

    async def mark_task_missed(self, id: str, context: UserContext) -> TaskInstance:
        require_permission(self.permissions, context, Permission.TASKS_UPDATE)
        task = await self.get_task_instance_by_id(id, context)
        missed = self.state_machine.mark_missed(task, context.user_id)
        return await self.repository.update(missed, task.version)

    async def search_task_instances(self, filters: TaskFilters, context: UserContext) -> list[TaskInstance]:
        require_permission(
            self.permissions, context, Permission.TASKS_READ,
            "Insufficient permissions to search tasks",
        )
        scoped = filters.model_copy(update={"organization_id": context.organization_id})
        return await self.repository.search(scoped)

    async def get_tasks_by_visit_id(self, visit_id: str, context: UserContext) -> list[TaskInstance]:
        return await self.search_task_instances(TaskFilters(visit_id=visit_id), context)

    def _billable_units(self, task: TaskInstance, requested: Decimal | int | None) -> Decimal | None:
        if self.ledger is None or service_code_for(task.category) is None:
            return None
        if requested is not None:
            return Decimal(requested)
        if task.estimated_duration:
            return units_for_minutes(task.estimated_duration)
        return None
