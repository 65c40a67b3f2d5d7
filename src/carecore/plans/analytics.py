"""
Care Plan Analytics

Organization-level task completion and plan quality metrics.
"""

from datetime import date, datetime, time, timedelta, timezone

from pydantic import BaseModel, Field

from carecore.auth import Permission, PermissionPolicy, UserContext, require_permission
from carecore.config import get_settings
from carecore.models import CarePlanStatus, ComplianceStatus, GoalStatus, TaskInstance, TaskStatus
from carecore.storage import CarePlanFilters, CarePlanRepository, TaskFilters, TaskInstanceRepository


class TaskCompletionMetrics(BaseModel):
    total_tasks: int = 0
    completed_tasks: int = 0
    skipped_tasks: int = 0
    missed_tasks: int = 0
    completion_rate: float = 0.0  # percent
    average_completion_minutes: float = 0.0
    tasks_by_category: dict[str, int] = Field(default_factory=dict)
    issues_reported: int = 0


class CarePlanAnalytics(BaseModel):
    total_plans: int = 0
    active_plans: int = 0
    expiring_plans: int = 0
    goal_completion_rate: float = 0.0  # percent
    task_completion_rate: float = 0.0  # percent
    average_goals_per_plan: float = 0.0
    average_tasks_per_plan: float = 0.0
    compliance_rate: float = 100.0  # percent of active plans


def _percent(part: int, whole: int) -> float:
    return part / whole * 100 if whole else 0.0


def _minutes_after_schedule(task: TaskInstance) -> float:
    scheduled_time = time.min
    if task.scheduled_time:
        hours, minutes = task.scheduled_time.split(":")[:2]
        scheduled_time = time(int(hours), int(minutes))
    scheduled = datetime.combine(task.scheduled_date, scheduled_time, tzinfo=timezone.utc)
    return (task.completed_at - scheduled).total_seconds() / 60


class CarePlanAnalyticsService:
    """Read-only metrics over plans and tasks in the caller's organization."""

    def __init__(
        self,
        plan_repository: CarePlanRepository,
        task_repository: TaskInstanceRepository,
        permissions: PermissionPolicy,
    ):
        self.plan_repository = plan_repository
        self.task_repository = task_repository
        self.permissions = permissions

    async def get_task_completion_metrics(
        self,
        date_from: date,
        date_to: date,
        context: UserContext,
    ) -> TaskCompletionMetrics:
        """
        Task outcome counts for tasks scheduled within [date_from, date_to].

        Args:
            date_from: First scheduled date included
            date_to: Last scheduled date included
            context: Caller; metrics cover the caller's organization only

        Returns:
            TaskCompletionMetrics
        """
        require_permission(
            self.permissions, context, Permission.ANALYTICS_READ,
            "Insufficient permissions to view analytics",
        )

        tasks = await self.task_repository.search(TaskFilters(
            organization_id=context.organization_id,
            scheduled_date_from=date_from,
            scheduled_date_to=date_to,
        ))

        completed = [t for t in tasks if t.status == TaskStatus.COMPLETED]
        by_category: dict[str, int] = {}
        for task in tasks:
            by_category[task.category.value] = by_category.get(task.category.value, 0) + 1

        durations = [_minutes_after_schedule(t) for t in completed if t.completed_at]

        return TaskCompletionMetrics(
            total_tasks=len(tasks),
            completed_tasks=len(completed),
            skipped_tasks=sum(1 for t in tasks if t.status == TaskStatus.SKIPPED),
            missed_tasks=sum(1 for t in tasks if t.status == TaskStatus.MISSED),
            completion_rate=_percent(len(completed), len(tasks)),
            average_completion_minutes=sum(durations) / len(durations) if durations else 0.0,
            tasks_by_category=by_category,
            issues_reported=sum(1 for t in tasks if t.issue_reported),
        )

    async def get_care_plan_analytics(self, context: UserContext, today: date | None = None) -> CarePlanAnalytics:
        """Plan counts, goal completion, 30-day task completion and compliance rate."""
        require_permission(
            self.permissions, context, Permission.ANALYTICS_READ,
            "Insufficient permissions to view analytics",
        )

        today = today or date.today()
        window = get_settings().app.expiring_plan_window_days

        plans = await self.plan_repository.search(CarePlanFilters(organization_id=context.organization_id))
        active = [p for p in plans if p.status == CarePlanStatus.ACTIVE]
        expiring = [
            p for p in active
            if p.expiration_date is not None and today <= p.expiration_date <= today + timedelta(days=window)
        ]

        total_goals = sum(len(p.goals) for p in plans)
        achieved_goals = sum(1 for p in plans for g in p.goals if g.status == GoalStatus.ACHIEVED)

        task_metrics = await self.get_task_completion_metrics(today - timedelta(days=30), today, context)

        compliant = sum(1 for p in active if p.compliance_status == ComplianceStatus.COMPLIANT)

        return CarePlanAnalytics(
            total_plans=len(plans),
            active_plans=len(active),
            expiring_plans=len(expiring),
            goal_completion_rate=_percent(achieved_goals, total_goals),
            task_completion_rate=task_metrics.completion_rate,
            average_goals_per_plan=total_goals / len(plans) if plans else 0.0,
            average_tasks_per_plan=task_metrics.total_tasks / len(plans) if plans else 0.0,
            compliance_rate=_percent(compliant, len(active)) if active else 100.0,
        )
