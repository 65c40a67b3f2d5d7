"""
Task Instance State Machine

SCHEDULED -> IN_PROGRESS -> {COMPLETED, SKIPPED, MISSED, CANCELLED, ISSUE_REPORTED}

The five outcomes are terminal: no transition leaves them and there is no
reopen. Each transition returns an updated copy of the task; persistence and
version checks belong to the caller.
"""

from datetime import datetime

import structlog

from carecore.config import VitalSignThresholds, get_settings
from carecore.errors import ValidationError
from carecore.models import (
    CompleteTaskInput,
    TaskInstance,
    TaskStatus,
    VitalSigns,
    utcnow,
)

logger = structlog.get_logger(__name__)


def check_completion_requirements(task: TaskInstance, completion: CompleteTaskInput) -> list[str]:
    """Return every unmet completion requirement."""
    errors = []

    if task.required_signature and completion.signature is None:
        errors.append("Signature is required for this task")

    if task.required_note and not (completion.completion_note or "").strip():
        errors.append("Completion note is required for this task")

    return errors


def check_vital_signs(vitals: VitalSigns, thresholds: VitalSignThresholds | None = None) -> list[str]:
    """Advisory range check. Warnings never block completion."""
    limits = thresholds or get_settings().vitals
    warnings = []

    if vitals.blood_pressure_systolic is not None and vitals.blood_pressure_systolic > limits.max_systolic:
        warnings.append("Systolic blood pressure is critically high")
    if vitals.blood_pressure_diastolic is not None and vitals.blood_pressure_diastolic > limits.max_diastolic:
        warnings.append("Diastolic blood pressure is critically high")
    if vitals.oxygen_saturation is not None and vitals.oxygen_saturation < limits.min_oxygen_saturation:
        warnings.append("Oxygen saturation is critically low")

    temp_f = vitals.temperature_f
    if temp_f is not None:
        if temp_f > limits.max_temperature_f:
            warnings.append("Temperature is critically high")
        elif temp_f < limits.min_temperature_f:
            warnings.append("Temperature is critically low")

    return warnings


class TaskStateMachine:
    """
    Legal transitions and required evidence for a single task occurrence.

    Usage:
        machine = TaskStateMachine()
        done = machine.complete(task, CompleteTaskInput(...), actor_id="user-1")
    """

    def __init__(self, vital_thresholds: VitalSignThresholds | None = None):
        self.vital_thresholds = vital_thresholds

    # =========================================================================
    # Guards
    # =========================================================================

    def _ensure_open(self, task: TaskInstance, action: str) -> None:
        if task.status == TaskStatus.COMPLETED:
            if action == "complete":
                raise ValidationError("Task is already completed", [f"status={task.status.value}"])
            raise ValidationError(f"Cannot {action} a completed task", [f"status={task.status.value}"])
        if task.status == TaskStatus.CANCELLED:
            raise ValidationError(f"Cannot {action} a cancelled task", [f"status={task.status.value}"])
        if task.is_terminal:
            raise ValidationError(
                f"Cannot {action} a task in status {task.status.value}",
                [f"status={task.status.value}"],
            )

    # =========================================================================
    # Transitions
    # =========================================================================

    def start(self, task: TaskInstance, actor_id: str, now: datetime | None = None) -> TaskInstance:
        """SCHEDULED -> IN_PROGRESS."""
        if task.status != TaskStatus.SCHEDULED:
            raise ValidationError(
                f"Only scheduled tasks can be started (status {task.status.value})",
                [f"status={task.status.value}"],
            )
        now = now or utcnow()
        return task.model_copy(update={
            "status": TaskStatus.IN_PROGRESS,
            "started_at": now,
            "updated_by": actor_id,
        })

    def complete(
        self,
        task: TaskInstance,
        completion: CompleteTaskInput,
        actor_id: str,
        now: datetime | None = None,
    ) -> TaskInstance:
        """
        Complete a task.

        Args:
            task: Current task state
            completion: Evidence captured by the caregiver
            actor_id: Completing user
            now: Completion instant, stamped on every nested timestamp

        Returns:
            Completed copy of the task

        Raises:
            ValidationError: task is closed or requirements are unmet
        """
        self._ensure_open(task, "complete")

        errors = check_completion_requirements(task, completion)
        if errors:
            raise ValidationError("Task completion requirements not met", errors)

        verification = completion.verification_data
        if verification and verification.vital_signs:
            warnings = check_vital_signs(verification.vital_signs, self.vital_thresholds)
            if warnings:
                logger.warning(
                    "Vital signs outside expected range",
                    task_id=task.id,
                    client_id=task.client_id,
                    warnings=warnings,
                )

        now = now or utcnow()

        signature = None
        if completion.signature:
            signature = completion.signature.model_copy(update={"signed_at": now})

        if verification:
            gps = None
            if verification.gps_location:
                gps = verification.gps_location.model_copy(update={"timestamp": now})
            verification = verification.model_copy(update={
                "verified_at": now,
                "verified_by": actor_id,
                "gps_location": gps,
            })

        logger.info("Task completed", task_id=task.id, care_plan_id=task.care_plan_id, completed_by=actor_id)

        return task.model_copy(update={
            "status": TaskStatus.COMPLETED,
            "completed_at": now,
            "completed_by": actor_id,
            "completion_note": completion.completion_note,
            "completion_signature": signature,
            "verification_data": verification,
            "quality_check_responses": list(completion.quality_check_responses),
            "custom_field_values": dict(completion.custom_field_values),
            "updated_by": actor_id,
        })

    def skip(
        self,
        task: TaskInstance,
        reason: str,
        actor_id: str,
        note: str | None = None,
        now: datetime | None = None,
    ) -> TaskInstance:
        """
        Skip a task with a free-text reason.

        The reason is not restricted to the template's `skip_reasons` list.
        """
        self._ensure_open(task, "skip")

        if not reason or not reason.strip():
            raise ValidationError("Skip reason is required", ["Skip reason is required"])

        now = now or utcnow()
        logger.info("Task skipped", task_id=task.id, care_plan_id=task.care_plan_id, skipped_by=actor_id)

        return task.model_copy(update={
            "status": TaskStatus.SKIPPED,
            "skipped_at": now,
            "skipped_by": actor_id,
            "skip_reason": reason.strip(),
            "skip_note": note,
            "updated_by": actor_id,
        })

    def report_issue(
        self,
        task: TaskInstance,
        description: str,
        actor_id: str,
        now: datetime | None = None,
    ) -> TaskInstance:
        """Flag a problem; resolution happens outside this core."""
        self._ensure_open(task, "report an issue on")

        if not description or not description.strip():
            raise ValidationError("Issue description is required", ["Issue description is required"])

        now = now or utcnow()
        logger.warning("Task issue reported", task_id=task.id, client_id=task.client_id, reported_by=actor_id)

        return task.model_copy(update={
            "status": TaskStatus.ISSUE_REPORTED,
            "issue_reported": True,
            "issue_description": description,
            "issue_reported_at": now,
            "issue_reported_by": actor_id,
            "updated_by": actor_id,
        })

    def cancel(
        self,
        task: TaskInstance,
        actor_id: str,
        reason: str | None = None,
        now: datetime | None = None,
    ) -> TaskInstance:
        self._ensure_open(task, "cancel")
        now = now or utcnow()
        return task.model_copy(update={
            "status": TaskStatus.CANCELLED,
            "cancelled_at": now,
            "cancellation_reason": reason,
            "updated_by": actor_id,
        })

    def mark_missed(self, task: TaskInstance, actor_id: str, now: datetime | None = None) -> TaskInstance:
        self._ensure_open(task, "mark missed")
        now = now or utcnow()
        return task.model_copy(update={
            "status": TaskStatus.MISSED,
            "missed_at": now,
            "updated_by": actor_id,
        })
