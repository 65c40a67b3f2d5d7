"""
Progress Notes

Narrative documentation attached to a care plan: visit notes, summaries,
incidents and changes in condition.
"""

import structlog

from carecore.auth import Permission, PermissionPolicy, UserContext, require_permission
from carecore.errors import ValidationError
from carecore.models import CreateProgressNoteInput, ProgressNote, utcnow
from carecore.plans.service import CarePlanService
from carecore.storage import ProgressNoteRepository

logger = structlog.get_logger(__name__)


class ProgressNoteService:
    """Create and list progress notes for plans in the caller's organization."""

    def __init__(
        self,
        repository: ProgressNoteRepository,
        care_plans: CarePlanService,
        permissions: PermissionPolicy,
    ):
        self.repository = repository
        self.care_plans = care_plans
        self.permissions = permissions

    async def create_progress_note(self, input: CreateProgressNoteInput, context: UserContext) -> ProgressNote:
        """
        Create a progress note.

        The author is taken from the caller; observations are stamped with
        the note time.

        Raises:
            NotFoundError: plan missing or deleted
            PermissionDeniedError: plan belongs to another organization
            ValidationError: client does not match the plan
        """
        require_permission(
            self.permissions, context, Permission.PROGRESS_NOTES_CREATE,
            "Insufficient permissions to create progress notes",
        )

        plan = await self.care_plans.get_care_plan_by_id(input.care_plan_id, context)
        if plan.client_id != input.client_id:
            raise ValidationError(
                "Progress note client does not match care plan",
                [f"client_id={input.client_id}"],
            )

        now = utcnow()
        role = context.primary_role
        note = ProgressNote(
            care_plan_id=plan.id,
            client_id=plan.client_id,
            organization_id=plan.organization_id,
            visit_id=input.visit_id,
            note_type=input.note_type,
            note_date=now,
            author_id=context.user_id,
            author_name=context.display_name or f"User {context.user_id[:8]}",
            author_role=role.value if role else "caregiver",
            content=input.content,
            goal_progress=list(input.goal_progress),
            observations=[o.model_copy(update={"timestamp": now}) for o in input.observations],
            concerns=list(input.concerns),
            recommendations=list(input.recommendations),
            signature=input.signature,
            created_by=context.user_id,
            updated_by=context.user_id,
        )
        created = await self.repository.create(note)

        logger.info(
            "Progress note created",
            progress_note_id=created.id,
            care_plan_id=plan.id,
            note_type=created.note_type.value,
        )
        return created

    async def get_progress_notes_by_care_plan_id(self, care_plan_id: str, context: UserContext) -> list[ProgressNote]:
        require_permission(
            self.permissions, context, Permission.PROGRESS_NOTES_READ,
            "Insufficient permissions to read progress notes",
        )

        await self.care_plans.get_care_plan_by_id(care_plan_id, context)
        return await self.repository.list_by_care_plan(care_plan_id)
