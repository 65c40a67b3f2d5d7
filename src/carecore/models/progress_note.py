"""
Progress Note Models
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from carecore.models.base import AuditedEntity
from carecore.models.care_plan import GoalStatus
from carecore.models.task import Signature


class ProgressNoteType(str, Enum):
    VISIT_NOTE = "VISIT_NOTE"
    WEEKLY_SUMMARY = "WEEKLY_SUMMARY"
    MONTHLY_SUMMARY = "MONTHLY_SUMMARY"
    CARE_PLAN_REVIEW = "CARE_PLAN_REVIEW"
    INCIDENT = "INCIDENT"
    CHANGE_IN_CONDITION = "CHANGE_IN_CONDITION"
    COMMUNICATION = "COMMUNICATION"
    OTHER = "OTHER"


class ObservationSeverity(str, Enum):
    NORMAL = "NORMAL"
    ATTENTION = "ATTENTION"
    URGENT = "URGENT"


class GoalProgress(BaseModel):
    goal_id: str
    goal_name: str
    status: GoalStatus
    progress_description: str
    progress_percentage: float | None = Field(default=None, ge=0, le=100)
    barriers: list[str] = Field(default_factory=list)
    next_steps: list[str] = Field(default_factory=list)


class Observation(BaseModel):
    category: str  # PHYSICAL, COGNITIVE, EMOTIONAL, BEHAVIORAL, SOCIAL, ENVIRONMENTAL, SAFETY
    observation: str = Field(..., max_length=1000)
    severity: ObservationSeverity = ObservationSeverity.NORMAL
    timestamp: datetime | None = None


class CreateProgressNoteInput(BaseModel):
    care_plan_id: str
    client_id: str
    visit_id: str | None = None
    note_type: ProgressNoteType
    content: str = Field(..., min_length=1, max_length=10000)
    goal_progress: list[GoalProgress] = Field(default_factory=list)
    observations: list[Observation] = Field(default_factory=list)
    concerns: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    signature: Signature | None = None


class ProgressNote(AuditedEntity):
    care_plan_id: str
    client_id: str
    organization_id: str
    visit_id: str | None = None
    note_type: ProgressNoteType
    note_date: datetime
    author_id: str
    author_name: str
    author_role: str
    content: str
    goal_progress: list[GoalProgress] = Field(default_factory=list)
    observations: list[Observation] = Field(default_factory=list)
    concerns: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    signature: Signature | None = None
