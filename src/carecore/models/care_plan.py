"""
Care Plan Domain Models

Pydantic models for CarePlan and its embedded Goal, Intervention and
TaskTemplate value objects.
"""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field

from carecore.models.base import AuditedEntity, new_id


class CarePlanType(str, Enum):
    PERSONAL_CARE = "PERSONAL_CARE"
    COMPANION = "COMPANION"
    SKILLED_NURSING = "SKILLED_NURSING"
    THERAPY = "THERAPY"
    HOSPICE = "HOSPICE"
    RESPITE = "RESPITE"
    LIVE_IN = "LIVE_IN"
    CUSTOM = "CUSTOM"


class CarePlanStatus(str, Enum):
    """Care plan lifecycle states."""
    DRAFT = "DRAFT"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    ACTIVE = "ACTIVE"
    ON_HOLD = "ON_HOLD"
    EXPIRED = "EXPIRED"
    DISCONTINUED = "DISCONTINUED"
    COMPLETED = "COMPLETED"


class Priority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class ComplianceStatus(str, Enum):
    COMPLIANT = "COMPLIANT"
    PENDING_REVIEW = "PENDING_REVIEW"
    EXPIRED = "EXPIRED"
    NON_COMPLIANT = "NON_COMPLIANT"


class Jurisdiction(str, Enum):
    """Regulatory regimes with a modeled rule set."""
    TX = "TX"  # physician-order rules (26 TAC §558)
    FL = "FL"  # RN-supervision rules (AHCA 59A-8)
    OTHER = "OTHER"


# =============================================================================
# Frequency
# =============================================================================

class FrequencyPattern(str, Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    BI_WEEKLY = "BI_WEEKLY"
    MONTHLY = "MONTHLY"
    AS_NEEDED = "AS_NEEDED"
    CUSTOM = "CUSTOM"


class FrequencyUnit(str, Enum):
    DAYS = "DAYS"
    WEEKS = "WEEKS"
    MONTHS = "MONTHS"


class DayOfWeek(str, Enum):
    """Weekdays in `date.weekday()` order."""
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"

    @classmethod
    def from_date(cls, value: date) -> "DayOfWeek":
        return list(cls)[value.weekday()]


class Frequency(BaseModel):
    """
    How often a template or intervention recurs.

    `anchor_date` enables interval membership for BI_WEEKLY, MONTHLY and
    CUSTOM patterns; without it those patterns fire on every date.
    """

    pattern: FrequencyPattern
    specific_days: list[DayOfWeek] | None = None
    specific_times: list[str] | None = Field(default=None, description="HH:MM")
    interval: int | None = Field(default=None, ge=1)
    unit: FrequencyUnit | None = None
    times_per_day: int | None = None
    times_per_week: int | None = None
    anchor_date: date | None = None


# =============================================================================
# Goals & Interventions
# =============================================================================

class GoalCategory(str, Enum):
    MOBILITY = "MOBILITY"
    ADL = "ADL"
    IADL = "IADL"
    NUTRITION = "NUTRITION"
    MEDICATION_MANAGEMENT = "MEDICATION_MANAGEMENT"
    SAFETY = "SAFETY"
    SOCIAL_ENGAGEMENT = "SOCIAL_ENGAGEMENT"
    COGNITIVE = "COGNITIVE"
    EMOTIONAL_WELLBEING = "EMOTIONAL_WELLBEING"
    PAIN_MANAGEMENT = "PAIN_MANAGEMENT"
    WOUND_CARE = "WOUND_CARE"
    CHRONIC_DISEASE_MANAGEMENT = "CHRONIC_DISEASE_MANAGEMENT"
    OTHER = "OTHER"


class GoalStatus(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    ON_TRACK = "ON_TRACK"
    AT_RISK = "AT_RISK"
    ACHIEVED = "ACHIEVED"
    PARTIALLY_ACHIEVED = "PARTIALLY_ACHIEVED"
    NOT_ACHIEVED = "NOT_ACHIEVED"
    DISCONTINUED = "DISCONTINUED"


class Goal(BaseModel):
    """Specific, measurable objective within a care plan."""

    id: str = Field(default_factory=new_id)
    name: str
    description: str = ""
    category: GoalCategory = GoalCategory.OTHER
    status: GoalStatus = GoalStatus.NOT_STARTED
    priority: Priority = Priority.MEDIUM
    target_date: date | None = None

    # Measurable criteria
    target_value: float | None = None
    current_value: float | None = None
    unit: str | None = None
    progress_percentage: float | None = Field(default=None, ge=0, le=100)

    # Informational links, not enforced
    intervention_ids: list[str] = Field(default_factory=list)
    task_ids: list[str] = Field(default_factory=list)

    achieved_date: date | None = None


class InterventionCategory(str, Enum):
    ASSISTANCE_WITH_ADL = "ASSISTANCE_WITH_ADL"
    ASSISTANCE_WITH_IADL = "ASSISTANCE_WITH_IADL"
    MEDICATION_ADMINISTRATION = "MEDICATION_ADMINISTRATION"
    MEDICATION_REMINDER = "MEDICATION_REMINDER"
    VITAL_SIGNS_MONITORING = "VITAL_SIGNS_MONITORING"
    WOUND_CARE = "WOUND_CARE"
    RANGE_OF_MOTION = "RANGE_OF_MOTION"
    AMBULATION_ASSISTANCE = "AMBULATION_ASSISTANCE"
    TRANSFER_ASSISTANCE = "TRANSFER_ASSISTANCE"
    FALL_PREVENTION = "FALL_PREVENTION"
    NUTRITION_MEAL_PREP = "NUTRITION_MEAL_PREP"
    FEEDING_ASSISTANCE = "FEEDING_ASSISTANCE"
    HYDRATION_MONITORING = "HYDRATION_MONITORING"
    INCONTINENCE_CARE = "INCONTINENCE_CARE"
    SKIN_CARE = "SKIN_CARE"
    COGNITIVE_STIMULATION = "COGNITIVE_STIMULATION"
    COMPANIONSHIP = "COMPANIONSHIP"
    SAFETY_MONITORING = "SAFETY_MONITORING"
    TRANSPORTATION = "TRANSPORTATION"
    RESPITE_CARE = "RESPITE_CARE"
    OTHER = "OTHER"


class PerformerType(str, Enum):
    CAREGIVER = "CAREGIVER"
    CNA = "CNA"
    HHA = "HHA"
    RN = "RN"
    LPN = "LPN"
    THERAPIST = "THERAPIST"
    FAMILY = "FAMILY"
    CLIENT = "CLIENT"


class InterventionStatus(str, Enum):
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"
    DISCONTINUED = "DISCONTINUED"


class Intervention(BaseModel):
    """Specific action addressing one or more goals."""

    id: str = Field(default_factory=new_id)
    name: str
    description: str = ""
    category: InterventionCategory
    goal_ids: list[str] = Field(default_factory=list)
    frequency: Frequency
    duration_minutes: int | None = None
    instructions: str = ""
    performed_by: list[PerformerType] = Field(default_factory=lambda: [PerformerType.CAREGIVER])
    requires_supervision: bool = False
    requires_documentation: bool = False
    status: InterventionStatus = InterventionStatus.ACTIVE
    start_date: date | None = None
    end_date: date | None = None


# =============================================================================
# Task Templates
# =============================================================================

class TaskCategory(str, Enum):
    PERSONAL_HYGIENE = "PERSONAL_HYGIENE"
    BATHING = "BATHING"
    DRESSING = "DRESSING"
    GROOMING = "GROOMING"
    TOILETING = "TOILETING"
    MOBILITY = "MOBILITY"
    TRANSFERRING = "TRANSFERRING"
    AMBULATION = "AMBULATION"
    MEDICATION = "MEDICATION"
    MEAL_PREPARATION = "MEAL_PREPARATION"
    FEEDING = "FEEDING"
    HOUSEKEEPING = "HOUSEKEEPING"
    LAUNDRY = "LAUNDRY"
    SHOPPING = "SHOPPING"
    TRANSPORTATION = "TRANSPORTATION"
    COMPANIONSHIP = "COMPANIONSHIP"
    MONITORING = "MONITORING"
    DOCUMENTATION = "DOCUMENTATION"
    OTHER = "OTHER"


class TimeOfDay(str, Enum):
    EARLY_MORNING = "EARLY_MORNING"  # 6am-9am
    MORNING = "MORNING"  # 9am-12pm
    AFTERNOON = "AFTERNOON"  # 12pm-5pm
    EVENING = "EVENING"  # 5pm-9pm
    NIGHT = "NIGHT"  # 9pm-12am
    OVERNIGHT = "OVERNIGHT"  # 12am-6am
    ANY = "ANY"


class TemplateStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    ARCHIVED = "ARCHIVED"


class QualityCheck(BaseModel):
    id: str = Field(default_factory=new_id)
    question: str
    check_type: str = "YES_NO"  # YES_NO, SCALE, TEXT, CHECKLIST
    required: bool = False
    options: list[str] = Field(default_factory=list)


class TaskTemplate(BaseModel):
    """Reusable task definition; the generator input for task instances."""

    id: str = Field(default_factory=new_id)
    name: str
    description: str = ""
    category: TaskCategory
    intervention_ids: list[str] = Field(default_factory=list)

    # Timing
    frequency: Frequency
    estimated_duration: int | None = None  # minutes
    time_of_day: list[TimeOfDay] = Field(default_factory=list)

    instructions: str = ""

    # Requirements
    requires_signature: bool = False
    requires_note: bool = False
    requires_photo: bool = False
    requires_vitals: bool = False

    # Skip policy
    is_optional: bool = False
    allow_skip: bool = True
    skip_reasons: list[str] = Field(default_factory=list)

    quality_checks: list[QualityCheck] = Field(default_factory=list)

    status: TemplateStatus = TemplateStatus.ACTIVE


# =============================================================================
# Care Plan
# =============================================================================

class OrderSource(str, Enum):
    WRITTEN = "WRITTEN"
    VERBAL = "VERBAL"
    ELECTRONIC = "ELECTRONIC"


class JurisdictionData(BaseModel):
    """Jurisdiction-specific attributes evaluated by the compliance rule sets."""

    # Physician orders
    ordering_provider_name: str | None = None
    ordering_provider_license: str | None = None
    ordering_provider_npi: str | None = None
    order_date: date | None = None
    order_source: OrderSource | None = None
    verbal_order_authenticated_at: datetime | None = None

    # Reviews
    plan_review_interval_days: int | None = None
    next_review_due: date | None = None

    # Medicaid / consumer-directed services
    medicaid_program: str | None = None
    service_authorization_form: str | None = None
    is_consumer_directed: bool = False
    employer_authority_id: str | None = None
    financial_management_service_id: str | None = None

    # RN supervision and delegation
    rn_supervisor_id: str | None = None
    last_supervisory_visit_date: date | None = None
    next_supervisory_visit_due: date | None = None
    rn_delegation_id: str | None = None

    # Documentation
    plan_of_care_form_number: str | None = None
    disaster_plan_on_file: bool = False
    infection_control_plan_reviewed: bool = False


class CarePlan(AuditedEntity):
    """
    Care plan aggregate.

    Goals, interventions and task templates are owned value objects; they are
    only ever replaced as whole lists together with a version bump.
    """

    plan_number: str = ""
    name: str
    client_id: str
    organization_id: str

    plan_type: CarePlanType = CarePlanType.PERSONAL_CARE
    status: CarePlanStatus = CarePlanStatus.DRAFT
    priority: Priority = Priority.MEDIUM

    # Dates
    effective_date: date | None = None
    expiration_date: date | None = None
    review_date: date | None = None

    # Care team
    coordinator_id: str | None = None
    primary_caregiver_id: str | None = None

    # Content
    assessment_summary: str | None = None
    goals: list[Goal] = Field(default_factory=list)
    interventions: list[Intervention] = Field(default_factory=list)
    task_templates: list[TaskTemplate] = Field(default_factory=list)

    # Compliance
    jurisdiction: Jurisdiction | None = None
    jurisdiction_data: JurisdictionData = Field(default_factory=JurisdictionData)
    compliance_status: ComplianceStatus = ComplianceStatus.PENDING_REVIEW
    last_compliance_check: datetime | None = None

    notes: str | None = None

    @property
    def is_closed(self) -> bool:
        return self.status in (CarePlanStatus.COMPLETED, CarePlanStatus.DISCONTINUED)


# =============================================================================
# Inputs
# =============================================================================

class CreateCarePlanInput(BaseModel):
    """Already-validated input for a new plan; the organization comes from the caller."""

    name: str = Field(..., min_length=1, max_length=255)
    client_id: str
    plan_type: CarePlanType = CarePlanType.PERSONAL_CARE
    priority: Priority = Priority.MEDIUM
    effective_date: date | None = None
    expiration_date: date | None = None
    review_date: date | None = None
    coordinator_id: str | None = None
    primary_caregiver_id: str | None = None
    assessment_summary: str | None = None
    goals: list[Goal] = Field(default_factory=list)
    interventions: list[Intervention] = Field(default_factory=list)
    task_templates: list[TaskTemplate] = Field(default_factory=list)
    jurisdiction: Jurisdiction | None = None
    jurisdiction_data: JurisdictionData = Field(default_factory=JurisdictionData)
    notes: str | None = None


class UpdateCarePlanInput(BaseModel):
    """
    Partial update. Only fields explicitly set are applied.

    Embedded lists replace the stored list whole.
    """

    name: str | None = Field(default=None, min_length=1, max_length=255)
    priority: Priority | None = None
    effective_date: date | None = None
    expiration_date: date | None = None
    review_date: date | None = None
    coordinator_id: str | None = None
    primary_caregiver_id: str | None = None
    assessment_summary: str | None = None
    goals: list[Goal] | None = None
    interventions: list[Intervention] | None = None
    task_templates: list[TaskTemplate] | None = None
    jurisdiction: Jurisdiction | None = None
    jurisdiction_data: JurisdictionData | None = None
    notes: str | None = None
