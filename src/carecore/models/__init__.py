"""
CareCore Domain Models

Pydantic models for care plans, task instances, service authorizations,
compliance findings and progress notes.
"""

from carecore.models.base import AuditedEntity, new_id, utcnow
from carecore.models.care_plan import (
    CarePlan,
    CarePlanStatus,
    CarePlanType,
    CreateCarePlanInput,
    ComplianceStatus,
    DayOfWeek,
    Frequency,
    FrequencyPattern,
    FrequencyUnit,
    Goal,
    GoalCategory,
    GoalStatus,
    Intervention,
    InterventionCategory,
    InterventionStatus,
    Jurisdiction,
    JurisdictionData,
    OrderSource,
    PerformerType,
    Priority,
    QualityCheck,
    TaskCategory,
    TaskTemplate,
    TemplateStatus,
    TimeOfDay,
    UpdateCarePlanInput,
)
from carecore.models.task import (
    CompleteTaskInput,
    CreateTaskInstanceInput,
    GeoLocation,
    QualityCheckResponse,
    Signature,
    SignatureType,
    TaskInstance,
    TaskStatus,
    TERMINAL_TASK_STATUSES,
    VerificationData,
    VerificationType,
    VitalSigns,
)
from carecore.models.authorization import AuthorizationStatus, ServiceAuthorization
from carecore.models.compliance import (
    ComplianceFinding,
    ComplianceResult,
    FindingSeverity,
    JurisdictionRequirements,
)
from carecore.models.progress_note import (
    CreateProgressNoteInput,
    GoalProgress,
    Observation,
    ProgressNote,
    ProgressNoteType,
)

__all__ = [
    # Base
    "AuditedEntity",
    "new_id",
    "utcnow",
    # Care plans
    "CarePlan",
    "CarePlanStatus",
    "CarePlanType",
    "CreateCarePlanInput",
    "ComplianceStatus",
    "DayOfWeek",
    "Frequency",
    "FrequencyPattern",
    "FrequencyUnit",
    "Goal",
    "GoalCategory",
    "GoalStatus",
    "Intervention",
    "InterventionCategory",
    "InterventionStatus",
    "Jurisdiction",
    "JurisdictionData",
    "OrderSource",
    "PerformerType",
    "Priority",
    "QualityCheck",
    "TaskCategory",
    "TaskTemplate",
    "TemplateStatus",
    "TimeOfDay",
    "UpdateCarePlanInput",
    # Tasks
    "CompleteTaskInput",
    "CreateTaskInstanceInput",
    "GeoLocation",
    "QualityCheckResponse",
    "Signature",
    "SignatureType",
    "TaskInstance",
    "TaskStatus",
    "TERMINAL_TASK_STATUSES",
    "VerificationData",
    "VerificationType",
    "VitalSigns",
    # Authorizations
    "AuthorizationStatus",
    "ServiceAuthorization",
    # Compliance
    "ComplianceFinding",
    "ComplianceResult",
    "FindingSeverity",
    "JurisdictionRequirements",
    # Progress notes
    "CreateProgressNoteInput",
    "GoalProgress",
    "Observation",
    "ProgressNote",
    "ProgressNoteType",
]
