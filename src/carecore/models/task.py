"""
Task Instance Domain Models

One concrete, dated occurrence of a task template plus the evidence captured
when it is completed, skipped or flagged.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field

from carecore.models.base import AuditedEntity
from carecore.models.care_plan import TaskCategory, TimeOfDay


class TaskStatus(str, Enum):
    """Task instance lifecycle states."""
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    SKIPPED = "SKIPPED"
    MISSED = "MISSED"
    CANCELLED = "CANCELLED"
    ISSUE_REPORTED = "ISSUE_REPORTED"


TERMINAL_TASK_STATUSES = frozenset({
    TaskStatus.COMPLETED,
    TaskStatus.SKIPPED,
    TaskStatus.MISSED,
    TaskStatus.CANCELLED,
    TaskStatus.ISSUE_REPORTED,
})


class SignatureType(str, Enum):
    ELECTRONIC = "ELECTRONIC"
    STYLUS = "STYLUS"
    TOUCHSCREEN = "TOUCHSCREEN"


class Signature(BaseModel):
    signature_data: str = Field(..., description="Base64 encoded signature image")
    signed_by: str
    signed_by_name: str
    signature_type: SignatureType = SignatureType.ELECTRONIC
    signed_at: datetime | None = None
    ip_address: str | None = None
    device_info: str | None = None


class GeoLocation(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    accuracy: float | None = None
    timestamp: datetime | None = None


class VitalSigns(BaseModel):
    blood_pressure_systolic: float | None = None
    blood_pressure_diastolic: float | None = None
    heart_rate: float | None = None
    temperature: float | None = None
    temperature_unit: Literal["F", "C"] = "F"
    oxygen_saturation: float | None = None
    respiratory_rate: float | None = None
    blood_glucose: float | None = None
    weight: float | None = None
    weight_unit: Literal["LBS", "KG"] = "LBS"
    pain: int | None = Field(default=None, ge=0, le=10)
    notes: str | None = None

    @property
    def temperature_f(self) -> float | None:
        if self.temperature is None:
            return None
        if self.temperature_unit == "C":
            return self.temperature * 9 / 5 + 32
        return self.temperature


class VerificationType(str, Enum):
    NONE = "NONE"
    CHECKBOX = "CHECKBOX"
    SIGNATURE = "SIGNATURE"
    PHOTO = "PHOTO"
    GPS = "GPS"
    BARCODE_SCAN = "BARCODE_SCAN"
    VITAL_SIGNS = "VITAL_SIGNS"
    CUSTOM = "CUSTOM"


class VerificationData(BaseModel):
    verification_type: VerificationType = VerificationType.CHECKBOX
    verified_at: datetime | None = None
    verified_by: str | None = None
    gps_location: GeoLocation | None = None
    photo_urls: list[str] = Field(default_factory=list)
    barcode_data: str | None = None
    vital_signs: VitalSigns | None = None
    custom_data: dict[str, Any] = Field(default_factory=dict)


class QualityCheckResponse(BaseModel):
    check_id: str
    question: str
    response: str | int | float | bool | list[str]
    notes: str | None = None


class TaskInstance(AuditedEntity):
    """
    Task instance generated for a visit.

    Template fields are copied at creation so later template edits never
    change already-generated instances. Mutated only through the task state
    machine; never deleted.
    """

    # References
    care_plan_id: str
    template_id: str | None = None
    visit_id: str | None = None
    client_id: str
    organization_id: str
    assigned_caregiver_id: str | None = None

    # Snapshot of template fields
    name: str
    description: str = ""
    category: TaskCategory
    instructions: str = ""
    required_signature: bool = False
    required_note: bool = False
    allow_skip: bool = True
    skip_reasons: list[str] = Field(default_factory=list)

    # Scheduling
    scheduled_date: date
    scheduled_time: str | None = None  # HH:MM
    time_of_day: TimeOfDay | None = None
    estimated_duration: int | None = None

    status: TaskStatus = TaskStatus.SCHEDULED
    started_at: datetime | None = None

    # Completion
    completed_at: datetime | None = None
    completed_by: str | None = None
    completion_note: str | None = None
    completion_signature: Signature | None = None
    verification_data: VerificationData | None = None
    quality_check_responses: list[QualityCheckResponse] = Field(default_factory=list)
    custom_field_values: dict[str, Any] = Field(default_factory=dict)

    # Skipping
    skipped_at: datetime | None = None
    skipped_by: str | None = None
    skip_reason: str | None = None
    skip_note: str | None = None

    # Issues
    issue_reported: bool = False
    issue_description: str | None = None
    issue_reported_at: datetime | None = None
    issue_reported_by: str | None = None

    # Cancellation / missed
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None
    missed_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_TASK_STATUSES


class CreateTaskInstanceInput(BaseModel):
    """Already-validated input for a manually or template-created task."""

    care_plan_id: str
    template_id: str | None = None
    visit_id: str | None = None
    client_id: str
    assigned_caregiver_id: str | None = None
    name: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    category: TaskCategory
    instructions: str = ""
    scheduled_date: date
    scheduled_time: str | None = None
    time_of_day: TimeOfDay | None = None
    estimated_duration: int | None = None
    required_signature: bool = False
    required_note: bool = False
    allow_skip: bool = True
    skip_reasons: list[str] = Field(default_factory=list)


class CompleteTaskInput(BaseModel):
    completion_note: str | None = Field(default=None, max_length=2000)
    signature: Signature | None = None
    verification_data: VerificationData | None = None
    quality_check_responses: list[QualityCheckResponse] = Field(default_factory=list)
    custom_field_values: dict[str, Any] = Field(default_factory=dict)
