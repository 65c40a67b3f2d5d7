"""
Compliance Result Models

Findings are returned to the caller, never raised and never persisted here.
"""

from enum import Enum

from pydantic import BaseModel, Field

from carecore.models.care_plan import Jurisdiction


class FindingSeverity(str, Enum):
    BLOCKING = "BLOCKING"
    CRITICAL = "CRITICAL"
    WARNING = "WARNING"
    INFO = "INFO"


ERROR_SEVERITIES = frozenset({FindingSeverity.BLOCKING, FindingSeverity.CRITICAL})


class ComplianceFinding(BaseModel):
    """A severity-ranked statement about one regulatory requirement."""

    code: str
    field: str
    message: str
    requirement: str
    severity: FindingSeverity

    @property
    def is_blocking(self) -> bool:
        return self.severity == FindingSeverity.BLOCKING


class ComplianceResult(BaseModel):
    """Outcome of evaluating a plan against a jurisdiction's rule set."""

    jurisdiction: Jurisdiction
    errors: list[ComplianceFinding] = Field(default_factory=list)
    warnings: list[ComplianceFinding] = Field(default_factory=list)

    @classmethod
    def from_findings(
        cls,
        jurisdiction: Jurisdiction,
        findings: list[ComplianceFinding],
    ) -> "ComplianceResult":
        return cls(
            jurisdiction=jurisdiction,
            errors=[f for f in findings if f.severity in ERROR_SEVERITIES],
            warnings=[f for f in findings if f.severity not in ERROR_SEVERITIES],
        )

    @property
    def findings(self) -> list[ComplianceFinding]:
        return [*self.errors, *self.warnings]

    @property
    def blocking(self) -> list[ComplianceFinding]:
        return [f for f in self.errors if f.is_blocking]

    @property
    def is_compliant(self) -> bool:
        return not self.blocking

    def codes(self) -> set[str]:
        return {f.code for f in self.findings}


class JurisdictionRequirements(BaseModel):
    """Static summary of what a jurisdiction demands of a plan of care."""

    jurisdiction: Jurisdiction
    requires_physician_order: bool = False
    requires_rn_supervision: bool = False
    requires_rn_delegation: bool = False
    requires_emergency_plan: bool = False
    requires_service_authorization: bool = False
    max_days_between_reviews: int | None = None
    max_days_between_supervisory_visits: int | None = None
    required_forms: list[str] = Field(default_factory=list)
