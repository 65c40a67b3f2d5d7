"""
Service Authorization Models

Payer-issued ceilings on billable units for a client's services.
"""

from datetime import date
from decimal import Decimal
from enum import Enum

from pydantic import Field, model_validator

from carecore.models.base import AuditedEntity


class AuthorizationStatus(str, Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    EXPIRING_SOON = "EXPIRING_SOON"
    EXPIRED = "EXPIRED"
    SUSPENDED = "SUSPENDED"
    TERMINATED = "TERMINATED"


USABLE_AUTHORIZATION_STATUSES = frozenset({
    AuthorizationStatus.ACTIVE,
    AuthorizationStatus.EXPIRING_SOON,
})


class ServiceAuthorization(AuditedEntity):
    """
    Authorized / consumed / remaining units against one service code.

    Invariant: units_used + units_remaining == authorized_units - adjusted_units.
    Balances only change through the ledger's atomic deduction.
    """

    authorization_number: str
    client_id: str
    organization_id: str
    care_plan_id: str | None = None
    payer: str | None = None

    service_code: str
    authorized_units: Decimal = Field(ge=0)
    units_used: Decimal = Field(default=Decimal("0"), ge=0)
    units_remaining: Decimal | None = None
    adjusted_units: Decimal = Field(default=Decimal("0"), ge=0)

    effective_from: date
    effective_to: date
    status: AuthorizationStatus = AuthorizationStatus.ACTIVE

    @model_validator(mode="after")
    def _derive_remaining(self) -> "ServiceAuthorization":
        if self.units_remaining is None:
            # object.__setattr__ avoids re-entering assignment validation
            object.__setattr__(
                self,
                "units_remaining",
                self.authorized_units - self.adjusted_units - self.units_used,
            )
        return self

    def covers(self, on_date: date) -> bool:
        return self.effective_from <= on_date <= self.effective_to
