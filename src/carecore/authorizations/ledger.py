"""
Service Authorization Ledger

Tracks authorized / consumed / remaining units against payer authorizations
and deducts units atomically when documented work maps to a billable code.
"""

import math
from datetime import date, timedelta
from decimal import Decimal

import structlog

from carecore.auth import Permission, PermissionPolicy, UserContext, require_permission, require_same_organization
from carecore.config import get_settings
from carecore.errors import (
    AuthorizationExhaustedError,
    NoMatchingAuthorizationError,
    NotFoundError,
    ValidationError,
)
from carecore.models import (
    AuthorizationStatus,
    ServiceAuthorization,
    TaskCategory,
    TaskInstance,
)
from carecore.models.authorization import USABLE_AUTHORIZATION_STATUSES
from carecore.storage import AuthorizationRepository

logger = structlog.get_logger(__name__)


# HCPCS codes billed for each task category; unlisted categories are not billable
SERVICE_CODE_BY_CATEGORY: dict[TaskCategory, str] = {
    TaskCategory.PERSONAL_HYGIENE: "T1019",  # Personal care services
    TaskCategory.BATHING: "T1019",
    TaskCategory.DRESSING: "T1019",
    TaskCategory.GROOMING: "T1019",
    TaskCategory.TOILETING: "T1019",
    TaskCategory.MOBILITY: "T1019",
    TaskCategory.TRANSFERRING: "T1019",
    TaskCategory.AMBULATION: "T1019",
    TaskCategory.FEEDING: "T1019",
    TaskCategory.MEDICATION: "T1019",
    TaskCategory.MONITORING: "T1019",
    TaskCategory.MEAL_PREPARATION: "S5130",  # Homemaker services
    TaskCategory.HOUSEKEEPING: "S5130",
    TaskCategory.LAUNDRY: "S5130",
    TaskCategory.SHOPPING: "S5130",
    TaskCategory.COMPANIONSHIP: "S5135",  # Companion services
    TaskCategory.TRANSPORTATION: "T2003",  # Non-emergency transportation
}

UNIT_MINUTES = 15


def service_code_for(category: TaskCategory) -> str | None:
    """Map a task category to its billable service code."""
    return SERVICE_CODE_BY_CATEGORY.get(category)


def units_for_minutes(minutes: int) -> Decimal:
    """Convert a duration to 15-minute billing units, rounding up."""
    return Decimal(math.ceil(minutes / UNIT_MINUTES))


def refresh_status(
    authorization: ServiceAuthorization,
    today: date,
    expiring_soon_days: int | None = None,
) -> AuthorizationStatus:
    """
    Compute the time-derived status of an authorization.

    SUSPENDED, TERMINATED and PENDING are set by the payer and left alone.
    """
    if authorization.status not in USABLE_AUTHORIZATION_STATUSES:
        return authorization.status
    if authorization.effective_to < today:
        return AuthorizationStatus.EXPIRED

    window = expiring_soon_days
    if window is None:
        window = get_settings().app.authorization_expiring_soon_days
    if authorization.effective_to <= today + timedelta(days=window):
        return AuthorizationStatus.EXPIRING_SOON
    return AuthorizationStatus.ACTIVE


class AuthorizationLedger:
    """
    Unit ledger over an AuthorizationRepository.

    Features:
    - Atomic conditional deduction
    - Applicable-authorization lookup by task category
    - Status refresh from the validity window
    """

    def __init__(self, repository: AuthorizationRepository, permissions: PermissionPolicy):
        self.repository = repository
        self.permissions = permissions

    async def get_authorization(self, authorization_id: str, context: UserContext) -> ServiceAuthorization:
        require_permission(self.permissions, context, Permission.AUTHORIZATIONS_READ)

        authorization = await self.repository.get(authorization_id)
        if authorization is None or authorization.is_deleted:
            raise NotFoundError("Service authorization not found", "ServiceAuthorization", authorization_id)
        require_same_organization(context, authorization.organization_id, "service authorization")
        return authorization

    async def deduct_units(
        self,
        authorization_id: str,
        amount: Decimal | int,
        context: UserContext,
    ) -> ServiceAuthorization:
        """
        Deduct `amount` units in a single conditional write.

        Raises:
            ValidationError: amount is not positive
            AuthorizationExhaustedError: fewer than `amount` units remained at write time
        """
        require_permission(self.permissions, context, Permission.AUTHORIZATIONS_DEDUCT)

        amount = Decimal(amount)
        if amount <= 0:
            raise ValidationError("Deduction amount must be positive", [f"amount={amount}"])

        existing = await self.repository.get(authorization_id)
        if existing is None or existing.is_deleted:
            raise NotFoundError("Service authorization not found", "ServiceAuthorization", authorization_id)
        require_same_organization(context, existing.organization_id, "service authorization")

        updated = await self.repository.deduct_units(authorization_id, amount, updated_by=context.user_id)
        if updated is None:
            logger.warning(
                "Authorization units exhausted",
                authorization_id=authorization_id,
                requested=str(amount),
            )
            raise AuthorizationExhaustedError(
                "Insufficient authorized units remaining",
                {"authorization_id": authorization_id, "requested": str(amount)},
            )

        logger.info(
            "Authorization units deducted",
            authorization_id=authorization_id,
            amount=str(amount),
            units_remaining=str(updated.units_remaining),
        )
        return updated

    async def find_applicable_authorization(
        self,
        client_id: str,
        category: TaskCategory,
        on_date: date,
    ) -> ServiceAuthorization:
        """
        Select the authorization covering a task.

        Candidates match the mapped service code, are usable on `on_date` and
        still have units; the one expiring soonest wins.

        Raises:
            NoMatchingAuthorizationError: category is not billable or nothing matches
        """
        service_code = service_code_for(category)
        if service_code is None:
            raise NoMatchingAuthorizationError(
                f"Task category {category.value} has no billable service code",
                {"category": category.value},
            )

        candidates = [
            a for a in await self.repository.list_for_client(client_id)
            if a.service_code == service_code
            and refresh_status(a, on_date) in USABLE_AUTHORIZATION_STATUSES
            and a.covers(on_date)
            and a.units_remaining > 0
        ]
        if not candidates:
            raise NoMatchingAuthorizationError(
                f"No active authorization for service {service_code}",
                {"client_id": client_id, "service_code": service_code, "date": on_date.isoformat()},
            )

        return min(candidates, key=lambda a: a.effective_to)

    async def deduct_for_task(
        self,
        task: TaskInstance,
        units: Decimal | int,
        context: UserContext,
    ) -> ServiceAuthorization:
        """Look up the applicable authorization for `task` and deduct from it."""
        authorization = await self.find_applicable_authorization(
            task.client_id, task.category, task.scheduled_date,
        )
        return await self.deduct_units(authorization.id, units, context)

    async def refresh_statuses(self, client_id: str, today: date) -> list[ServiceAuthorization]:
        """Persist time-derived status changes for a client's authorizations."""
        changed = []
        for authorization in await self.repository.list_for_client(client_id):
            status = refresh_status(authorization, today)
            if status != authorization.status:
                updated = await self.repository.update(
                    authorization.model_copy(update={"status": status}),
                    authorization.version,
                )
                changed.append(updated)
                logger.info(
                    "Authorization status changed",
                    authorization_id=authorization.id,
                    status=status.value,
                )
        return changed
