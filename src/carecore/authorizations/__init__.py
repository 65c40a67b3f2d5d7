"""
CareCore Service Authorizations

Unit ledger for payer authorizations.
"""

from carecore.authorizations.ledger import (
    SERVICE_CODE_BY_CATEGORY,
    AuthorizationLedger,
    refresh_status,
    service_code_for,
    units_for_minutes,
)

__all__ = [
    "SERVICE_CODE_BY_CATEGORY",
    "AuthorizationLedger",
    "refresh_status",
    "service_code_for",
    "units_for_minutes",
]
