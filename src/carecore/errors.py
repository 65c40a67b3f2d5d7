"""
CareCore Errors

Exception hierarchy shared by the plan, task and ledger services.

- ValidationError: a business rule was violated; caller-correctable
- PermissionDeniedError: capability check failed or cross-organization access
- NotFoundError: entity missing or soft-deleted
- StaleWriteError: optimistic version check failed
- AuthorizationExhaustedError / NoMatchingAuthorizationError: ledger failures
"""

from typing import Any


class CareCoreError(Exception):
    """Base error for the care delivery core."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(CareCoreError):
    """
    Input or state violates a business rule.

    `errors` lists every violated rule, not just the first one.
    `findings` carries compliance findings when activation was refused.
    """

    def __init__(
        self,
        message: str,
        errors: list[str] | None = None,
        findings: list | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.errors = errors or []
        self.findings = findings or []


class PermissionDeniedError(CareCoreError):
    """Capability check failed."""
    pass


class NotFoundError(CareCoreError):
    """Referenced entity does not exist or is soft-deleted."""

    def __init__(self, message: str, entity: str | None = None, entity_id: str | None = None):
        super().__init__(message, {"entity": entity, "id": entity_id})
        self.entity = entity
        self.entity_id = entity_id


class StaleWriteError(CareCoreError):
    """Entity was modified by someone else since it was read."""

    def __init__(self, entity: str, entity_id: str, expected_version: int, actual_version: int):
        super().__init__(
            f"{entity} {entity_id} was modified concurrently",
            {"expected_version": expected_version, "actual_version": actual_version},
        )
        self.expected_version = expected_version
        self.actual_version = actual_version


class LedgerError(CareCoreError):
    """Service authorization ledger failure."""
    pass


class AuthorizationExhaustedError(LedgerError):
    """Not enough units remain on the authorization."""
    pass


class NoMatchingAuthorizationError(LedgerError):
    """No active authorization covers the requested service."""
    pass
