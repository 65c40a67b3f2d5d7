"""Activation readiness checks independent of jurisdiction."""

from datetime import date

from carecore.models import CarePlan


def check_activation_readiness(plan: CarePlan, today: date | None = None) -> list[str]:
    """
    Return every reason the plan is not ready to go live.

    Args:
        plan: Plan about to be activated
        today: Reference date for the effective/expiration checks

    Returns:
        Human-readable violations; empty when the plan is ready
    """
    today = today or date.today()
    errors = []

    if not plan.goals:
        errors.append("Care plan must have at least one goal")

    if not plan.interventions:
        errors.append("Care plan must have at least one intervention")

    if not plan.coordinator_id:
        errors.append("Care plan must have an assigned coordinator")

    if plan.effective_date and plan.effective_date > today:
        errors.append("Care plan effective date cannot be in the future")

    if plan.expiration_date and plan.expiration_date <= today:
        errors.append("Care plan expiration date must be in the future")

    return errors
