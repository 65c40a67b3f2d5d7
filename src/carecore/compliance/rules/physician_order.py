"""
Physician-Order Rule Set (TX)

Texas 26 TAC §558 home and community support services requirements:
physician-ordered plan of care, Medicaid service authorization, CDS
employer authority and periodic review.
"""

from datetime import date

from carecore.config import get_settings
from carecore.models import CarePlan, CarePlanStatus, ComplianceFinding, FindingSeverity, OrderSource

TAC_558_287 = "26 TAC §558.287"
HHSC_CDS = "HHSC CDS Program Requirements"


def _finding(code: str, field: str, message: str, requirement: str, severity: FindingSeverity) -> ComplianceFinding:
    return ComplianceFinding(code=code, field=field, message=message, requirement=requirement, severity=severity)


def evaluate_physician_order_rules(plan: CarePlan, today: date) -> list[ComplianceFinding]:
    """
    Evaluate a plan against the TX rules.

    Args:
        plan: Plan to evaluate
        today: Evaluation date (unused by the current TX rules)

    Returns:
        Findings in rule order
    """
    data = plan.jurisdiction_data
    standard_interval = get_settings().app.standard_review_interval_days
    findings: list[ComplianceFinding] = []

    if not data.ordering_provider_name or not data.order_date:
        findings.append(_finding(
            "TX_MISSING_PHYSICIAN_ORDER", "ordering_provider_name",
            "Plan of care must be ordered by physician or authorized professional",
            TAC_558_287, FindingSeverity.BLOCKING,
        ))

    if data.ordering_provider_name and not data.ordering_provider_license:
        findings.append(_finding(
            "TX_MISSING_PROVIDER_LICENSE", "ordering_provider_license",
            "Ordering provider license number is required",
            TAC_558_287, FindingSeverity.BLOCKING,
        ))

    if data.order_source == OrderSource.VERBAL and not data.verbal_order_authenticated_at:
        findings.append(_finding(
            "TX_VERBAL_ORDER_NOT_AUTHENTICATED", "verbal_order_authenticated_at",
            "Verbal orders must be authenticated by physician within required timeframe",
            TAC_558_287, FindingSeverity.CRITICAL,
        ))

    if data.medicaid_program and not data.service_authorization_form:
        findings.append(_finding(
            "TX_MISSING_SERVICE_AUTHORIZATION", "service_authorization_form",
            "Service authorization (HHSC Form 4100 series) required for Medicaid services",
            "HHSC Medicaid Provider Agreement", FindingSeverity.BLOCKING,
        ))

    if (data.plan_review_interval_days or standard_interval) > standard_interval:
        findings.append(_finding(
            "TX_REVIEW_INTERVAL_EXCEEDS_STANDARD", "plan_review_interval_days",
            f"Plan review interval exceeds standard {standard_interval}-day requirement",
            TAC_558_287, FindingSeverity.WARNING,
        ))

    if plan.status == CarePlanStatus.ACTIVE and not data.next_review_due:
        findings.append(_finding(
            "TX_MISSING_NEXT_REVIEW_DATE", "next_review_due",
            "Next review due date should be established for active plans",
            TAC_558_287, FindingSeverity.WARNING,
        ))

    if not data.disaster_plan_on_file:
        findings.append(_finding(
            "TX_MISSING_DISASTER_PLAN", "disaster_plan_on_file",
            "Emergency preparedness plan should be documented",
            "26 TAC §558 Emergency Preparedness", FindingSeverity.WARNING,
        ))

    # Consumer Directed Services
    if data.is_consumer_directed:
        if not data.employer_authority_id:
            findings.append(_finding(
                "TX_CDS_MISSING_EMPLOYER_AUTHORITY", "employer_authority_id",
                "Consumer Directed Services requires documented employer authority",
                HHSC_CDS, FindingSeverity.BLOCKING,
            ))
        if not data.financial_management_service_id:
            findings.append(_finding(
                "TX_CDS_MISSING_FMS", "financial_management_service_id",
                "Consumer Directed Services requires Financial Management Service provider",
                HHSC_CDS, FindingSeverity.BLOCKING,
            ))

    if not plan.goals:
        findings.append(_finding(
            "TX_MISSING_GOALS", "goals",
            "Care plan must include measurable goals",
            TAC_558_287, FindingSeverity.BLOCKING,
        ))

    if not plan.interventions:
        findings.append(_finding(
            "TX_MISSING_INTERVENTIONS", "interventions",
            "Care plan must include specific interventions",
            TAC_558_287, FindingSeverity.BLOCKING,
        ))

    return findings
