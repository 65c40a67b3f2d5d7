"""
RN-Supervision Rule Set (FL)

Florida AHCA Chapter 59A-8 and Statute 400.487: physician orders, RN
supervision of skilled services, RN delegation of nursing tasks and a
comprehensive assessment.
"""

from datetime import date

from carecore.config import get_settings
from carecore.models import (
    CarePlan,
    CarePlanStatus,
    CarePlanType,
    ComplianceFinding,
    FindingSeverity,
    InterventionCategory,
)

AHCA_0095 = "AHCA 59A-8.0095"
AHCA_0215 = "AHCA 59A-8.0215"

SUPERVISED_PLAN_TYPES = frozenset({CarePlanType.SKILLED_NURSING, CarePlanType.THERAPY})

# Nursing tasks that non-licensed staff may only perform under RN delegation
DELEGATED_INTERVENTIONS = frozenset({
    InterventionCategory.MEDICATION_ADMINISTRATION,
    InterventionCategory.WOUND_CARE,
    InterventionCategory.VITAL_SIGNS_MONITORING,
})


def _finding(code: str, field: str, message: str, requirement: str, severity: FindingSeverity) -> ComplianceFinding:
    return ComplianceFinding(code=code, field=field, message=message, requirement=requirement, severity=severity)


def evaluate_rn_supervision_rules(plan: CarePlan, today: date) -> list[ComplianceFinding]:
    """
    Evaluate a plan against the FL rules.

    Args:
        plan: Plan to evaluate
        today: Reference date for the overdue supervisory visit check

    Returns:
        Findings in rule order
    """
    data = plan.jurisdiction_data
    settings = get_settings().app
    findings: list[ComplianceFinding] = []

    if not data.ordering_provider_name or not data.order_date:
        findings.append(_finding(
            "FL_MISSING_PHYSICIAN_ORDERS", "ordering_provider_name",
            "Physician orders required for home health services",
            "Florida Statute 400.487", FindingSeverity.BLOCKING,
        ))

    requires_supervision = plan.plan_type in SUPERVISED_PLAN_TYPES
    if requires_supervision and not data.rn_supervisor_id:
        findings.append(_finding(
            "FL_MISSING_RN_SUPERVISOR", "rn_supervisor_id",
            "RN supervisor required for skilled nursing and therapy services",
            AHCA_0095, FindingSeverity.BLOCKING,
        ))

    if requires_supervision and plan.status == CarePlanStatus.ACTIVE:
        if not data.last_supervisory_visit_date:
            findings.append(_finding(
                "FL_MISSING_SUPERVISORY_VISIT_DATE", "last_supervisory_visit_date",
                "RN supervisory visit date should be documented for active plans",
                AHCA_0095, FindingSeverity.WARNING,
            ))
        if not data.next_supervisory_visit_due:
            findings.append(_finding(
                "FL_MISSING_NEXT_SUPERVISORY_VISIT", "next_supervisory_visit_due",
                "Next RN supervisory visit due date should be established",
                AHCA_0095, FindingSeverity.WARNING,
            ))
        elif data.next_supervisory_visit_due < today:
            findings.append(_finding(
                "FL_SUPERVISORY_VISIT_OVERDUE", "next_supervisory_visit_due",
                "RN supervisory visit is overdue",
                AHCA_0095, FindingSeverity.CRITICAL,
            ))

    has_delegated_tasks = any(i.category in DELEGATED_INTERVENTIONS for i in plan.interventions)
    if has_delegated_tasks and not data.rn_delegation_id:
        findings.append(_finding(
            "FL_MISSING_RN_DELEGATION", "rn_delegation_id",
            "RN delegation required for nursing tasks performed by non-licensed personnel",
            "AHCA 59A-8.0216", FindingSeverity.BLOCKING,
        ))

    standard_interval = settings.standard_review_interval_days
    if (data.plan_review_interval_days or standard_interval) > standard_interval:
        findings.append(_finding(
            "FL_REVIEW_INTERVAL_EXCEEDS_STANDARD", "plan_review_interval_days",
            f"Plan review interval exceeds standard {standard_interval}-day requirement",
            AHCA_0215, FindingSeverity.WARNING,
        ))

    if len((plan.assessment_summary or "").strip()) < settings.min_assessment_length:
        findings.append(_finding(
            "FL_INCOMPLETE_ASSESSMENT", "assessment_summary",
            "Comprehensive assessment summary required",
            AHCA_0215, FindingSeverity.BLOCKING,
        ))

    if not plan.goals:
        findings.append(_finding(
            "FL_MISSING_GOALS", "goals",
            "Care plan must include specific, measurable goals",
            AHCA_0215, FindingSeverity.BLOCKING,
        ))

    if not plan.interventions:
        findings.append(_finding(
            "FL_MISSING_INTERVENTIONS", "interventions",
            "Care plan must include planned interventions",
            AHCA_0215, FindingSeverity.BLOCKING,
        ))

    if not data.plan_of_care_form_number:
        findings.append(_finding(
            "FL_MISSING_FORM_NUMBER", "plan_of_care_form_number",
            "AHCA Form 484 or equivalent plan of care form number should be documented",
            AHCA_0215, FindingSeverity.WARNING,
        ))

    if not data.infection_control_plan_reviewed:
        findings.append(_finding(
            "FL_INFECTION_CONTROL_NOT_REVIEWED", "infection_control_plan_reviewed",
            "Infection control plan review should be documented",
            "AHCA 59A-8", FindingSeverity.INFO,
        ))

    return findings
