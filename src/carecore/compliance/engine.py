"""
Compliance Rule Engine

Evaluates a care plan against the rule set registered for its jurisdiction.

Features:
- Rule sets registered per jurisdiction (TX physician orders, FL RN supervision)
- Unknown jurisdictions evaluate against a permissive empty rule set
- Activation gate adding coordinator and effective date checks
- Static requirement summaries per jurisdiction
"""

from dataclasses import dataclass
from datetime import date
from typing import Callable

import structlog

from carecore.compliance.rules import evaluate_physician_order_rules, evaluate_rn_supervision_rules
from carecore.config import get_settings
from carecore.models import (
    CarePlan,
    ComplianceFinding,
    ComplianceResult,
    FindingSeverity,
    Jurisdiction,
    JurisdictionRequirements,
)

logger = structlog.get_logger(__name__)

RuleFunc = Callable[[CarePlan, date], list[ComplianceFinding]]

GENERAL_REQUIREMENT = "General Requirement"


@dataclass
class RuleSet:
    name: str
    jurisdiction: Jurisdiction
    evaluate: RuleFunc
    requirements: JurisdictionRequirements


def _no_rules(plan: CarePlan, today: date) -> list[ComplianceFinding]:
    return []


RULE_SETS: dict[Jurisdiction, RuleSet] = {}


def register_rule_set(rule_set: RuleSet) -> None:
    """Register (or replace) the rule set for a jurisdiction."""
    RULE_SETS[rule_set.jurisdiction] = rule_set
    logger.debug("Compliance rule set registered", jurisdiction=rule_set.jurisdiction.value, name=rule_set.name)


def get_rule_set(jurisdiction: Jurisdiction) -> RuleSet:
    rule_set = RULE_SETS.get(jurisdiction)
    if rule_set is None:
        return RuleSet(
            name="permissive",
            jurisdiction=jurisdiction,
            evaluate=_no_rules,
            requirements=JurisdictionRequirements(jurisdiction=jurisdiction),
        )
    return rule_set


def _resolve_jurisdiction(plan: CarePlan, jurisdiction: Jurisdiction | None) -> Jurisdiction:
    if jurisdiction is not None:
        return jurisdiction
    if plan.jurisdiction is not None:
        return plan.jurisdiction
    try:
        return Jurisdiction(get_settings().app.default_jurisdiction)
    except ValueError:
        return Jurisdiction.OTHER


def evaluate(
    plan: CarePlan,
    jurisdiction: Jurisdiction | None = None,
    today: date | None = None,
) -> ComplianceResult:
    """
    Evaluate a plan against a jurisdiction's rules.

    Args:
        plan: Plan to evaluate
        jurisdiction: Overrides the plan's own jurisdiction
        today: Reference date for time-based rules

    Returns:
        ComplianceResult; compliant iff no BLOCKING finding
    """
    resolved = _resolve_jurisdiction(plan, jurisdiction)
    today = today or date.today()

    findings = get_rule_set(resolved).evaluate(plan, today)
    result = ComplianceResult.from_findings(resolved, findings)

    logger.debug(
        "Compliance evaluated",
        care_plan_id=plan.id,
        jurisdiction=resolved.value,
        is_compliant=result.is_compliant,
        codes=sorted(result.codes()),
    )
    return result


def validate_activation(
    plan: CarePlan,
    jurisdiction: Jurisdiction | None = None,
    today: date | None = None,
) -> ComplianceResult:
    """Jurisdiction rules plus the general activation requirements."""
    today = today or date.today()
    result = evaluate(plan, jurisdiction, today)
    findings = result.findings

    if not plan.coordinator_id:
        findings.append(ComplianceFinding(
            code="MISSING_COORDINATOR",
            field="coordinator_id",
            message="Care coordinator must be assigned before activation",
            requirement=GENERAL_REQUIREMENT,
            severity=FindingSeverity.BLOCKING,
        ))

    if not plan.effective_date:
        findings.append(ComplianceFinding(
            code="MISSING_EFFECTIVE_DATE",
            field="effective_date",
            message="Effective date must be set before activation",
            requirement=GENERAL_REQUIREMENT,
            severity=FindingSeverity.BLOCKING,
        ))
    elif plan.effective_date > today:
        findings.append(ComplianceFinding(
            code="FUTURE_EFFECTIVE_DATE",
            field="effective_date",
            message="Cannot activate plan with future effective date",
            requirement=GENERAL_REQUIREMENT,
            severity=FindingSeverity.BLOCKING,
        ))

    return ComplianceResult.from_findings(result.jurisdiction, findings)


def jurisdiction_requirements(jurisdiction: Jurisdiction) -> JurisdictionRequirements:
    """Static summary of what a jurisdiction demands of a plan of care."""
    return get_rule_set(jurisdiction).requirements


# =============================================================================
# Built-in rule sets
# =============================================================================

register_rule_set(RuleSet(
    name="physician_order",
    jurisdiction=Jurisdiction.TX,
    evaluate=evaluate_physician_order_rules,
    requirements=JurisdictionRequirements(
        jurisdiction=Jurisdiction.TX,
        requires_physician_order=True,
        requires_emergency_plan=True,
        requires_service_authorization=True,
        max_days_between_reviews=60,
        required_forms=["Form 485", "HHSC Form 1746", "HHSC Form 8606"],
    ),
))

register_rule_set(RuleSet(
    name="rn_supervision",
    jurisdiction=Jurisdiction.FL,
    evaluate=evaluate_rn_supervision_rules,
    requirements=JurisdictionRequirements(
        jurisdiction=Jurisdiction.FL,
        requires_physician_order=True,
        requires_rn_supervision=True,
        requires_rn_delegation=True,
        max_days_between_reviews=60,
        max_days_between_supervisory_visits=30,
        required_forms=["AHCA Form 484", "AHCA Form 1823"],
    ),
))
