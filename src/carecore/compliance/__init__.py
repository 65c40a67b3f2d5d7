"""
CareCore Compliance

Per-jurisdiction regulatory validation of care plans.
"""

from carecore.compliance.engine import (
    RULE_SETS,
    RuleSet,
    evaluate,
    get_rule_set,
    jurisdiction_requirements,
    register_rule_set,
    validate_activation,
)

__all__ = [
    "RULE_SETS",
    "RuleSet",
    "evaluate",
    "get_rule_set",
    "jurisdiction_requirements",
    "register_rule_set",
    "validate_activation",
]
