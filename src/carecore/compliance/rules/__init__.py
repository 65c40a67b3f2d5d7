"""Per-jurisdiction compliance rule sets."""

from carecore.compliance.rules.physician_order import evaluate_physician_order_rules
from carecore.compliance.rules.rn_supervision import evaluate_rn_supervision_rules

__all__ = [
    "evaluate_physician_order_rules",
    "evaluate_rn_supervision_rules",
]
