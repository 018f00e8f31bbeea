"""Score -> decision mapping."""

from decimal import Decimal

from .config import default_config
from .models import Decision

# Built-in default. FRAUD_DECLINE_THRESHOLD reaches RulesEngine through
# FraudConfig.from_env, not this constant.
DECLINE_THRESHOLD: Decimal = default_config.decision.decline_threshold


def decide(score: Decimal | float, threshold: Decimal = DECLINE_THRESHOLD) -> Decision:
    """Declined when score >= threshold, accepted otherwise."""
    if not isinstance(score, Decimal):
        score = Decimal(str(score))
    if score >= threshold:
        return Decision.DECLINED
    return Decision.ACCEPTED
