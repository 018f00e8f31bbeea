"""Rule-based fraud scoring engine with configuration-declared exclusions."""

from decimal import Decimal

import structlog

from .conditions import evaluate_condition
from .config import FraudConfig, default_config
from .decision import decide
from .models import ChargeContext, FraudRule, RuleSet, ScoreResult

logger = structlog.get_logger()

_ZERO = Decimal("0")
_ONE = Decimal("1")


class RulesEngine:
    """Scores a charge against a RuleSet.

    Scoring is additive over weights (0.0-1.0):
    1. Evaluate every rule independently
    2. Keep triggered rules in RuleSet order
    3. Drop rules whose declared winner also triggered
    4. Sum surviving weights, clamp to [0, 1]
    5. Map the score to a decision via the decline threshold

    The engine holds no per-request state, so one instance can serve
    concurrent requests.
    """

    def __init__(self, config: FraudConfig | None = None) -> None:
        self._config = config or default_config
        # Rules whose failure has already been logged
        self._reported_failures: set[str] = set()

    @property
    def decline_threshold(self) -> Decimal:
        return self._config.decision.decline_threshold

    def _triggers(self, rule: FraudRule, context: ChargeContext) -> bool:
        try:
            return evaluate_condition(rule.condition, context, rule_id=rule.id)
        except Exception:
            # Fail open: the rule counts as not triggered
            if rule.id not in self._reported_failures:
                self._reported_failures.add(rule.id)
                logger.exception("rule_evaluation_error", rule_id=rule.id)
            return False

    def score(self, context: ChargeContext, rules: RuleSet) -> ScoreResult:
        """Evaluate all rules against the charge and return a ScoreResult."""
        triggered = [rule for rule in rules.rules if self._triggers(rule, context)]
        triggered_ids = {rule.id for rule in triggered}

        surviving = [
            rule
            for rule in triggered
            if rules.exclusions.get(rule.id) not in triggered_ids
        ]

        raw = sum((rule.weight for rule in surviving), _ZERO)
        score = min(max(raw, _ZERO), _ONE)
        decision = decide(score, self._config.decision.decline_threshold)

        result = ScoreResult(
            score=score,
            triggered_rule_ids=tuple(rule.id for rule in surviving),
            decision=decision,
        )

        excluded = sorted(triggered_ids - set(result.triggered_rule_ids))
        logger.debug(
            "rules_evaluated",
            raw_score=str(raw),
            score=str(score),
            decision=decision.value,
            triggered=list(result.triggered_rule_ids),
            excluded=excluded,
        )
        return result


_default_engine = RulesEngine()


def score(context: ChargeContext, rules: RuleSet) -> ScoreResult:
    """Score with the default engine configuration."""
    return _default_engine.score(context, rules)
