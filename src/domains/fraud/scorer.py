"""Charge scoring pipeline: rules -> decision -> explanation."""

from decimal import Decimal

import structlog

from .explanations import ExplanationCache
from .models import ChargeAssessment, ChargeContext, RuleSet
from .rules_engine import RulesEngine

logger = structlog.get_logger()


class ChargeScorer:
    """Orchestrates scoring and explanation for a single charge.

    The decision never depends on the explanation service: a failed call
    only changes the explanation text.
    """

    def __init__(
        self,
        rules: RuleSet,
        cache: ExplanationCache,
        engine: RulesEngine | None = None,
    ) -> None:
        self._rules = rules
        self._cache = cache
        self._engine = engine or RulesEngine()

    @property
    def rules(self) -> RuleSet:
        return self._rules

    @property
    def decline_threshold(self) -> Decimal:
        return self._engine.decline_threshold

    async def score_charge(self, charge: ChargeContext) -> ChargeAssessment:
        result = self._engine.score(charge, self._rules)

        explanation = await self._cache.get_explanation(
            result.triggered_rule_ids, result.decision, score=result.score
        )

        logger.info(
            "charge_scored",
            score=float(result.score),
            decision=result.decision.value,
            triggered=list(result.triggered_rule_ids),
        )

        return ChargeAssessment(
            score=result.score,
            triggered_rule_ids=result.triggered_rule_ids,
            decision=result.decision,
            explanation=explanation,
        )
