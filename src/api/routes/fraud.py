"""Fraud rule introspection endpoints."""

from fastapi import APIRouter, Depends

from src.api.dependencies import get_scorer
from src.domains.fraud.scorer import ChargeScorer

router = APIRouter(prefix="/api/v1/fraud", tags=["fraud"])


@router.get("/rules")
async def list_rules(
    scorer: ChargeScorer = Depends(get_scorer),  # noqa: B008
) -> dict:
    """Return the loaded rules, exclusions and decline threshold."""
    rules = scorer.rules
    return {
        "rule_count": len(rules),
        "rules": [rule.model_dump(mode="json") for rule in rules.rules],
        "exclusions": dict(rules.exclusions),
        "decline_threshold": float(scorer.decline_threshold),
    }
