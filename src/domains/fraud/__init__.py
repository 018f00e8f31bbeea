"""Fraud detection domain."""

from .decision import DECLINE_THRESHOLD, decide
from .errors import ConfigurationError, EvaluationError, ExternalServiceError
from .explanations import ExplanationCache, build_prompt, cache_key, fallback_explanation
from .ledger import TransactionLedger
from .llm_client import ExplanationClient, OpenAIExplanationClient
from .models import (
    ChargeAssessment,
    ChargeContext,
    Decision,
    FraudRule,
    RuleSet,
    ScoreResult,
)
from .rules_engine import RulesEngine, score
from .ruleset import DEFAULT_RULESET_CONFIG, load_ruleset, ruleset_from_mapping
from .scorer import ChargeScorer

__all__ = [
    "DECLINE_THRESHOLD",
    "DEFAULT_RULESET_CONFIG",
    "ChargeAssessment",
    "ChargeContext",
    "ChargeScorer",
    "ConfigurationError",
    "Decision",
    "EvaluationError",
    "ExplanationCache",
    "ExplanationClient",
    "ExternalServiceError",
    "FraudRule",
    "OpenAIExplanationClient",
    "RuleSet",
    "RulesEngine",
    "ScoreResult",
    "TransactionLedger",
    "build_prompt",
    "cache_key",
    "decide",
    "fallback_explanation",
    "load_ruleset",
    "ruleset_from_mapping",
    "score",
]
