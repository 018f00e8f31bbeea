"""Fraud scoring configuration with sensible defaults."""

import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from .errors import ConfigurationError


@dataclass
class DecisionPolicyConfig:
    # score >= decline_threshold is declined
    decline_threshold: Decimal = Decimal("0.5")


@dataclass
class ExplanationConfig:
    accepted_fallback: str = (
        "The charge was accepted. No explanation is available right now; "
        "the risk signals listed with this charge were within acceptable limits."
    )
    declined_fallback: str = (
        "The charge was declined because its combined fraud risk signals "
        "reached the decline threshold. A detailed explanation is unavailable right now."
    )
    system_prompt: str = (
        "You are a payment fraud analyst. Explain in two or three plain sentences "
        "why a charge received its risk assessment. Do not invent signals."
    )


@dataclass
class FraudConfig:
    decision: DecisionPolicyConfig = field(default_factory=DecisionPolicyConfig)
    explanation: ExplanationConfig = field(default_factory=ExplanationConfig)

    @classmethod
    def from_env(cls) -> "FraudConfig":
        """Load config with env var overrides. Env vars use FRAUD_ prefix."""
        config = cls()

        if v := os.getenv("FRAUD_DECLINE_THRESHOLD"):
            config.decision.decline_threshold = _parse_threshold(v)

        if v := os.getenv("FRAUD_ACCEPTED_FALLBACK"):
            config.explanation.accepted_fallback = v
        if v := os.getenv("FRAUD_DECLINED_FALLBACK"):
            config.explanation.declined_fallback = v

        return config


def _parse_threshold(raw: str) -> Decimal:
    try:
        threshold = Decimal(raw)
    except InvalidOperation as e:
        raise ConfigurationError(f"FRAUD_DECLINE_THRESHOLD is not a number: {raw!r}") from e
    if not threshold.is_finite() or not Decimal("0") <= threshold <= Decimal("1"):
        raise ConfigurationError(f"FRAUD_DECLINE_THRESHOLD must be within [0, 1], got {raw}")
    return threshold


# Module-level default instance
default_config = FraudConfig()
