"""Shared test fixtures for Chargeguard tests."""

import os
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

os.environ.setdefault("OPENAI_API_KEY", "test-api-key")

from src.domains.fraud.explanations import ExplanationCache  # noqa: E402
from src.domains.fraud.models import ChargeContext  # noqa: E402
from src.domains.fraud.ruleset import load_ruleset  # noqa: E402
from src.domains.fraud.scorer import ChargeScorer  # noqa: E402


def make_charge(**kwargs) -> ChargeContext:
    defaults = {
        "amount": Decimal("100.00"),
        "currency": "USD",
        "source": "stripe",
        "email": "a@b.com",
    }
    defaults.update(kwargs)
    return ChargeContext(**defaults)


@pytest.fixture
def default_rules():
    return load_ruleset()


@pytest.fixture
def llm_client():
    client = AsyncMock()
    client.explain = AsyncMock(return_value="Flagged for a high amount.")
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def failing_llm_client():
    from src.domains.fraud.errors import ExternalServiceError

    client = AsyncMock()
    client.explain = AsyncMock(side_effect=ExternalServiceError("quota exceeded"))
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def explanation_cache(llm_client, default_rules):
    return ExplanationCache(llm_client, default_rules)


@pytest.fixture
def charge_scorer(default_rules, explanation_cache):
    return ChargeScorer(default_rules, explanation_cache)
