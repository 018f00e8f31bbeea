"""Accessors for the components owned by the application lifespan."""

from fastapi import Request

from src.domains.fraud.explanations import ExplanationCache
from src.domains.fraud.ledger import TransactionLedger
from src.domains.fraud.scorer import ChargeScorer


def get_scorer(request: Request) -> ChargeScorer:
    return request.app.state.scorer


def get_explanation_cache(request: Request) -> ExplanationCache:
    return request.app.state.explanation_cache


def get_ledger(request: Request) -> TransactionLedger:
    return request.app.state.ledger
