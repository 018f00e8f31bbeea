"""Charge scoring endpoints."""

from decimal import Decimal

import structlog
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from src.api.dependencies import get_ledger, get_scorer
from src.domains.fraud.ledger import TransactionLedger
from src.domains.fraud.models import ChargeContext, Decision
from src.domains.fraud.scorer import ChargeScorer

logger = structlog.get_logger()
router = APIRouter(prefix="/api/v1", tags=["charges"])


class ChargeRequest(BaseModel):
    amount: Decimal = Field(gt=0)
    currency: str = Field(pattern=r"^[A-Z]{3}$")
    source: str = Field(min_length=1, max_length=64)
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$", max_length=254)


@router.post("/charges")
async def create_charge(
    request: ChargeRequest,
    scorer: ChargeScorer = Depends(get_scorer),  # noqa: B008
    ledger: TransactionLedger = Depends(get_ledger),  # noqa: B008
) -> JSONResponse:
    charge = ChargeContext(**request.model_dump())
    assessment = await scorer.score_charge(charge)
    entry = ledger.record(charge, assessment)

    body = {"transaction_id": entry.transaction_id, **assessment.model_dump(mode="json")}
    if assessment.decision == Decision.DECLINED:
        logger.warning(
            "charge_declined",
            transaction_id=entry.transaction_id,
            score=body["score"],
            triggered=body["triggered_rule_ids"],
        )
        return JSONResponse(status_code=402, content=body)
    return JSONResponse(status_code=200, content=body)


@router.get("/transactions")
async def list_transactions(
    ledger: TransactionLedger = Depends(get_ledger),  # noqa: B008
    limit: int = Query(default=50, ge=1, le=500),
) -> dict:
    entries = ledger.recent(limit)
    return {
        "items": [e.model_dump(mode="json") for e in entries],
        "total": len(ledger),
        "limit": limit,
    }
