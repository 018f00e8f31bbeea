"""Health and readiness endpoints."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from src.config import settings

router = APIRouter(tags=["health"])


def _rule_count(request: Request) -> int:
    scorer = getattr(request.app.state, "scorer", None)
    return len(scorer.rules) if scorer is not None else 0


@router.get("/health")
async def health(request: Request) -> dict:
    from src.main import get_uptime

    return {
        "status": "healthy",
        "version": settings.app_version,
        "uptime_seconds": get_uptime(),
        "rule_count": _rule_count(request),
    }


@router.get("/ready")
async def ready(request: Request) -> JSONResponse:
    rule_count = _rule_count(request)
    rules_loaded = rule_count > 0

    return JSONResponse(
        status_code=200 if rules_loaded else 503,
        content={
            "status": "ready" if rules_loaded else "degraded",
            "rules_loaded": rules_loaded,
            "rule_count": rule_count,
            "explanation_service_configured": bool(settings.openai_api_key),
        },
    )
