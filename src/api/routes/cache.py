"""Explanation cache management endpoints."""

from fastapi import APIRouter, Depends

from src.api.dependencies import get_explanation_cache
from src.domains.fraud.explanations import ExplanationCache

router = APIRouter(prefix="/api/v1/cache", tags=["cache"])


@router.post("/clear")
async def clear_cache(
    cache: ExplanationCache = Depends(get_explanation_cache),  # noqa: B008
) -> dict:
    report = await cache.clear()
    return report.model_dump()


@router.get("/stats")
async def cache_stats(
    cache: ExplanationCache = Depends(get_explanation_cache),  # noqa: B008
) -> dict:
    stats = await cache.stats()
    return stats.model_dump()
