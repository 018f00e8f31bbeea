"""FastAPI application entry point for Chargeguard."""

import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.middleware.error_handler import global_exception_handler
from src.api.middleware.logging import StructuredLoggingMiddleware
from src.api.routes.cache import router as cache_router
from src.api.routes.charges import router as charges_router
from src.api.routes.fraud import router as fraud_router
from src.api.routes.health import router as health_router
from src.config import Settings, settings
from src.domains.fraud.config import FraudConfig
from src.domains.fraud.explanations import ExplanationCache
from src.domains.fraud.ledger import TransactionLedger
from src.domains.fraud.llm_client import ExplanationClient, OpenAIExplanationClient
from src.domains.fraud.rules_engine import RulesEngine
from src.domains.fraud.ruleset import load_ruleset
from src.domains.fraud.scorer import ChargeScorer
from src.shared.logging import setup_logging

logger = structlog.get_logger()

# Track app start time for uptime calculation
APP_START_TIME: float = 0.0


@dataclass
class Components:
    client: ExplanationClient
    explanation_cache: ExplanationCache
    ledger: TransactionLedger
    scorer: ChargeScorer


def build_components(
    cfg: Settings,
    fraud_config: FraudConfig | None = None,
    client: ExplanationClient | None = None,
) -> Components:
    """Wire the scoring core. Raises ConfigurationError on a bad rule file."""
    fraud_config = fraud_config or FraudConfig.from_env()
    rules = load_ruleset(cfg.rules_path)

    if client is None:
        client = OpenAIExplanationClient(
            api_key=cfg.openai_api_key,
            model=cfg.openai_model,
            base_url=cfg.openai_base_url,
            timeout_seconds=cfg.llm_timeout_seconds,
            max_tokens=cfg.llm_max_tokens,
            temperature=cfg.llm_temperature,
            system_prompt=fraud_config.explanation.system_prompt,
        )

    cache = ExplanationCache(client, rules, config=fraud_config.explanation)
    scorer = ChargeScorer(rules, cache, engine=RulesEngine(config=fraud_config))
    return Components(
        client=client,
        explanation_cache=cache,
        ledger=TransactionLedger(max_entries=cfg.ledger_max_entries),
        scorer=scorer,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: startup and shutdown logic."""
    global APP_START_TIME
    APP_START_TIME = time.time()
    setup_logging(settings.log_level, json_logs=not settings.debug)

    logger.info(
        "chargeguard_starting",
        app_name=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
    )

    components = build_components(settings)
    app.state.scorer = components.scorer
    app.state.explanation_cache = components.explanation_cache
    app.state.ledger = components.ledger

    if not settings.openai_api_key:
        logger.warning("explanation_service_not_configured")

    yield

    await components.client.aclose()
    logger.info("chargeguard_shutting_down", cached_explanations=components.explanation_cache.size)


app = FastAPI(
    title="Chargeguard",
    description="Fraud scoring for payment charges with cached risk explanations",
    version=settings.app_version,
    lifespan=lifespan,
)

# CORS for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.debug else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Structured logging middleware
app.add_middleware(StructuredLoggingMiddleware)

# Global exception handler
app.add_exception_handler(Exception, global_exception_handler)

# Register routers
app.include_router(health_router)
app.include_router(charges_router)
app.include_router(cache_router)
app.include_router(fraud_router)


def get_uptime() -> int:
    """Get application uptime in seconds."""
    if APP_START_TIME == 0.0:
        return 0
    return int(time.time() - APP_START_TIME)


def run() -> None:
    """Serve the API with uvicorn on the configured host and port."""
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
