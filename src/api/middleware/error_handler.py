"""Global exception handling."""

import structlog
from fastapi import Request
from fastapi.responses import JSONResponse

from src.domains.fraud.errors import FraudEngineError

logger = structlog.get_logger()

# Checked in order; first match wins
_CLIENT_ERRORS: list[tuple[type[Exception], int, str]] = [
    (ValueError, 400, "bad_request"),
    (LookupError, 404, "not_found"),
]


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    request_id = getattr(request.state, "request_id", "unknown")

    for exc_type, status_code, error in _CLIENT_ERRORS:
        if isinstance(exc, exc_type):
            logger.warning(error, request_id=request_id, error=str(exc))
            return JSONResponse(
                status_code=status_code,
                content={"error": error, "message": str(exc), "request_id": request_id},
            )

    if isinstance(exc, FraudEngineError):
        logger.exception("scoring_core_error", request_id=request_id, error=str(exc))
        message = "The charge could not be scored"
    else:
        logger.exception("unhandled_exception", request_id=request_id, error=str(exc))
        message = "An unexpected error occurred"

    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "message": message,
            "request_id": request_id,
        },
    )
