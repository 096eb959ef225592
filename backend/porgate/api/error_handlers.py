"""Error Handlers: render gate failures as one JSON error envelope.

Invariants:
    - Every response body has the shape {"error": {"code", "message", "category", "severity", ...}}
    - Issuance denials (422) and admin rejections (400/403) log at WARNING;
      feed and database outages (503) log at ERROR
    - FEED_UNAVAILABLE with a known retry_after_ms sets a Retry-After header (seconds)
    - Request validation failures are 400 VALIDATION_ERROR with per-field details
    - The catch-all never echoes exception text to the client

Design Decisions:
    - Handlers registered from one function so main.py stays a wiring file
      (ADR: ExMA import fan-out < 10)
"""

import logging
import math

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from porgate.core.errors import ErrorSeverity, IssuanceDeniedError, PorGateError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PorGateError, handle_gate_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)


def _log_extra(request: Request, exc: PorGateError) -> dict:
    extra = {
        "error_code": exc.code,
        "path": request.url.path,
        "asset": exc.context.asset,
        "caller": exc.context.caller,
        "feed": exc.context.feed,
    }
    if isinstance(exc, IssuanceDeniedError):
        extra["deny_reason"] = exc.reason.value
    return extra


def _retry_headers(exc: PorGateError) -> dict[str, str] | None:
    retry_ms = exc.context.retry_after_ms
    if exc.http_status != status.HTTP_503_SERVICE_UNAVAILABLE or not retry_ms:
        return None
    return {"Retry-After": str(math.ceil(retry_ms / 1000))}


async def handle_gate_error(request: Request, exc: PorGateError) -> JSONResponse:
    log = logger.error if exc.http_status >= 500 else logger.warning
    log(f"{exc.code}: {exc.message}", extra=_log_extra(request, exc))
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_response(),
        headers=_retry_headers(exc),
    )


async def handle_validation_error(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(loc) for loc in e["loc"]),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in exc.errors()
    ]
    logger.warning(
        f"Rejected request on {request.url.path}: "
        f"{', '.join(d['field'] for d in details)}",
        extra={"path": request.url.path, "error_code": "VALIDATION_ERROR"},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Invalid request data",
                "category": "validation",
                "severity": ErrorSeverity.ERROR.value,
                "details": details,
            },
        },
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all: logs the traceback, returns a generic 500."""
    logger.error(
        f"Unhandled exception on {request.url.path}: {exc}",
        exc_info=True,
        extra={"path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "category": "internal",
                "severity": ErrorSeverity.CRITICAL.value,
            },
        },
    )
