"""Middleware — CORS, request logging, error handling."""

from __future__ import annotations

import time
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hookrelay.core.exceptions import (
    AuthenticationError,
    ExternalCallError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    HookRelayError,
    InvalidPayloadError,
    MissingHeadersError,
    ValidationError,
)
from hookrelay.core.logging import get_logger

logger = get_logger(__name__)


def setup_middleware(app: FastAPI) -> None:
    """Attach all middleware to the FastAPI app."""

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_logging(request: Request, call_next):
        """Log every request with timing and a correlation ID."""
        request_id = str(uuid.uuid4())[:8]
        start = time.perf_counter_ns()

        response = await call_next(request)

        duration_ms = (time.perf_counter_ns() - start) // 1_000_000
        logger.info(
            "http_request",
            method=request.method,
            path=str(request.url.path),
            status=response.status_code,
            duration_ms=duration_ms,
            request_id=request_id,
        )
        response.headers["X-Request-ID"] = request_id
        return response


def _error(status_code: int, error: str, exc: HookRelayError) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "detail": exc.detail})


def setup_exception_handlers(app: FastAPI) -> None:
    """Register domain exception → HTTP response mappings.

    Starlette picks the handler registered for the closest class in the
    exception's MRO, so subclasses override their parents' status codes.
    """

    @app.exception_handler(MissingHeadersError)
    async def handle_missing_headers(request: Request, exc: MissingHeadersError):
        return _error(400, "Missing Headers", exc)

    @app.exception_handler(InvalidPayloadError)
    async def handle_invalid_payload(request: Request, exc: InvalidPayloadError):
        return _error(400, "Invalid Payload", exc)

    @app.exception_handler(ValidationError)
    async def handle_validation(request: Request, exc: ValidationError):
        return _error(422, "Validation Error", exc)

    @app.exception_handler(AuthenticationError)
    async def handle_auth(request: Request, exc: AuthenticationError):
        return _error(401, "Unauthorized", exc)

    @app.exception_handler(GitHubNotFoundError)
    async def handle_not_found(request: Request, exc: GitHubNotFoundError):
        return _error(404, "Not Found", exc)

    @app.exception_handler(GitHubRateLimitError)
    async def handle_rate_limit(request: Request, exc: GitHubRateLimitError):
        return _error(429, "Rate Limited", exc)

    @app.exception_handler(ExternalCallError)
    async def handle_external(request: Request, exc: ExternalCallError):
        return _error(502, "Upstream Error", exc)

    @app.exception_handler(HookRelayError)
    async def handle_hookrelay(request: Request, exc: HookRelayError):
        logger.error("request_failed", error_type=type(exc).__name__, error=str(exc))
        return _error(500, "Internal Error", exc)
