"""API middleware: CORS, request logging, and error handling.

Starlette middleware is a stack (last added runs first).  ``create_app``
adds ErrorHandlingMiddleware before RequestLoggingMiddleware, so requests
flow Client -> RequestLogging -> ErrorHandling -> route handler, and the
logging middleware sees the final status code of converted errors.
"""

from __future__ import annotations

import time

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from docqa.api.schemas import ErrorResponse
from docqa.utils.errors import DocQAError
from docqa.utils.logging import (
    REQUEST_ID_HEADER,
    bind_request_context,
    get_logger,
    new_request_id,
)

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Add CORS middleware to the FastAPI application.

    Parameters
    ----------
    app:
        The FastAPI application instance.
    allowed_origins:
        Explicit list of allowed origins.  Defaults to ``["*"]``.
    """
    origins = allowed_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Browsers reject credentialed requests against a wildcard origin.
        allow_credentials=origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )


# ---------------------------------------------------------------------------
# Request Logging
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status code, and duration.

    Each request gets a fresh structlog context holding ``request_id``
    (the caller's ``X-Request-ID`` header, or a generated one), so every
    event logged while serving it carries the id.  The id is echoed in the
    response header.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or new_request_id()
        bind_request_context(request_id)
        start = time.perf_counter()
        response: Response | None = None

        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            status_code = response.status_code if response else 500
            logger.info(
                "http_request",
                method=request.method,
                path=str(request.url.path),
                status=status_code,
                duration_ms=duration_ms,
            )


# ---------------------------------------------------------------------------
# Error Handling
# ---------------------------------------------------------------------------


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Convert ``DocQAError`` subclasses into structured JSON errors.

    The response status comes from the exception's ``status_code``: 4xx
    for requests the caller must fix, 5xx for server-side failures.  Stack
    traces are logged server-side only.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except DocQAError as exc:
            log = logger.warning if exc.status_code < 500 else logger.error
            log(
                "application_error",
                error_type=type(exc).__name__,
                message=exc.message,
                provider=exc.provider_name,
                status=exc.status_code,
                path=str(request.url.path),
            )
            body = ErrorResponse(error=type(exc).__name__, detail=exc.message)
            return JSONResponse(status_code=exc.status_code, content=body.model_dump())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies as 400 with the first problem."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    detail = f"{location}: {first.get('msg', 'invalid value')}" if location else first.get(
        "msg", "Invalid request"
    )
    logger.warning(
        "request_validation_failed",
        path=str(request.url.path),
        errors=len(errors),
        detail=detail,
    )
    body = ErrorResponse(error="InvalidInputError", detail=detail)
    return JSONResponse(status_code=400, content=body.model_dump())
