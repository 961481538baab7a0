"""docqa API layer: routes, schemas, and middleware."""

from docqa.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
    validation_error_handler,
)
from docqa.api.routes import router
from docqa.api.schemas import (
    ChatRequest,
    ChatResponse,
    ErrorResponse,
    HealthResponse,
    SourceResponse,
    UploadResponse,
)

__all__ = [
    "ChatRequest",
    "ChatResponse",
    "ErrorHandlingMiddleware",
    "ErrorResponse",
    "HealthResponse",
    "RequestLoggingMiddleware",
    "SourceResponse",
    "UploadResponse",
    "configure_cors",
    "router",
    "validation_error_handler",
]
