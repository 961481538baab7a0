"""Structured logging for docqa, built on structlog.

Every event is a snake_case name plus key/value context.  Two kinds of
context are carried implicitly through ``structlog.contextvars``:

- ``request_id``: bound per HTTP request by ``RequestLoggingMiddleware``
  (taken from the ``X-Request-ID`` header, or generated) and echoed back
  in the response header.
- ``document_id`` / ``file_name``: bound for the duration of one ingestion
  run via :func:`document_context`.

so provider and service modules never pass them around explicitly.

Development output goes through structlog's ConsoleRenderer; production
(``json_output=True``) emits one JSON object per line with tracebacks as
structured dicts.  Standard-library records from uvicorn, chromadb, httpx
and the SDK clients use the same renderer, and the chattiest of those
loggers are held at WARNING.
"""

from __future__ import annotations

import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager

import structlog

REQUEST_ID_HEADER = "X-Request-ID"

# Emit per-call INFO records (HTTP requests, telemetry, collection access).
_NOISY_LOGGERS = (
    "chromadb",
    "httpx",
    "httpcore",
    "openai",
    "anthropic",
    "posthog",
    "uvicorn.access",
)


def configure_logging(log_level: str = "INFO", json_output: bool = False) -> None:
    """Configure structlog and route stdlib logging through it.

    Parameters
    ----------
    log_level:
        Minimum level name (DEBUG, INFO, WARNING, ERROR).
    json_output:
        Emit JSON lines instead of coloured console output; ``main`` turns
        this on when ``APP_ENV=production``.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.dev.set_exc_info,
    ]

    if json_output:
        shared_processors.append(structlog.processors.dict_tracebacks)
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a logger bound with ``logger_name``, configuring defaults first if needed."""
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(logger_name=name)


# ---------------------------------------------------------------------------
# Request / document context
# ---------------------------------------------------------------------------


def new_request_id() -> str:
    return uuid.uuid4().hex[:16]


def bind_request_context(request_id: str, **fields: object) -> None:
    """Start a fresh context for one HTTP request."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id, **fields)


@contextmanager
def document_context(document_id: str, **fields: object) -> Iterator[None]:
    """Tag every event logged inside the block with *document_id*."""
    with structlog.contextvars.bound_contextvars(document_id=document_id, **fields):
        yield
