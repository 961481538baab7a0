"""Utility modules for docqa.

- **errors** -- exception hierarchy rooted at DocQAError; every class
  carries the HTTP status the API reports for it.
- **logging** -- structlog setup (console in development, JSON in
  production) plus request and document context binding.
- **concurrency** -- wave-based bounded fan-out for batch work.
- **text_normalizer** -- whitespace / non-printable cleanup for PDF text.
"""

from docqa.utils.concurrency import gather_in_waves
from docqa.utils.errors import (
    DocQAError,
    EmbeddingDegradedError,
    EmptyContentError,
    ExtractionFailedError,
    GenerationFailureError,
    InvalidInputError,
    StorageFailureError,
)
from docqa.utils.logging import configure_logging, document_context, get_logger
from docqa.utils.text_normalizer import normalize_extracted_text

__all__ = [
    "DocQAError",
    "EmbeddingDegradedError",
    "EmptyContentError",
    "ExtractionFailedError",
    "GenerationFailureError",
    "InvalidInputError",
    "StorageFailureError",
    "configure_logging",
    "document_context",
    "gather_in_waves",
    "get_logger",
    "normalize_extracted_text",
]
