"""Custom exception hierarchy for docqa.

All application exceptions inherit from :class:`DocQAError`, which carries
an optional ``provider_name`` so error handlers can identify which external
service (e.g. "openai", "chromadb", "pymupdf") caused the failure, and an
HTTP ``status_code`` used by the API error middleware.

    DocQAError  (base)
    +-- InvalidInputError        (bad upload / missing question, 4xx)
    +-- ExtractionFailedError    (PDF text unrecoverable, 422)
    |   +-- EmptyContentError    (fewer than 10 usable characters, 422)
    +-- EmbeddingDegradedError   (remote embedding call failed; always
    |                             handled by the local fallback)
    +-- StorageFailureError      (vector store write or query failed, 503)
    +-- GenerationFailureError   (LLM call failed; turned into an answer)

A status below 500 means the caller has to fix the request; 500 and above
means something went wrong on the server side.
"""


class DocQAError(Exception):
    """Base exception for all docqa errors.

    The ``__str__`` method prefixes the provider name in brackets for
    structured log output, e.g. ``[openai] Rate limit exceeded``.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Caller errors
# ---------------------------------------------------------------------------

class InvalidInputError(DocQAError):
    """Raised for a missing, empty, oversized, or wrong-type upload or query.

    The default status is 400; uploads use 413 (too large) and 415 (not a
    PDF) so clients can tell the cases apart.
    """

    def __init__(
        self,
        message: str = "Invalid request",
        provider_name: str | None = None,
        status_code: int = 400,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
        self.status_code = status_code


# ---------------------------------------------------------------------------
# Extraction errors
# ---------------------------------------------------------------------------

class ExtractionFailedError(DocQAError):
    """Raised when document text cannot be recovered, even in degraded mode."""

    status_code = 422

    def __init__(
        self,
        message: str = "Failed to extract text from the document",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class EmptyContentError(ExtractionFailedError):
    """Raised when extraction yields too little text (image-only or blank PDF)."""

    def __init__(
        self,
        message: str = "The document appears to be empty or contains no extractable text",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# External service errors
# ---------------------------------------------------------------------------

class EmbeddingDegradedError(DocQAError):
    """Raised by remote embedding providers.

    :class:`~docqa.services.embedding_service.EmbeddingService` catches
    this and switches to the deterministic hash embedding, so it never
    reaches an API client.
    """

    def __init__(
        self,
        message: str = "Embedding API call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class StorageFailureError(DocQAError):
    """Raised when a vector-store write or query fails.

    Partial writes made before the failure are not rolled back.
    """

    status_code = 503

    def __init__(
        self,
        message: str = "Vector store operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class GenerationFailureError(DocQAError):
    """Raised when an LLM API call fails or returns an empty response."""

    def __init__(
        self,
        message: str = "Answer generation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
