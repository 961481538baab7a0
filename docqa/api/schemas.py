"""Pydantic request/response schemas for the docqa HTTP API.

Field names are snake_case in Python and camelCase on the wire
(``document_id`` <-> ``documentId``), matching the browser client.
FastAPI serializes response models by alias, so handlers can construct
these models with Python names.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Upload
# ---------------------------------------------------------------------------


class UploadResponse(_CamelModel):
    """Result of a successful PDF upload."""

    success: bool = True
    document_id: str
    file_name: str
    text_length: int
    chunk_count: int
    fallback_embeddings: int = 0
    message: str


# ---------------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------------


class ChatRequest(_CamelModel):
    """A question about one uploaded document.

    ``message`` is accepted as an alias of ``question``.
    """

    question: str = Field(
        ...,
        min_length=1,
        max_length=4000,
        validation_alias=AliasChoices("question", "message"),
    )
    document_id: str = Field(..., min_length=1, max_length=200)


class SourceResponse(_CamelModel):
    """A supporting passage returned with an answer."""

    preview_text: str
    score: float
    sequence_index: int


class ChatResponse(_CamelModel):
    """Generated answer plus the passages it was based on."""

    success: bool = True
    answer_text: str
    sources: list[SourceResponse] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Health / errors
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    """Application liveness and configured providers."""

    status: str = "OK"
    timestamp: str
    version: str
    providers: dict[str, Any] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
