"""FastAPI API routes for docqa.

Endpoint              Method  Description
-----------------------------------------------------------------
/api/upload           POST    Upload a PDF -> extract, chunk, embed, store
/api/chat             POST    Ask a question about an uploaded document
/api/health           GET     Liveness check + configured providers

Services are resolved from ``app.state`` (populated at startup by
``docqa.main._build_all``) through ``Annotated[..., Depends(...)]`` types.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, Request, UploadFile

from docqa import __version__
from docqa.api.schemas import (
    ChatRequest,
    ChatResponse,
    ErrorResponse,
    HealthResponse,
    SourceResponse,
    UploadResponse,
)
from docqa.config.settings import Settings
from docqa.services.answer_service import AnswerService
from docqa.services.ingestion.ingestion_service import IngestionService
from docqa.utils.errors import InvalidInputError
from docqa.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api")

_ALLOWED_CONTENT_TYPES = frozenset({"application/pdf"})

# Uploads are read in 64 KB pieces so oversized files are rejected
# without buffering the whole payload.
_UPLOAD_CHUNK_SIZE = 64 * 1024

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    413: {"model": ErrorResponse},
    415: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


# ---------------------------------------------------------------------------
# Dependency helpers
# ---------------------------------------------------------------------------


def _get_ingestion_service(request: Request) -> IngestionService:
    return request.app.state.ingestion_service


def _get_answer_service(request: Request) -> AnswerService:
    return request.app.state.answer_service


def _get_settings(request: Request) -> Settings:
    return request.app.state.settings


IngestionServiceDep = Annotated[IngestionService, Depends(_get_ingestion_service)]
AnswerServiceDep = Annotated[AnswerService, Depends(_get_answer_service)]
SettingsDep = Annotated[Settings, Depends(_get_settings)]


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.post(
    "/upload",
    response_model=UploadResponse,
    responses=_ERROR_RESPONSES,
    summary="Upload a PDF for question answering",
)
async def upload_pdf(
    pdf: UploadFile,
    ingestion_service: IngestionServiceDep,
    settings: SettingsDep,
) -> UploadResponse:
    """Accept a PDF, ingest it, and return its document id."""
    content_type = (pdf.content_type or "").split(";")[0].strip().lower()
    if content_type not in _ALLOWED_CONTENT_TYPES:
        raise InvalidInputError(
            message=f"Unsupported file type: {content_type or 'unknown'}. Only PDF files are allowed.",
            status_code=415,
        )

    max_bytes = settings.max_upload_bytes
    pieces: list[bytes] = []
    total_size = 0
    while True:
        piece = await pdf.read(_UPLOAD_CHUNK_SIZE)
        if not piece:
            break
        total_size += len(piece)
        if total_size > max_bytes:
            raise InvalidInputError(
                message=f"File too large: maximum size is {settings.max_upload_mb} MB.",
                status_code=413,
            )
        pieces.append(piece)
    raw = b"".join(pieces)
    del pieces

    if not raw:
        raise InvalidInputError(message="Uploaded file is empty")

    file_name = pdf.filename or "document.pdf"
    result = await ingestion_service.ingest(file_name, raw)

    logger.info(
        "pdf_uploaded",
        document_id=result.document_id,
        file_name=file_name,
        bytes=total_size,
        chunk_count=result.chunk_count,
    )
    return UploadResponse(
        document_id=result.document_id,
        file_name=result.file_name,
        text_length=result.text_length,
        chunk_count=result.chunk_count,
        fallback_embeddings=result.fallback_embeddings,
        message=f"PDF processed successfully into {result.chunk_count} chunks.",
    )


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses=_ERROR_RESPONSES,
    summary="Ask a question about an uploaded document",
)
async def chat(body: ChatRequest, answer_service: AnswerServiceDep) -> ChatResponse:
    """Answer a question using passages from the given document only."""
    answer = await answer_service.answer(body.question, body.document_id)
    return ChatResponse(
        answer_text=answer.answer_text,
        sources=[
            SourceResponse(
                preview_text=src.preview_text,
                score=src.score,
                sequence_index=src.chunk_index,
            )
            for src in answer.sources
        ],
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Application health check",
)
async def health_check(request: Request) -> HealthResponse:
    """Return liveness, version, and the configured providers."""
    providers = dict(getattr(request.app.state, "provider_registry", {}))
    return HealthResponse(
        status="OK",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=__version__,
        providers=providers,
    )
