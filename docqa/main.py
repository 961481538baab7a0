"""docqa FastAPI application entry point.

Wires together all providers, services, and routes via dependency
injection.  Loads configuration from the environment / ``.env`` and
configures structured logging.  Every component is built once in
:func:`_build_all` and stored on ``app.state``; route handlers read them
through ``Depends`` helpers.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from docqa import __version__
from docqa.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
    validation_error_handler,
)
from docqa.api.routes import router as api_router
from docqa.config.settings import EMBEDDING_DIMENSION, Settings
from docqa.interfaces.llm_provider import ILLMProvider
from docqa.providers.embedding.hash_embedding_provider import HashEmbeddingProvider
from docqa.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
from docqa.providers.extraction.pymupdf_extractor import PyMuPDFTextExtractor
from docqa.providers.llm.anthropic_provider import AnthropicLLMProvider
from docqa.providers.llm.openai_provider import OpenAILLMProvider
from docqa.providers.vector_store.chromadb_provider import ChromaDBProvider, build_chroma_client
from docqa.services.answer_service import AnswerService
from docqa.services.embedding_service import EmbeddingService
from docqa.services.ingestion.chunker import TextChunker
from docqa.services.ingestion.ingestion_service import IngestionService
from docqa.utils.errors import DocQAError
from docqa.utils.logging import configure_logging, get_logger

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Provider selection
# ---------------------------------------------------------------------------


def _build_llm_provider(app_settings: Settings) -> ILLMProvider:
    """Select the generation provider from the configured API keys.

    Priority order: Anthropic -> OpenAI / OpenAI-compatible.  Without any
    key the OpenAI provider is still returned; its calls fail and the
    answer service reports that in the answer text.
    """
    if app_settings.anthropic_api_key:
        return AnthropicLLMProvider(settings=app_settings)
    if not app_settings.openai_api_key:
        logger.warning(
            "llm_not_configured",
            hint="Set ANTHROPIC_API_KEY or OPENAI_API_KEY to enable answers.",
        )
    return OpenAILLMProvider(settings=app_settings)


def _build_embedding_service(app_settings: Settings) -> EmbeddingService:
    """Remote embeddings when an OpenAI(-compatible) key is set, else hash only."""
    fallback = HashEmbeddingProvider(dimension=EMBEDDING_DIMENSION)
    primary = None
    if app_settings.openai_api_key:
        primary = OpenAIEmbeddingProvider(settings=app_settings)
    return EmbeddingService(primary=primary, fallback=fallback)


def _build_all(app_settings: Settings, chroma_client: Any | None = None) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Parameters
    ----------
    app_settings:
        Loaded application settings.
    chroma_client:
        Optional pre-built ChromaDB client (tests pass an on-disk client
        under a temp directory); built from settings when omitted.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    llm = _build_llm_provider(app_settings)
    embedding_service = _build_embedding_service(app_settings)

    client = chroma_client if chroma_client is not None else build_chroma_client(app_settings)
    vector_store = ChromaDBProvider(
        client=client,
        collection_name=app_settings.vector_index_name,
        dimension=EMBEDDING_DIMENSION,
    )

    extractor = PyMuPDFTextExtractor(
        max_recovery_pages=app_settings.extraction_recovery_max_pages,
    )
    chunker = TextChunker(
        chunk_size=app_settings.chunk_size,
        overlap=app_settings.chunk_overlap,
    )

    ingestion_service = IngestionService(
        extractor=extractor,
        chunker=chunker,
        embedding_service=embedding_service,
        vector_store=vector_store,
        batch_size=app_settings.ingest_batch_size,
        concurrent_batches=app_settings.ingest_concurrent_batches,
    )
    answer_service = AnswerService(
        embedding_service=embedding_service,
        vector_store=vector_store,
        llm_provider=llm,
        top_k=app_settings.top_k,
        max_context_chars=app_settings.max_context_chars,
        temperature=app_settings.generation_temperature,
        max_tokens=app_settings.generation_max_tokens,
    )

    # -- Provider registry for /health --
    provider_registry: dict[str, Any] = {
        "llm": llm.get_provider_name(),
        "llm_configured": llm.is_available(),
        "embedding": embedding_service.get_provider_names(),
        "embedding_fallback_only": embedding_service.is_fallback_only,
        "vector_store": vector_store.get_provider_name(),
        "extractor": extractor.get_provider_name(),
    }

    return {
        "settings": app_settings,
        "vector_store": vector_store,
        "ingestion_service": ingestion_service,
        "answer_service": answer_service,
        "provider_registry": provider_registry,
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


def _make_lifespan(app_settings: Settings, components: dict[str, Any] | None):  # noqa: ANN202
    @asynccontextmanager
    async def _lifespan(application: FastAPI):  # noqa: ANN202
        """Build all components on startup and make sure the index exists."""
        built = components if components is not None else _build_all(app_settings)
        for key, value in built.items():
            setattr(application.state, key, value)

        try:
            await built["vector_store"].ensure_index()
        except DocQAError as exc:
            # Uploads retry ensure_index, so the app still starts.
            logger.error("vector_index_unavailable", error=str(exc))

        logger.info(
            "app_startup",
            version=__version__,
            environment=app_settings.app_env,
            providers=built["provider_registry"],
        )

        yield

        logger.info("app_shutdown")

    return _lifespan


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app(
    app_settings: Settings | None = None,
    components: dict[str, Any] | None = None,
) -> FastAPI:
    """Build and configure the FastAPI application.

    Parameters
    ----------
    app_settings:
        Settings to use; defaults to the module-level ``settings``.
    components:
        Pre-built components (as returned by :func:`_build_all`) to install
        on ``app.state`` instead of building them at startup.
    """
    app_settings = app_settings or settings
    application = FastAPI(
        title="docqa API",
        version=__version__,
        description=(
            "Upload a PDF, then ask natural-language questions answered from "
            "its own passages via retrieval-augmented generation."
        ),
        lifespan=_make_lifespan(app_settings, components),
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application, allowed_origins=app_settings.get_cors_origins())

    application.add_exception_handler(RequestValidationError, validation_error_handler)

    # -- API routes --
    application.include_router(api_router)

    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "docqa.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
