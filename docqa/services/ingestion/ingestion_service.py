"""Orchestrator for the document ingestion pipeline.

Pipeline stages: **extract -> chunk -> embed -> store**.

    1. ITextExtractor       -- raw PDF bytes to normalized text
    2. TextChunker          -- text to overlapping sentence windows
    3. EmbeddingService     -- chunk text to 768-dim vectors (remote or
                               fallback; never fails)
    4. IVectorStoreProvider -- records upserted under ``{doc}_{index}`` ids

Chunks are grouped into batches of ``batch_size``.  Up to
``concurrent_batches`` batches are embedded at once as one *wave*; once the
wave is joined its batches are written one after another, then the next
wave starts.  A storage failure stops the run and is re-raised; chunks
already written stay in the store.

All collaborators are injected via the constructor.
"""

from __future__ import annotations

import time
import uuid
from typing import TYPE_CHECKING

from docqa.models.rag import ChunkRecord, IngestionResult, TextChunk
from docqa.services.ingestion.chunker import TextChunker
from docqa.utils.concurrency import gather_in_waves
from docqa.utils.errors import EmptyContentError, InvalidInputError, StorageFailureError
from docqa.utils.logging import document_context, get_logger

if TYPE_CHECKING:
    from docqa.interfaces.text_extractor import ITextExtractor
    from docqa.interfaces.vector_store_provider import IVectorStoreProvider
    from docqa.services.embedding_service import EmbeddingService

logger = get_logger(__name__)


class IngestionService:
    """Turns an uploaded document into stored, searchable chunk records.

    Parameters
    ----------
    extractor:
        Converts the uploaded bytes into normalized text.
    chunker:
        Splits the text into overlapping windows.
    embedding_service:
        Embeds chunk text, degrading to the local hash on remote failure.
    vector_store:
        Persists the embedded chunk records.
    batch_size:
        Number of chunks embedded per request (default 50).
    concurrent_batches:
        Number of batches embedded concurrently per wave (default 3).
    """

    def __init__(
        self,
        extractor: ITextExtractor,
        chunker: TextChunker,
        embedding_service: EmbeddingService,
        vector_store: IVectorStoreProvider,
        batch_size: int = 50,
        concurrent_batches: int = 3,
    ) -> None:
        self._extractor = extractor
        self._chunker = chunker
        self._embedding_service = embedding_service
        self._vector_store = vector_store
        self._batch_size = max(1, batch_size)
        self._concurrent_batches = max(1, concurrent_batches)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def ingest(self, file_name: str, raw_bytes: bytes) -> IngestionResult:
        """Ingest one document end to end.

        Parameters
        ----------
        file_name:
            The original name of the uploaded file (stored as metadata).
        raw_bytes:
            The complete document payload.

        Returns
        -------
        IngestionResult
            The new document id plus statistics about the run.

        Raises
        ------
        InvalidInputError
            If the payload is empty.
        ExtractionFailedError
            If no usable text can be extracted (nothing is written).
        StorageFailureError
            If a vector-store write fails (earlier batches stay written).
        """
        if not raw_bytes:
            raise InvalidInputError(message="Uploaded file is empty")

        t0 = time.monotonic()
        text = await self._extractor.extract(raw_bytes)
        chunks = self._chunker.chunk(text)
        if not chunks:
            raise EmptyContentError(provider_name=self._extractor.get_provider_name())

        document_id = uuid.uuid4().hex
        with document_context(document_id, file_name=file_name):
            logger.info(
                "ingestion_started",
                text_length=len(text),
                chunk_count=len(chunks),
            )
            stored, fallback_count = await self._store_chunks(document_id, file_name, chunks)

        elapsed = round(time.monotonic() - t0, 3)
        logger.info(
            "ingestion_complete",
            document_id=document_id,
            chunk_count=stored,
            fallback_embeddings=fallback_count,
            elapsed_seconds=elapsed,
        )
        return IngestionResult(
            document_id=document_id,
            file_name=file_name,
            text_length=len(text),
            chunk_count=stored,
            fallback_embeddings=fallback_count,
            elapsed_seconds=elapsed,
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _store_chunks(
        self, document_id: str, file_name: str, chunks: list[TextChunk]
    ) -> tuple[int, int]:
        """Embed and upsert *chunks* in waves; return (stored, fallback) counts."""
        await self._vector_store.ensure_index()

        batches = [
            chunks[start : start + self._batch_size]
            for start in range(0, len(chunks), self._batch_size)
        ]

        async def _embed_batch(batch: list[TextChunk]) -> tuple[list[ChunkRecord], int]:
            embeddings = await self._embedding_service.embed_many([c.text for c in batch])
            records = [
                ChunkRecord.from_chunk(chunk, document_id, file_name, emb.vector)
                for chunk, emb in zip(batch, embeddings, strict=True)
            ]
            return records, sum(1 for emb in embeddings if emb.is_fallback)

        stored = 0
        fallback_count = 0
        try:
            async for wave in gather_in_waves(batches, _embed_batch, self._concurrent_batches):
                for records, degraded in wave:
                    await self._vector_store.upsert(records)
                    stored += len(records)
                    fallback_count += degraded
                logger.debug("ingestion_wave_stored", stored=stored, total=len(chunks))
        except StorageFailureError as exc:
            logger.error(
                "ingestion_partial_failure",
                stored=stored,
                total=len(chunks),
                error=str(exc),
            )
            raise
        return stored, fallback_count
