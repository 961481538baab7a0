"""Integration tests for the document ingestion pipeline.

Runs real PDF bytes through PyMuPDF extraction, the sentence chunker,
the embedding service and an on-disk ChromaDB collection.  The remote
embedding provider always fails, so every vector comes from the local
hash fallback and no network call is made.
"""

from __future__ import annotations

import math

import pytest

from docqa.models.rag import ChunkRecord
from docqa.providers.extraction.pymupdf_extractor import PyMuPDFTextExtractor
from docqa.providers.vector_store.chromadb_provider import ChromaDBProvider
from docqa.services.embedding_service import EmbeddingService
from docqa.services.ingestion.chunker import TextChunker
from docqa.services.ingestion.ingestion_service import IngestionService
from docqa.utils.errors import EmptyContentError, StorageFailureError

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _build_ingestion_service(
    vector_store: ChromaDBProvider,
    embedding_service: EmbeddingService,
    batch_size: int = 50,
    concurrent_batches: int = 3,
) -> IngestionService:
    return IngestionService(
        extractor=PyMuPDFTextExtractor(),
        chunker=TextChunker(chunk_size=800, overlap=100),
        embedding_service=embedding_service,
        vector_store=vector_store,
        batch_size=batch_size,
        concurrent_batches=concurrent_batches,
    )


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestPdfIngestionE2E:
    """PDF bytes -> IngestionService -> chunks stored in ChromaDB."""

    @pytest.mark.asyncio
    async def test_ingest_with_failing_remote_embeddings(
        self, vector_store, failing_embedding_provider, sample_pdf_bytes
    ) -> None:
        embedding_service = EmbeddingService(primary=failing_embedding_provider)
        service = _build_ingestion_service(vector_store, embedding_service)

        result = await service.ingest("hubble.pdf", sample_pdf_bytes)

        assert result.chunk_count > 1
        assert result.fallback_embeddings == result.chunk_count
        assert await vector_store.count(result.document_id) == result.chunk_count

    @pytest.mark.asyncio
    async def test_stored_records_have_expected_ids_and_unit_vectors(
        self, vector_store, sample_pdf_bytes
    ) -> None:
        service = _build_ingestion_service(vector_store, EmbeddingService(primary=None))
        result = await service.ingest("hubble.pdf", sample_pdf_bytes)

        collection = await vector_store._get_collection()
        stored = collection.get(
            where={"documentId": result.document_id},
            include=["embeddings", "metadatas"],
        )

        expected_ids = {ChunkRecord.make_id(result.document_id, i) for i in range(result.chunk_count)}
        assert set(stored["ids"]) == expected_ids
        for vector in stored["embeddings"]:
            values = [float(v) for v in vector]
            assert len(values) == 768
            assert math.isclose(math.sqrt(sum(v * v for v in values)), 1.0, rel_tol=1e-4)
        for meta in stored["metadatas"]:
            assert meta["fileName"] == "hubble.pdf"
            assert meta["endIndex"] > meta["startIndex"]

    @pytest.mark.asyncio
    async def test_first_sentence_retrieves_first_chunk(
        self, vector_store, sample_text, sample_pdf_bytes
    ) -> None:
        embedding_service = EmbeddingService(primary=None)
        service = _build_ingestion_service(vector_store, embedding_service)
        result = await service.ingest("hubble.pdf", sample_pdf_bytes)

        first_sentence = sample_text.split(". ")[0] + "."
        query_vector = (await embedding_service.embed_one(first_sentence)).vector
        hits = await vector_store.query(query_vector, top_k=5, document_id=result.document_id)

        assert hits
        by_index = {hit.record.chunk_index: hit for hit in hits}
        assert 0 in by_index
        assert by_index[0].score >= 0.0
        assert by_index[0].record.text.startswith(first_sentence)

    @pytest.mark.asyncio
    async def test_small_batches_and_waves(self, vector_store, sample_pdf_bytes) -> None:
        service = _build_ingestion_service(
            vector_store,
            EmbeddingService(primary=None),
            batch_size=1,
            concurrent_batches=2,
        )

        result = await service.ingest("hubble.pdf", sample_pdf_bytes)

        assert await vector_store.count(result.document_id) == result.chunk_count

    @pytest.mark.asyncio
    async def test_blank_pdf_writes_nothing(self, vector_store, pdf_factory) -> None:
        service = _build_ingestion_service(vector_store, EmbeddingService(primary=None))

        with pytest.raises(EmptyContentError):
            await service.ingest("blank.pdf", pdf_factory(None, pages=3))

        await vector_store.ensure_index()
        assert await vector_store.count() == 0

    @pytest.mark.asyncio
    async def test_storage_failure_keeps_earlier_batches(
        self, vector_store, sample_pdf_bytes, monkeypatch
    ) -> None:
        service = _build_ingestion_service(
            vector_store,
            EmbeddingService(primary=None),
            batch_size=1,
            concurrent_batches=1,
        )
        real_upsert = vector_store.upsert
        calls = 0

        async def flaky_upsert(records):
            nonlocal calls
            calls += 1
            if calls == 3:
                raise StorageFailureError(message="write rejected", provider_name="chromadb")
            await real_upsert(records)

        monkeypatch.setattr(vector_store, "upsert", flaky_upsert)

        with pytest.raises(StorageFailureError):
            await service.ingest("hubble.pdf", sample_pdf_bytes)

        assert await vector_store.count() == 2
