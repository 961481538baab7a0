"""Integration tests for scoped retrieval across several ingested documents.

Two PDFs are ingested into the same ChromaDB collection; questions are
answered through AnswerService and must only ever see passages of the
document they name.
"""

from __future__ import annotations

import pytest

from docqa.providers.extraction.pymupdf_extractor import PyMuPDFTextExtractor
from docqa.services.answer_service import NO_RELEVANT_INFO_ANSWER, AnswerService
from docqa.services.embedding_service import EmbeddingService
from docqa.services.ingestion.chunker import TextChunker
from docqa.services.ingestion.ingestion_service import IngestionService

_RECIPE_TEXT = " ".join(
    [
        "Preheat the oven to two hundred degrees before mixing the dough.",
        "Combine flour, yeast, salt and warm water in a large bowl.",
        "Knead the dough for ten minutes until it becomes smooth and elastic.",
        "Let the dough rise in a warm place for one hour.",
        "Shape the loaf and bake it for thirty five minutes until golden.",
    ]
    * 6
)


@pytest.fixture
def pipeline(vector_store, mock_llm):
    embedding_service = EmbeddingService(primary=None)
    ingestion = IngestionService(
        extractor=PyMuPDFTextExtractor(),
        chunker=TextChunker(chunk_size=400, overlap=50),
        embedding_service=embedding_service,
        vector_store=vector_store,
    )
    answers = AnswerService(
        embedding_service=embedding_service,
        vector_store=vector_store,
        llm_provider=mock_llm,
        top_k=5,
    )
    return ingestion, answers


class TestScopedRetrieval:
    @pytest.mark.asyncio
    async def test_sources_come_from_requested_document_only(
        self, pipeline, vector_store, sample_pdf_bytes, pdf_factory
    ) -> None:
        ingestion, answers = pipeline
        telescope = await ingestion.ingest("hubble.pdf", sample_pdf_bytes)
        recipe = await ingestion.ingest("bread.pdf", pdf_factory(_RECIPE_TEXT))

        question = "How long should the dough rise?"
        hits = await vector_store.query(
            (await EmbeddingService(primary=None).embed_one(question)).vector,
            top_k=5,
            document_id=telescope.document_id,
        )
        assert hits
        assert all(hit.record.document_id == telescope.document_id for hit in hits)

        answer = await answers.answer(question, recipe.document_id)
        assert answer.sources
        assert all(src.chunk_index < recipe.chunk_count for src in answer.sources)

    @pytest.mark.asyncio
    async def test_context_passed_to_llm_is_document_scoped(
        self, pipeline, sample_pdf_bytes, pdf_factory, mock_llm
    ) -> None:
        ingestion, answers = pipeline
        await ingestion.ingest("hubble.pdf", sample_pdf_bytes)
        recipe = await ingestion.ingest("bread.pdf", pdf_factory(_RECIPE_TEXT))

        await answers.answer("When was the telescope launched?", recipe.document_id)

        prompt = mock_llm.complete.call_args.kwargs["user_prompt"]
        assert "Hubble" not in prompt
        assert "dough" in prompt

    @pytest.mark.asyncio
    async def test_at_most_top_k_sources(self, pipeline, sample_pdf_bytes) -> None:
        ingestion, answers = pipeline
        result = await ingestion.ingest("hubble.pdf", sample_pdf_bytes)
        assert result.chunk_count > 5

        answer = await answers.answer("What did the astronauts install?", result.document_id)

        assert len(answer.sources) == 5
        scores = [src.score for src in answer.sources]
        assert scores == sorted(scores, reverse=True)

    @pytest.mark.asyncio
    async def test_unknown_document_after_ingest(self, pipeline, sample_pdf_bytes, mock_llm) -> None:
        ingestion, answers = pipeline
        await ingestion.ingest("hubble.pdf", sample_pdf_bytes)

        answer = await answers.answer("Anything at all?", "no-such-document")

        assert answer.answer_text == NO_RELEVANT_INFO_ANSWER
        mock_llm.complete.assert_not_called()
