"""Data models for the document ingestion and retrieval pipeline.

Pydantic v2 models for chunks, stored records, embeddings, retrieval
results, and answers.  All models are frozen: a chunk or an answer is
never mutated after creation.

Lifecycle of the data:

    1. INGESTION: a PDF's normalized text is split into :class:`TextChunk`
       windows (chunk_index 0..n-1, in text order).
    2. EMBEDDING: each chunk's text becomes an :class:`Embedding`, tagged
       with whether it came from the remote model or the local fallback.
    3. STORAGE: a :class:`ChunkRecord` (id + vector + metadata) is upserted
       into the vector store.  The store is the only source of truth.
    4. RETRIEVAL: a question is embedded and matched against the records of
       one document, producing :class:`RetrievedChunk` results.
    5. GENERATION: retrieved texts become LLM context; the reply and its
       supporting :class:`SourceChunk` list form an :class:`Answer`.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# TextChunk -- output of the chunker.
# ---------------------------------------------------------------------------
class TextChunk(BaseModel):
    """A contiguous window of a document's normalized text.

    ``start_index`` / ``end_index`` are exact character offsets into the
    text handed to the chunker: ``text == source[start_index:end_index]``.
    """

    model_config = ConfigDict(frozen=True)

    chunk_index: int = Field(ge=0, description="0-based position of the chunk within its document.")
    text: str = Field(description="The chunk's textual content.")
    start_index: int = Field(ge=0, description="Offset of the first character in the source text.")
    end_index: int = Field(ge=0, description="Offset one past the last character in the source text.")

    def estimated_start(self, chunk_size: int, overlap: int) -> int:
        """Return the legacy *estimated* start offset.

        Older clients computed offsets as ``index * (chunk_size - overlap)``.
        This is only an approximation of where the chunk begins and drifts
        further from the true position with every chunk; prefer
        :attr:`start_index`.
        """
        return self.chunk_index * (chunk_size - overlap)


# ---------------------------------------------------------------------------
# Embedding -- tagged result of the embedding service.
# ---------------------------------------------------------------------------
class EmbeddingSource(str, Enum):
    """Where an embedding vector came from."""

    REMOTE = "remote"
    FALLBACK = "fallback"


class Embedding(BaseModel):
    """An embedding vector plus the path that produced it.

    ``FALLBACK`` vectors come from the local hash embedding and carry far
    less semantic signal; callers can count them without catching errors.
    """

    model_config = ConfigDict(frozen=True)

    vector: list[float]
    source: EmbeddingSource = EmbeddingSource.REMOTE

    @property
    def is_fallback(self) -> bool:
        return self.source is EmbeddingSource.FALLBACK


# ---------------------------------------------------------------------------
# ChunkRecord -- the unit written to the vector store.
# ---------------------------------------------------------------------------
class ChunkRecord(BaseModel):
    """One stored vector with its metadata.

    The record id is always ``{document_id}_{chunk_index}``, which keeps ids
    unique per document and lets a chunk be fetched without a secondary
    index.
    """

    model_config = ConfigDict(frozen=True)

    document_id: str
    file_name: str
    chunk_index: int = Field(ge=0)
    text: str
    start_index: int = Field(default=0, ge=0)
    end_index: int = Field(default=0, ge=0)
    vector: list[float] = Field(default_factory=list)

    @staticmethod
    def make_id(document_id: str, chunk_index: int) -> str:
        return f"{document_id}_{chunk_index}"

    @property
    def record_id(self) -> str:
        return self.make_id(self.document_id, self.chunk_index)

    @classmethod
    def from_chunk(
        cls,
        chunk: TextChunk,
        document_id: str,
        file_name: str,
        vector: list[float],
    ) -> ChunkRecord:
        return cls(
            document_id=document_id,
            file_name=file_name,
            chunk_index=chunk.chunk_index,
            text=chunk.text,
            start_index=chunk.start_index,
            end_index=chunk.end_index,
            vector=vector,
        )

    def to_metadata(self) -> dict[str, str | int]:
        """Serialize to the persisted metadata schema (camelCase keys)."""
        return {
            "documentId": self.document_id,
            "fileName": self.file_name,
            "text": self.text,
            "chunkIndex": self.chunk_index,
            "startIndex": self.start_index,
            "endIndex": self.end_index,
        }

    @classmethod
    def from_metadata(cls, metadata: dict[str, Any], text: str | None = None) -> ChunkRecord:
        """Rebuild a record (without its vector) from stored metadata."""
        return cls(
            document_id=str(metadata.get("documentId", "")),
            file_name=str(metadata.get("fileName", "")),
            chunk_index=int(metadata.get("chunkIndex", 0)),
            text=str(metadata.get("text") or text or ""),
            start_index=int(metadata.get("startIndex", 0)),
            end_index=int(metadata.get("endIndex", 0)),
        )


# ---------------------------------------------------------------------------
# RetrievedChunk -- a search result from the vector store.
# ---------------------------------------------------------------------------
class RetrievedChunk(BaseModel):
    """A stored record returned by a similarity query, with its score."""

    model_config = ConfigDict(frozen=True)

    record: ChunkRecord
    score: float = Field(
        ge=-1.0,
        le=1.0,
        description="Cosine similarity between the query vector and this chunk.",
    )


# ---------------------------------------------------------------------------
# Answer -- output of the answer service.
# ---------------------------------------------------------------------------
class SourceChunk(BaseModel):
    """A supporting passage shown alongside an answer."""

    model_config = ConfigDict(frozen=True)

    preview_text: str
    score: float
    chunk_index: int


class Answer(BaseModel):
    """Generated answer text plus the passages it was conditioned on."""

    model_config = ConfigDict(frozen=True)

    answer_text: str
    sources: list[SourceChunk] = Field(default_factory=list)
    generation_failed: bool = False


# ---------------------------------------------------------------------------
# IngestionResult -- output of the ingestion pipeline for one document.
# ---------------------------------------------------------------------------
class IngestionResult(BaseModel):
    """Summary of one ingested document."""

    model_config = ConfigDict(frozen=True)

    document_id: str
    file_name: str
    text_length: int = Field(ge=0)
    chunk_count: int = Field(default=0, ge=0)
    fallback_embeddings: int = Field(
        default=0,
        ge=0,
        description="How many chunks were embedded with the local fallback.",
    )
    elapsed_seconds: float = Field(default=0.0, ge=0.0)
