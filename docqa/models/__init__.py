"""Pydantic models for the ingestion and retrieval pipeline."""

from docqa.models.rag import (
    Answer,
    ChunkRecord,
    Embedding,
    EmbeddingSource,
    IngestionResult,
    RetrievedChunk,
    SourceChunk,
    TextChunk,
)

__all__ = [
    "Answer",
    "ChunkRecord",
    "Embedding",
    "EmbeddingSource",
    "IngestionResult",
    "RetrievedChunk",
    "SourceChunk",
    "TextChunk",
]
