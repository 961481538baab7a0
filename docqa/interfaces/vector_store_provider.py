"""Abstract base class for vector-store service providers.

Defines the contract for storing embedded chunks and running filtered
nearest-neighbour queries.  The shipped adapter wraps ChromaDB (cloud,
self-hosted, or local); Qdrant or Pinecone would plug in the same way.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from docqa.models.rag import ChunkRecord, RetrievedChunk


# Concrete implementation: ChromaDBProvider (docqa/providers/vector_store/)
class IVectorStoreProvider(ABC):
    """Contract for the similarity index used by ingestion and retrieval.

    Every query is scoped to a single document: implementations must apply
    an equality filter on ``documentId`` so passages from other documents
    can never leak into an answer.
    """

    @abstractmethod
    async def ensure_index(self) -> None:
        """Make sure the index exists with the expected dimension and metric.

        Idempotent; safe to call concurrently.  Creates the index when it is
        absent and returns only once it can accept writes.

        Raises
        ------
        docqa.utils.errors.StorageFailureError
            If the index cannot be created or has an incompatible shape.
        """

    @abstractmethod
    async def upsert(self, records: list[ChunkRecord]) -> None:
        """Write a batch of records, replacing any with the same id.

        Raises
        ------
        docqa.utils.errors.StorageFailureError
            If the write fails.  Earlier batches stay written.
        """

    @abstractmethod
    async def query(
        self,
        vector: list[float],
        top_k: int,
        document_id: str,
    ) -> list[RetrievedChunk]:
        """Return up to *top_k* nearest records of one document.

        Parameters
        ----------
        vector:
            The query embedding.
        top_k:
            Maximum number of results.
        document_id:
            Only records whose ``documentId`` equals this value are matched.

        Returns
        -------
        list[RetrievedChunk]
            Zero or more results, highest cosine similarity first.  An
            empty list is a normal outcome for an unknown document.

        Raises
        ------
        docqa.utils.errors.StorageFailureError
            If the query fails.
        """

    @abstractmethod
    async def count(self, document_id: str | None = None) -> int:
        """Return the number of stored records, optionally for one document."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"chromadb"``."""
