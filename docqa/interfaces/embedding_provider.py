"""Abstract base class for text-embedding service providers.

Defines the contract for generating embedding vectors from text.  The
remote adapter wraps an OpenAI-compatible embeddings API; the local hash
adapter needs no network and is used when the remote one fails.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations:
#   OpenAIEmbeddingProvider -- OpenAI-compatible embeddings API (remote)
#   HashEmbeddingProvider   -- deterministic bag-of-words hashing (local)
# Located in: docqa/providers/embedding/
class IEmbeddingProvider(ABC):
    """Contract for text-embedding services used by the pipeline.

    Vectors are consumed by
    :class:`~docqa.interfaces.vector_store_provider.IVectorStoreProvider`
    for storage and query-time similarity search, so every provider must
    produce vectors of the index dimension.
    """

    @abstractmethod
    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for a batch of texts.

        Parameters
        ----------
        texts:
            One or more text strings to embed.

        Returns
        -------
        list[list[float]]
            Vectors corresponding positionally to *texts*, each of length
            :meth:`get_dimension`.

        Raises
        ------
        docqa.utils.errors.EmbeddingDegradedError
            If the embedding API call fails.
        """

    @abstractmethod
    def get_dimension(self) -> int:
        """Return the dimensionality of the embedding vectors."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this embedding provider.

        Example return values: ``"openai_embedding"``, ``"hash_embedding"``.
        """

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured.

        Implementations check credentials without generating an embedding.
        """
