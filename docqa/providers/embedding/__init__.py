"""Embedding provider implementations.

Embeddings turn text into 768-dim vectors stored in the vector index and
used for similarity search.

Two implementations of IEmbeddingProvider:
    1. OpenAIEmbeddingProvider -- remote, OpenAI-compatible embeddings API.
       Used whenever OPENAI_API_KEY is set.
    2. HashEmbeddingProvider   -- local bag-of-words hashing.  Always
       available; EmbeddingService falls back to it when the remote call
       fails.
"""

from docqa.providers.embedding.hash_embedding_provider import (
    HashEmbeddingProvider,
    hash_embedding,
)
from docqa.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

__all__ = ["HashEmbeddingProvider", "OpenAIEmbeddingProvider", "hash_embedding"]
