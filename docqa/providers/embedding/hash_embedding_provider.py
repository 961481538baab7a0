"""Deterministic hash embedding provider.

A local, dependency-free stand-in for the remote embedding model, used
whenever the remote call fails or no API key is configured.  Each text
becomes a 768-bucket bag-of-words vector:

1. lowercase the text and split on whitespace; keep the first 100 tokens,
2. hash every token with the 31-multiplier string hash (signed 32-bit
   wrap-around) and count it in bucket ``abs(hash) % 768``,
3. L2-normalize the counts.

Identical text always yields an identical vector, so a question that
shares words with a passage lands near it even without semantic signal.
"""

from __future__ import annotations

import math

from docqa.config.settings import EMBEDDING_DIMENSION
from docqa.interfaces.embedding_provider import IEmbeddingProvider

_MAX_TOKENS = 100


def _token_hash(token: str) -> int:
    """Return the 31-multiplier hash of *token* as a signed 32-bit integer."""
    h = 0
    for ch in token:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    return h - 0x100000000 if h & 0x80000000 else h


def hash_embedding(text: str, dimension: int = EMBEDDING_DIMENSION) -> list[float]:
    """Compute the deterministic bag-of-words vector for *text*.

    Returns a unit-length vector, or the zero vector when *text* has no
    tokens.  Never raises.
    """
    vector = [0.0] * dimension
    for token in text.lower().split()[:_MAX_TOKENS]:
        vector[abs(_token_hash(token)) % dimension] += 1.0

    norm = math.sqrt(sum(v * v for v in vector))
    if norm == 0.0:
        return vector
    return [v / norm for v in vector]


class HashEmbeddingProvider(IEmbeddingProvider):
    """Embedding provider computing :func:`hash_embedding` in-process."""

    def __init__(self, dimension: int = EMBEDDING_DIMENSION) -> None:
        self._dimension = dimension

    async def embed(self, texts: list[str]) -> list[list[float]]:
        return [hash_embedding(text, self._dimension) for text in texts]

    def get_dimension(self) -> int:
        return self._dimension

    def get_provider_name(self) -> str:
        return "hash_embedding"

    def is_available(self) -> bool:
        return True
