"""Embedding service with a deterministic local fallback.

Combines an optional remote :class:`IEmbeddingProvider` with the local
hash embedding.  Callers always get vectors back: when the remote call
fails (network error, quota, wrong-width response) the whole batch is
re-embedded with the fallback and tagged as such, with no retry.
"""

from __future__ import annotations

from docqa.interfaces.embedding_provider import IEmbeddingProvider
from docqa.models.rag import Embedding, EmbeddingSource
from docqa.providers.embedding.hash_embedding_provider import HashEmbeddingProvider
from docqa.utils.errors import EmbeddingDegradedError
from docqa.utils.logging import get_logger

logger = get_logger(__name__)


class EmbeddingService:
    """Embeds text via the remote provider, falling back to hashing.

    Parameters
    ----------
    primary:
        The remote provider, or ``None`` to run in fallback-only mode
        (no API key configured).
    fallback:
        The local provider used when *primary* is missing or fails.
        Defaults to :class:`HashEmbeddingProvider`.
    """

    def __init__(
        self,
        primary: IEmbeddingProvider | None,
        fallback: IEmbeddingProvider | None = None,
    ) -> None:
        self._fallback = fallback or HashEmbeddingProvider()
        self._primary = primary
        if primary is not None and not primary.is_available():
            logger.warning(
                "embedding_primary_unavailable",
                provider=primary.get_provider_name(),
            )
            self._primary = None
        if self._primary is None:
            logger.warning(
                "embedding_fallback_only",
                provider=self._fallback.get_provider_name(),
                reason="no remote embedding provider configured",
            )

    @property
    def dimension(self) -> int:
        return self._fallback.get_dimension()

    @property
    def is_fallback_only(self) -> bool:
        return self._primary is None

    def get_provider_names(self) -> list[str]:
        names = [self._fallback.get_provider_name()]
        if self._primary is not None:
            names.insert(0, self._primary.get_provider_name())
        return names

    async def embed_many(self, texts: list[str]) -> list[Embedding]:
        """Embed *texts*, returning one tagged :class:`Embedding` per input."""
        if not texts:
            return []

        if self._primary is not None:
            try:
                vectors = await self._primary.embed(texts)
                return [Embedding(vector=v, source=EmbeddingSource.REMOTE) for v in vectors]
            except EmbeddingDegradedError as exc:
                self._log_degraded(exc.message, len(texts))
            except Exception as exc:
                # Unwrapped client errors (transport, decoding) degrade too.
                self._log_degraded(f"{type(exc).__name__}: {exc}", len(texts))

        vectors = await self._fallback.embed(texts)
        return [Embedding(vector=v, source=EmbeddingSource.FALLBACK) for v in vectors]

    async def embed_one(self, text: str) -> Embedding:
        """Embed a single string (e.g. a question)."""
        result = await self.embed_many([text])
        return result[0]

    def _log_degraded(self, error: str, batch_size: int) -> None:
        logger.warning(
            "embedding_degraded",
            provider=self._primary.get_provider_name() if self._primary else None,
            fallback=self._fallback.get_provider_name(),
            batch_size=batch_size,
            error=error,
        )
