"""OpenAI-compatible embedding provider adapter.

Wraps the ``openai`` async client to implement :class:`IEmbeddingProvider`.
Works against OpenAI itself and any OpenAI-compatible endpoint (Gemini's
OpenAI endpoint, TogetherAI, ...) via ``openai_base_url``.

Every vector must match the index width (768).  The ``text-embedding-3-*``
models are asked for 768 dimensions directly; other models must natively
produce 768-dim vectors.  A response of the wrong width is reported as an
error so the caller can fall back.
"""

from __future__ import annotations

import openai

from docqa.config.settings import EMBEDDING_DIMENSION, Settings
from docqa.interfaces.embedding_provider import IEmbeddingProvider
from docqa.utils.errors import EmbeddingDegradedError
from docqa.utils.logging import get_logger

logger = get_logger(__name__)

_OPENAI_BATCH_LIMIT = 2048

# Model families that accept a ``dimensions`` request parameter.
_RESIZABLE_MODEL_PREFIXES = ("text-embedding-3-",)


class OpenAIEmbeddingProvider(IEmbeddingProvider):
    """Embedding provider backed by an OpenAI-compatible embeddings API."""

    def __init__(self, settings: Settings) -> None:
        self._api_key = settings.openai_api_key

        # The client is created on first use: recent SDKs reject a blank
        # key in the constructor.
        self._client_kwargs: dict = {
            "api_key": self._api_key,
            "timeout": openai.Timeout(30.0, connect=5.0),
        }
        if settings.openai_base_url:
            self._client_kwargs["base_url"] = settings.openai_base_url

        self._client: openai.AsyncOpenAI | None = None
        self._model = settings.openai_embedding_model or "text-embedding-3-small"
        self._dimension = EMBEDDING_DIMENSION
        self._request_dimensions = self._model.startswith(_RESIZABLE_MODEL_PREFIXES)
        self._provider_label = (
            "openai-compatible_embedding" if settings.openai_base_url else "openai_embedding"
        )

    # ------------------------------------------------------------------
    # IEmbeddingProvider implementation
    # ------------------------------------------------------------------

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for a batch of texts.

        Inputs larger than the per-call limit are split into several
        requests.  Raises :class:`EmbeddingDegradedError` on any API error,
        a short response, or a vector of the wrong width.
        """
        if not texts:
            return []

        all_embeddings: list[list[float]] = []
        try:
            client = self._get_client()
            for start in range(0, len(texts), _OPENAI_BATCH_LIMIT):
                batch = texts[start : start + _OPENAI_BATCH_LIMIT]
                kwargs: dict = {"input": batch, "model": self._model}
                if self._request_dimensions:
                    kwargs["dimensions"] = self._dimension
                response = await client.embeddings.create(**kwargs)
                batch_embeddings = [item.embedding for item in response.data]
                all_embeddings.extend(batch_embeddings)
                logger.info(
                    "openai_embedding_batch",
                    model=self._model,
                    provider=self._provider_label,
                    batch_size=len(batch),
                    tokens=response.usage.total_tokens if response.usage else None,
                )
        except openai.OpenAIError as exc:
            raise EmbeddingDegradedError(
                message=f"{self._provider_label} API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if len(all_embeddings) != len(texts):
            raise EmbeddingDegradedError(
                message=(
                    f"{self._provider_label} returned {len(all_embeddings)} vectors "
                    f"for {len(texts)} inputs"
                ),
                provider_name=self.get_provider_name(),
            )
        for vector in all_embeddings:
            if len(vector) != self._dimension:
                raise EmbeddingDegradedError(
                    message=(
                        f"{self._provider_label} model '{self._model}' produced "
                        f"{len(vector)}-dim vectors, index expects {self._dimension}"
                    ),
                    provider_name=self.get_provider_name(),
                )
        return all_embeddings

    def get_dimension(self) -> int:
        return self._dimension

    def get_provider_name(self) -> str:
        return self._provider_label

    def is_available(self) -> bool:
        """Return ``True`` if an API key is configured."""
        return bool(self._api_key)

    def _get_client(self) -> openai.AsyncOpenAI:
        if not self._api_key:
            raise EmbeddingDegradedError(
                message=f"{self._provider_label} API key is not configured",
                provider_name=self.get_provider_name(),
            )
        if self._client is None:
            self._client = openai.AsyncOpenAI(**self._client_kwargs)
        return self._client
