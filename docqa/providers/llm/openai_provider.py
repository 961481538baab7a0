"""OpenAI-compatible LLM provider adapter.

Wraps the ``openai`` async client to implement :class:`ILLMProvider`.
When ``openai_base_url`` is configured (Gemini's OpenAI endpoint,
TogetherAI, Groq, ...) the client points at that URL instead of the
default OpenAI endpoint, so one adapter covers every compatible host.
"""

from __future__ import annotations

import openai

from docqa.config.settings import Settings
from docqa.interfaces.llm_provider import ILLMProvider
from docqa.utils.errors import GenerationFailureError
from docqa.utils.logging import get_logger

logger = get_logger(__name__)

_TIMEOUT_SECONDS = 60.0


class OpenAILLMProvider(ILLMProvider):
    """LLM provider backed by an OpenAI-compatible chat completions API.

    Uses ``gpt-4o-mini`` by default; ``OPENAI_TEXT_MODEL`` overrides it
    (e.g. ``gemini-2.0-flash`` together with Gemini's base URL).
    """

    def __init__(self, settings: Settings) -> None:
        self._api_key = settings.openai_api_key

        # The client is created on first use: recent SDKs reject a blank
        # key in the constructor.
        self._client_kwargs: dict = {
            "api_key": self._api_key,
            "timeout": openai.Timeout(_TIMEOUT_SECONDS, connect=5.0),
        }
        if settings.openai_base_url:
            self._client_kwargs["base_url"] = settings.openai_base_url

        self._client: openai.AsyncOpenAI | None = None
        self._text_model = settings.openai_text_model or "gpt-4o-mini"
        self._provider_label = (
            "openai-compatible" if settings.openai_base_url else "openai"
        )

    # ------------------------------------------------------------------
    # ILLMProvider implementation
    # ------------------------------------------------------------------

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 2048,
    ) -> str:
        """Generate a text completion via the chat completions API."""
        client = self._get_client()
        try:
            response = await client.chat.completions.create(
                model=self._text_model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except openai.APITimeoutError as exc:
            raise GenerationFailureError(
                message=f"{self._provider_label} timed out after {_TIMEOUT_SECONDS:.0f}s",
                provider_name=self.get_provider_name(),
            ) from exc
        except openai.OpenAIError as exc:
            raise GenerationFailureError(
                message=f"{self._provider_label} API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise GenerationFailureError(
                message=f"{self._provider_label} returned empty response",
                provider_name=self.get_provider_name(),
            )
        logger.info(
            "openai_completion",
            model=self._text_model,
            provider=self._provider_label,
            tokens=response.usage.total_tokens if response.usage else None,
        )
        return content

    def get_provider_name(self) -> str:
        return self._provider_label

    def is_available(self) -> bool:
        """Return ``True`` if an API key is configured (doesn't verify it works)."""
        return bool(self._api_key)

    def _get_client(self) -> openai.AsyncOpenAI:
        if not self._api_key:
            raise GenerationFailureError(
                message=f"{self._provider_label} API key is not configured",
                provider_name=self.get_provider_name(),
            )
        if self._client is None:
            self._client = openai.AsyncOpenAI(**self._client_kwargs)
        return self._client
