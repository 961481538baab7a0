"""Anthropic LLM provider adapter.

Wraps the ``anthropic`` async client to implement :class:`ILLMProvider`
via the Claude Messages API.  Unlike chat completions, the system prompt
is a top-level parameter and the reply is a list of content blocks, of
which only the text blocks are kept.
"""

from __future__ import annotations

import anthropic

from docqa.config.settings import Settings
from docqa.interfaces.llm_provider import ILLMProvider
from docqa.utils.errors import GenerationFailureError
from docqa.utils.logging import get_logger

logger = get_logger(__name__)


class AnthropicLLMProvider(ILLMProvider):
    """LLM provider backed by the Anthropic Claude API."""

    def __init__(self, settings: Settings) -> None:
        self._api_key = settings.anthropic_api_key
        self._client: anthropic.AsyncAnthropic | None = None
        self._model = settings.anthropic_model or "claude-sonnet-4-20250514"

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 2048,
    ) -> str:
        client = self._get_client()
        try:
            response = await client.messages.create(
                model=self._model,
                max_tokens=max_tokens,
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}],
                temperature=temperature,
            )
        except anthropic.APIError as exc:
            raise GenerationFailureError(
                message=f"Anthropic API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        text_blocks = [block.text for block in response.content if block.type == "text"]
        if not text_blocks:
            raise GenerationFailureError(
                message="Anthropic returned no text content",
                provider_name=self.get_provider_name(),
            )
        logger.info(
            "anthropic_completion",
            model=self._model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )
        return "\n".join(text_blocks)

    def get_provider_name(self) -> str:
        return "anthropic"

    def is_available(self) -> bool:
        return bool(self._api_key)

    def _get_client(self) -> anthropic.AsyncAnthropic:
        if not self._api_key:
            raise GenerationFailureError(
                message="Anthropic API key is not configured",
                provider_name=self.get_provider_name(),
            )
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(api_key=self._api_key)
        return self._client
