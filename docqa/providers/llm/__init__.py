"""LLM provider adapters.

Two concrete implementations of ILLMProvider (docqa/interfaces/llm_provider.py):
    - AnthropicLLMProvider -- Claude via the Messages API
    - OpenAILLMProvider    -- gpt-4o-mini, or any OpenAI-compatible API
                              (Gemini, TogetherAI, ...) via OPENAI_BASE_URL

At startup, main.py builds the provider matching the configured API key
(Anthropic first) and stores it on ``app.state``.
"""

from docqa.providers.llm.anthropic_provider import AnthropicLLMProvider
from docqa.providers.llm.openai_provider import OpenAILLMProvider

__all__ = ["AnthropicLLMProvider", "OpenAILLMProvider"]
