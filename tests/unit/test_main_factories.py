"""Unit tests for factory functions in docqa/main.py.

Tests the LLM provider selection, embedding service selection, component
assembly in ``_build_all``, and the ``create_app`` factory, all with
blank API keys or mocked clients so no network calls are made.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI
from fastapi.routing import APIRoute
from fastapi.testclient import TestClient

from docqa.config.settings import Settings
from docqa.utils.errors import StorageFailureError


# ======================================================================
# Shared helpers
# ======================================================================


def _settings(**overrides) -> Settings:
    """Settings with every API key blank unless overridden."""
    defaults = {
        "openai_api_key": "",
        "openai_base_url": "",
        "anthropic_api_key": "",
        "chroma_api_key": "",
        "chroma_host": "",
        "app_env": "test",
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


# ======================================================================
# _build_llm_provider
# ======================================================================


class TestBuildLLMProvider:
    """Provider priority: Anthropic, then OpenAI-compatible."""

    def test_anthropic_preferred(self) -> None:
        from docqa.main import _build_llm_provider
        from docqa.providers.llm.anthropic_provider import AnthropicLLMProvider

        result = _build_llm_provider(
            _settings(anthropic_api_key="test-anthropic", openai_api_key="sk-also-set")
        )
        assert isinstance(result, AnthropicLLMProvider)

    def test_openai_when_only_openai_key(self) -> None:
        from docqa.main import _build_llm_provider
        from docqa.providers.llm.openai_provider import OpenAILLMProvider

        result = _build_llm_provider(_settings(openai_api_key="sk-test"))
        assert isinstance(result, OpenAILLMProvider)
        assert result.is_available() is True

    def test_unconfigured_returns_unavailable_openai(self) -> None:
        from docqa.main import _build_llm_provider
        from docqa.providers.llm.openai_provider import OpenAILLMProvider

        result = _build_llm_provider(_settings())
        assert isinstance(result, OpenAILLMProvider)
        assert result.is_available() is False


# ======================================================================
# _build_embedding_service
# ======================================================================


class TestBuildEmbeddingService:
    def test_fallback_only_without_key(self) -> None:
        from docqa.main import _build_embedding_service

        service = _build_embedding_service(_settings())
        assert service.is_fallback_only is True
        assert service.get_provider_names() == ["hash_embedding"]
        assert service.dimension == 768

    def test_remote_primary_with_key(self) -> None:
        from docqa.main import _build_embedding_service

        service = _build_embedding_service(_settings(openai_api_key="sk-test"))
        assert service.is_fallback_only is False
        assert service.get_provider_names() == ["openai_embedding", "hash_embedding"]


# ======================================================================
# _build_all
# ======================================================================


class TestBuildAll:
    def test_returns_all_components(self, chroma_client) -> None:
        from docqa.main import _build_all
        from docqa.services.answer_service import AnswerService
        from docqa.services.ingestion.ingestion_service import IngestionService

        s = _settings(vector_index_name="factory-chunks")
        components = _build_all(s, chroma_client=chroma_client)

        assert set(components) == {
            "settings",
            "vector_store",
            "ingestion_service",
            "answer_service",
            "provider_registry",
        }
        assert components["settings"] is s
        assert isinstance(components["ingestion_service"], IngestionService)
        assert isinstance(components["answer_service"], AnswerService)

    def test_provider_registry(self, chroma_client) -> None:
        from docqa.main import _build_all

        registry = _build_all(_settings(), chroma_client=chroma_client)["provider_registry"]

        assert registry["llm"] == "openai"
        assert registry["llm_configured"] is False
        assert registry["embedding"] == ["hash_embedding"]
        assert registry["embedding_fallback_only"] is True
        assert registry["vector_store"] == "chromadb"
        assert registry["extractor"] == "pymupdf"

    def test_keyless_build_creates_no_sdk_clients(self, chroma_client) -> None:
        from docqa.main import _build_all

        with patch("openai.AsyncOpenAI") as openai_cls, patch(
            "anthropic.AsyncAnthropic"
        ) as anthropic_cls:
            components = _build_all(_settings(), chroma_client=chroma_client)

        assert components["answer_service"] is not None
        openai_cls.assert_not_called()
        anthropic_cls.assert_not_called()


# ======================================================================
# create_app
# ======================================================================


class TestCreateApp:
    def test_returns_fastapi_with_routes(self) -> None:
        from docqa.main import create_app

        application = create_app(_settings())
        assert isinstance(application, FastAPI)
        paths = {route.path for route in application.routes if isinstance(route, APIRoute)}
        assert {"/api/upload", "/api/chat", "/api/health"} <= paths

    def test_startup_installs_components_and_ensures_index(self) -> None:
        from docqa.main import create_app

        store = MagicMock()
        store.ensure_index = AsyncMock()
        components = {
            "settings": _settings(),
            "vector_store": store,
            "ingestion_service": MagicMock(),
            "answer_service": MagicMock(),
            "provider_registry": {"llm": "mock-llm"},
        }
        application = create_app(_settings(), components=components)

        with TestClient(application) as client:
            assert application.state.ingestion_service is components["ingestion_service"]
            assert client.get("/api/health").json()["providers"] == {"llm": "mock-llm"}
        store.ensure_index.assert_awaited_once()

    def test_startup_survives_index_failure(self) -> None:
        from docqa.main import create_app

        store = MagicMock()
        store.ensure_index = AsyncMock(
            side_effect=StorageFailureError(message="unreachable", provider_name="chromadb")
        )
        components = {
            "settings": _settings(),
            "vector_store": store,
            "ingestion_service": MagicMock(),
            "answer_service": MagicMock(),
            "provider_registry": {},
        }

        with TestClient(create_app(_settings(), components=components)) as client:
            assert client.get("/api/health").status_code == 200

    @pytest.mark.parametrize(
        ("origins", "expected"),
        [("*", "*"), ("https://app.example.com", "https://app.example.com")],
    )
    def test_cors_headers(self, origins: str, expected: str) -> None:
        from docqa.main import create_app

        components = {
            "settings": _settings(),
            "vector_store": MagicMock(ensure_index=AsyncMock()),
            "ingestion_service": MagicMock(),
            "answer_service": MagicMock(),
            "provider_registry": {},
        }
        application = create_app(_settings(cors_origins=origins), components=components)

        with TestClient(application) as client:
            response = client.get(
                "/api/health", headers={"Origin": "https://app.example.com"}
            )
        assert response.headers["access-control-allow-origin"] == expected
