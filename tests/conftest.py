"""Shared pytest fixtures for the docqa test suite."""

from __future__ import annotations

import textwrap
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from docqa.config.settings import Settings
from docqa.interfaces.embedding_provider import IEmbeddingProvider
from docqa.interfaces.llm_provider import ILLMProvider
from docqa.utils.errors import EmbeddingDegradedError

# Importing the provider module first switches chromadb telemetry off.
from docqa.providers.vector_store.chromadb_provider import ChromaDBProvider  # noqa: I001
import chromadb
import fitz  # PyMuPDF


# ---------------------------------------------------------------------------
# Text / PDF helpers
# ---------------------------------------------------------------------------

SAMPLE_SENTENCES = [
    "The Hubble Space Telescope was launched into low Earth orbit in April 1990.",
    "Its primary mirror measures 2.4 meters across and is made of ultra-low expansion glass.",
    "A flaw in the mirror's shape was discovered weeks after launch.",
    "Astronauts installed corrective optics during the first servicing mission in 1993.",
    "The telescope has observed galaxies more than thirteen billion light years away.",
    "Observations from Hubble helped determine the rate of expansion of the universe.",
    "Five servicing missions were flown by the Space Shuttle between 1993 and 2009.",
    "The observatory is named after the astronomer Edwin Hubble.",
    "Data from the telescope is archived and made available to researchers worldwide.",
    "Its successor, the James Webb Space Telescope, observes mainly in the infrared.",
]


def make_text(sentence_count: int = 40) -> str:
    """Return normalized prose made of numbered sample sentences."""
    parts = []
    for i in range(sentence_count):
        base = SAMPLE_SENTENCES[i % len(SAMPLE_SENTENCES)]
        parts.append(f"Item {i + 1}: {base}")
    return " ".join(parts)


def make_pdf_bytes(text: str, *, lines_per_page: int = 50, width: int = 90) -> bytes:
    """Render *text* into a simple multi-page PDF and return its bytes."""
    lines = textwrap.wrap(
        text, width=width, break_long_words=False, break_on_hyphens=False
    ) or [""]
    doc = fitz.open()
    try:
        for start in range(0, len(lines), lines_per_page):
            page = doc.new_page()
            for offset, line in enumerate(lines[start : start + lines_per_page]):
                page.insert_text((50, 60 + offset * 14), line, fontsize=9)
        return doc.tobytes()
    finally:
        doc.close()


def make_blank_pdf_bytes(pages: int = 1) -> bytes:
    doc = fitz.open()
    try:
        for _ in range(pages):
            doc.new_page()
        return doc.tobytes()
    finally:
        doc.close()


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings with every external key blank and a temp Chroma directory."""
    return Settings(
        _env_file=None,
        openai_api_key="",
        openai_base_url="",
        anthropic_api_key="",
        chroma_api_key="",
        chroma_host="",
        chroma_persist_dir=str(tmp_path / "chroma"),
        vector_index_name="test-chunks",
        app_env="test",
    )


@pytest.fixture
def sample_text() -> str:
    return make_text(40)


@pytest.fixture
def sample_pdf_bytes(sample_text: str) -> bytes:
    return make_pdf_bytes(sample_text)


@pytest.fixture
def chroma_client(tmp_path: Path):
    """A real on-disk ChromaDB client isolated under ``tmp_path``."""
    return chromadb.PersistentClient(
        path=str(tmp_path / "chroma"),
        settings=chromadb.config.Settings(anonymized_telemetry=False),
    )


@pytest.fixture
def vector_store(chroma_client) -> ChromaDBProvider:
    return ChromaDBProvider(client=chroma_client, collection_name="test-chunks")


@pytest.fixture
def mock_llm() -> MagicMock:
    mock = MagicMock(spec=ILLMProvider)
    mock.complete = AsyncMock(return_value="The telescope launched in 1990.")
    mock.get_provider_name.return_value = "mock-llm"
    mock.is_available.return_value = True
    return mock


@pytest.fixture
def failing_embedding_provider() -> MagicMock:
    """Remote embedding provider whose every call fails."""
    mock = MagicMock(spec=IEmbeddingProvider)
    mock.embed = AsyncMock(
        side_effect=EmbeddingDegradedError(message="quota exceeded", provider_name="mock-remote")
    )
    mock.get_dimension.return_value = 768
    mock.get_provider_name.return_value = "mock-remote"
    mock.is_available.return_value = True
    return mock


@pytest.fixture
def pdf_factory():
    """Build PDFs on demand: ``pdf_factory(text)`` / ``pdf_factory(None)`` for blank."""

    def _factory(text: str | None, **kwargs) -> bytes:
        if text is None:
            return make_blank_pdf_bytes(**kwargs)
        return make_pdf_bytes(text, **kwargs)

    return _factory


@pytest.fixture
def text_factory():
    return make_text
