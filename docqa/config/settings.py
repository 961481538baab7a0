"""Application settings loaded from environment variables via pydantic-settings.

Values are read from two sources, in priority order:

  1. Environment variables, e.g. ``OPENAI_API_KEY=sk-abc123``
  2. A ``.env`` file in the working directory (local development)

Field ``openai_api_key`` maps to env var ``OPENAI_API_KEY``; matching is
case-insensitive.  Defaults apply when neither source sets a value.
``.env.example`` lists every variable.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

# Fixed vector width shared by every embedding path and the vector index.
EMBEDDING_DIMENSION = 768


class Settings(BaseSettings):
    """docqa application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # === Embedding / generation providers ===
    # Empty string = "not configured".  OPENAI_BASE_URL points the OpenAI
    # client at any compatible endpoint (Gemini, TogetherAI, ...).
    openai_api_key: str = ""
    openai_base_url: str = ""
    openai_embedding_model: str = "text-embedding-3-small"
    openai_text_model: str = "gpt-4o-mini"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"

    # === Vector store (ChromaDB) ===
    # CHROMA_API_KEY selects Chroma Cloud, CHROMA_HOST a self-hosted server;
    # with neither set the index lives in CHROMA_PERSIST_DIR.
    chroma_api_key: str = ""
    chroma_tenant: str = ""
    chroma_database: str = ""
    chroma_host: str = ""
    chroma_port: int = 8000
    chroma_ssl: bool = False
    chroma_persist_dir: str = "./data/chromadb"
    vector_index_name: str = "docqa-chunks"

    # === Ingestion ===
    chunk_size: int = 800
    chunk_overlap: int = 100
    ingest_batch_size: int = 50
    ingest_concurrent_batches: int = 3
    extraction_recovery_max_pages: int = 200
    max_upload_mb: int = 50

    # === Retrieval / generation ===
    top_k: int = 5
    max_context_chars: int = 24000
    generation_temperature: float = 0.3
    generation_max_tokens: int = 2048

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 5000
    app_env: str = "development"
    log_level: str = "INFO"
    cors_origins: str = "*"

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    def get_cors_origins(self) -> list[str]:
        """Split the comma-separated CORS_ORIGINS value."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
