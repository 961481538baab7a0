"""Vector store adapters."""

from docqa.providers.vector_store.chromadb_provider import (
    ChromaDBProvider,
    build_chroma_client,
)

__all__ = ["ChromaDBProvider", "build_chroma_client"]
