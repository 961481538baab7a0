"""ChromaDB vector store provider adapter.

Implements :class:`IVectorStoreProvider` on a single cosine-distance
ChromaDB collection.  The client is chosen from configuration by
:func:`build_chroma_client`:

    CHROMA_API_KEY set  ->  chromadb.CloudClient   (Chroma Cloud)
    CHROMA_HOST set     ->  chromadb.HttpClient    (self-hosted server)
    otherwise           ->  chromadb.PersistentClient (local directory)

The chromadb client is synchronous; every call runs in a worker thread
via :func:`asyncio.to_thread`.
"""

from __future__ import annotations

import asyncio
import os
from typing import Any

# Telemetry must be off before chromadb is imported: the env var, the
# PostHog switch, and the client Settings below.
os.environ["ANONYMIZED_TELEMETRY"] = "False"

import posthog

posthog.disabled = True

import chromadb

from docqa.config.settings import EMBEDDING_DIMENSION, Settings
from docqa.interfaces.vector_store_provider import IVectorStoreProvider
from docqa.models.rag import ChunkRecord, RetrievedChunk
from docqa.utils.errors import StorageFailureError
from docqa.utils.logging import get_logger

logger = get_logger(__name__)


class _NoopEmbeddingFunction(chromadb.EmbeddingFunction[list[str]]):
    """Embedding function that is never called.

    docqa always passes pre-computed vectors, so ChromaDB must not load
    its default ONNX model on collection creation.
    """

    def __call__(self, input: list[str]) -> list[list[float]]:
        raise NotImplementedError(
            "docqa uses pre-computed embeddings; "
            "ChromaDB's built-in embedding should never be called."
        )

    def name(self) -> str:
        return "noop_precomputed"


def build_chroma_client(settings: Settings) -> Any:
    """Create the ChromaDB client selected by *settings*."""
    client_settings = chromadb.config.Settings(anonymized_telemetry=False)
    if settings.chroma_api_key:
        logger.info(
            "chromadb_client_cloud",
            tenant=settings.chroma_tenant or None,
            database=settings.chroma_database or None,
        )
        kwargs: dict[str, Any] = {"api_key": settings.chroma_api_key}
        if settings.chroma_tenant:
            kwargs["tenant"] = settings.chroma_tenant
        if settings.chroma_database:
            kwargs["database"] = settings.chroma_database
        return chromadb.CloudClient(**kwargs)
    if settings.chroma_host:
        logger.info(
            "chromadb_client_http",
            host=settings.chroma_host,
            port=settings.chroma_port,
            ssl=settings.chroma_ssl,
        )
        return chromadb.HttpClient(
            host=settings.chroma_host,
            port=settings.chroma_port,
            ssl=settings.chroma_ssl,
            settings=client_settings,
        )
    logger.info("chromadb_client_local", path=settings.chroma_persist_dir)
    return chromadb.PersistentClient(
        path=settings.chroma_persist_dir,
        settings=client_settings,
    )


class ChromaDBProvider(IVectorStoreProvider):
    """Vector store provider backed by one ChromaDB collection.

    Parameters
    ----------
    client:
        Any chromadb client (cloud, HTTP, persistent or ephemeral).
    collection_name:
        Name of the collection holding every document's chunks.
    dimension:
        Expected vector width, checked against stored data.
    """

    def __init__(
        self,
        client: Any,
        collection_name: str = "docqa-chunks",
        dimension: int = EMBEDDING_DIMENSION,
    ) -> None:
        self._client = client
        self._collection_name = collection_name
        self._dimension = dimension
        self._collection: Any | None = None
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # IVectorStoreProvider implementation
    # ------------------------------------------------------------------

    async def ensure_index(self) -> None:
        if self._collection is not None:
            return
        async with self._lock:
            if self._collection is not None:
                return
            try:
                collection = await asyncio.to_thread(self._open_collection)
                await asyncio.to_thread(self._validate_dimension, collection)
            except StorageFailureError:
                raise
            except Exception as exc:
                raise StorageFailureError(
                    message=f"ChromaDB collection setup failed: {exc}",
                    provider_name=self.get_provider_name(),
                ) from exc
            self._collection = collection
            logger.info(
                "chromadb_index_ready",
                collection=self._collection_name,
                dimension=self._dimension,
            )

    async def upsert(self, records: list[ChunkRecord]) -> None:
        if not records:
            return
        for record in records:
            if len(record.vector) != self._dimension:
                raise StorageFailureError(
                    message=(
                        f"Record {record.record_id} has a {len(record.vector)}-dim vector, "
                        f"index expects {self._dimension}"
                    ),
                    provider_name=self.get_provider_name(),
                )

        collection = await self._get_collection()
        try:
            await asyncio.to_thread(
                collection.upsert,
                ids=[r.record_id for r in records],
                embeddings=[r.vector for r in records],
                documents=[r.text for r in records],
                metadatas=[r.to_metadata() for r in records],
            )
        except Exception as exc:
            raise StorageFailureError(
                message=f"ChromaDB upsert failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info(
            "chromadb_upsert",
            count=len(records),
            document_id=records[0].document_id,
        )

    async def query(
        self,
        vector: list[float],
        top_k: int,
        document_id: str,
    ) -> list[RetrievedChunk]:
        if top_k <= 0:
            return []
        collection = await self._get_collection()
        try:
            results = await asyncio.to_thread(
                self._query_sync, collection, vector, top_k, document_id
            )
        except Exception as exc:
            raise StorageFailureError(
                message=f"ChromaDB query failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if not results or not results.get("ids") or not results["ids"][0]:
            logger.info("chromadb_query", document_id=document_id, results_count=0)
            return []

        documents = (results.get("documents") or [[]])[0] or [None] * len(results["ids"][0])
        metadatas = (results.get("metadatas") or [[]])[0] or [{}] * len(results["ids"][0])
        distances = (results.get("distances") or [[]])[0] or [1.0] * len(results["ids"][0])

        retrieved: list[RetrievedChunk] = []
        for doc_text, meta, distance in zip(documents, metadatas, distances, strict=True):
            similarity = max(-1.0, min(1.0, 1.0 - float(distance)))
            record = ChunkRecord.from_metadata(meta or {}, doc_text)
            retrieved.append(RetrievedChunk(record=record, score=similarity))

        retrieved.sort(key=lambda rc: rc.score, reverse=True)
        logger.info(
            "chromadb_query",
            document_id=document_id,
            results_count=len(retrieved),
            top_score=retrieved[0].score,
        )
        return retrieved[:top_k]

    async def count(self, document_id: str | None = None) -> int:
        collection = await self._get_collection()
        try:
            if document_id is None:
                return await asyncio.to_thread(collection.count)
            existing = await asyncio.to_thread(
                collection.get, where={"documentId": document_id}, include=[]
            )
        except Exception as exc:
            raise StorageFailureError(
                message=f"ChromaDB count failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        return len(existing["ids"]) if existing and existing.get("ids") else 0

    def get_provider_name(self) -> str:
        return "chromadb"

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _get_collection(self) -> Any:
        if self._collection is None:
            await self.ensure_index()
        return self._collection

    def _open_collection(self) -> Any:
        # Collections persisted with a different embedding function reject
        # the no-op one; reopen them with whatever they were created with.
        try:
            return self._client.get_or_create_collection(
                name=self._collection_name,
                metadata={"hnsw:space": "cosine"},
                embedding_function=_NoopEmbeddingFunction(),
            )
        except ValueError:
            return self._client.get_or_create_collection(
                name=self._collection_name,
                metadata={"hnsw:space": "cosine"},
            )

    def _validate_dimension(self, collection: Any) -> None:
        """Fail fast when stored vectors do not match the index width."""
        if collection.count() == 0:
            return
        sample = collection.peek(limit=1)
        embeddings = sample.get("embeddings") if sample else None
        if embeddings is None or len(embeddings) == 0:
            return
        stored_dim = len(embeddings[0])
        if stored_dim != self._dimension:
            logger.error(
                "embedding_dimension_mismatch",
                stored_dim=stored_dim,
                expected_dim=self._dimension,
                collection=self._collection_name,
            )
            raise StorageFailureError(
                message=(
                    f"Collection '{self._collection_name}' holds {stored_dim}-dim vectors "
                    f"but the index expects {self._dimension}. "
                    f"Set VECTOR_INDEX_NAME to a fresh collection."
                ),
                provider_name=self.get_provider_name(),
            )

    @staticmethod
    def _query_sync(
        collection: Any,
        vector: list[float],
        top_k: int,
        document_id: str,
    ) -> dict[str, Any] | None:
        total = collection.count()
        if total == 0:
            return None
        return collection.query(
            query_embeddings=[vector],
            n_results=min(top_k, total),
            where={"documentId": document_id},
            include=["documents", "metadatas", "distances"],
        )
