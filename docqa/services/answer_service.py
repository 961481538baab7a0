"""Retrieval-augmented answer service.

Answers a question about one uploaded document:

  1. EMBED    -- the question goes through :class:`EmbeddingService`
                 (remote model or hash fallback, so it never fails).
  2. RETRIEVE -- the top ``top_k`` chunks of *that document only* are
                 fetched from the vector store.
  3. GENERATE -- the retrieved texts, best match first, become the context
                 of a single prompt that tells the model to answer only from
                 it.

No matches is a normal outcome and yields :data:`NO_RELEVANT_INFO_ANSWER`.
A failed generation call is turned into an explanatory answer rather than
an error, with the retrieved sources kept so the user can still read them.
"""

from __future__ import annotations

import time


from docqa.interfaces.llm_provider import ILLMProvider
from docqa.interfaces.vector_store_provider import IVectorStoreProvider
from docqa.models.rag import Answer, RetrievedChunk, SourceChunk
from docqa.services.embedding_service import EmbeddingService
from docqa.utils.errors import GenerationFailureError, InvalidInputError
from docqa.utils.logging import get_logger

logger = get_logger(__name__)

NO_RELEVANT_INFO_ANSWER = (
    "I couldn't find relevant information in the document to answer your "
    "question. Please try rephrasing your question or ask about different "
    "topics covered in the document."
)

_GENERATION_ERROR_TEMPLATE = (
    "I encountered an error while processing your question: {error}. "
    "Please try again with a different question."
)

_SYSTEM_PROMPT = (
    "You are a careful assistant that answers questions about a single "
    "document. You only use the context passages you are given."
)

_USER_PROMPT_TEMPLATE = (
    "Based on the following context from a document, please answer the "
    "user's question. Use only the information provided in the context. If "
    "the answer cannot be found in the context, please say so clearly.\n\n"
    "Context:\n{context}\n\n"
    "Question: {question}\n\n"
    "Please provide a helpful and accurate answer based only on the context "
    "provided:"
)

_PREVIEW_CHARS = 200
_CONTEXT_SEPARATOR = "\n\n"


def build_preview(text: str, limit: int = _PREVIEW_CHARS) -> str:
    """Return the first *limit* characters of *text*, with ``...`` if cut."""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def build_context(chunks: list[RetrievedChunk], max_chars: int) -> str:
    """Join chunk texts in the given order, bounded by *max_chars*.

    The chunk that would cross the bound is truncated and nothing after it
    is included.  Part of the first chunk is always kept.
    """
    parts: list[str] = []
    used = 0
    for rc in chunks:
        sep = len(_CONTEXT_SEPARATOR) if parts else 0
        room = max_chars - used - sep
        text = rc.record.text
        if len(text) <= room:
            parts.append(text)
            used += sep + len(text)
            continue
        if room > 0 or not parts:
            parts.append(text[: max(room, 1)])
        break
    return _CONTEXT_SEPARATOR.join(parts)


class AnswerService:
    """Retrieves the best passages for a question and generates an answer.

    Parameters
    ----------
    embedding_service:
        Embeds the question.
    vector_store:
        Source of document-scoped passages.
    llm_provider:
        Generates the final answer text.
    top_k:
        Number of passages to retrieve (default 5).
    max_context_chars:
        Upper bound on the context handed to the model.
    temperature, max_tokens:
        Forwarded to :meth:`ILLMProvider.complete`.
    """

    def __init__(
        self,
        embedding_service: EmbeddingService,
        vector_store: IVectorStoreProvider,
        llm_provider: ILLMProvider,
        top_k: int = 5,
        max_context_chars: int = 24000,
        temperature: float = 0.3,
        max_tokens: int = 2048,
    ) -> None:
        self._embedding_service = embedding_service
        self._vector_store = vector_store
        self._llm = llm_provider
        self._top_k = top_k
        self._max_context_chars = max_context_chars
        self._temperature = temperature
        self._max_tokens = max_tokens

    async def answer(self, question: str, document_id: str) -> Answer:
        """Answer *question* using only passages from *document_id*.

        Raises
        ------
        InvalidInputError
            If the question or document id is blank.
        StorageFailureError
            If the vector-store query fails.
        """
        question = (question or "").strip()
        document_id = (document_id or "").strip()
        if not question:
            raise InvalidInputError(message="Question is required")
        if not document_id:
            raise InvalidInputError(message="Document ID is required")

        t0 = time.monotonic()
        embedding = await self._embedding_service.embed_one(question)
        retrieved = await self._vector_store.query(
            embedding.vector, top_k=self._top_k, document_id=document_id
        )

        if not retrieved:
            logger.info(
                "answer_no_matches",
                document_id=document_id,
                question=question[:80],
                fallback_embedding=embedding.is_fallback,
            )
            return Answer(answer_text=NO_RELEVANT_INFO_ANSWER, sources=[])

        retrieved = sorted(retrieved, key=lambda rc: rc.score, reverse=True)
        sources = [
            SourceChunk(
                preview_text=build_preview(rc.record.text),
                score=rc.score,
                chunk_index=rc.record.chunk_index,
            )
            for rc in retrieved
        ]
        context = build_context(retrieved, self._max_context_chars)
        user_prompt = _USER_PROMPT_TEMPLATE.format(context=context, question=question)

        try:
            answer_text = await self._llm.complete(
                system_prompt=_SYSTEM_PROMPT,
                user_prompt=user_prompt,
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )
        except GenerationFailureError as exc:
            logger.error(
                "answer_generation_failed",
                document_id=document_id,
                provider=exc.provider_name or self._llm.get_provider_name(),
                error=exc.message,
            )
            return Answer(
                answer_text=_GENERATION_ERROR_TEMPLATE.format(error=exc.message),
                sources=sources,
                generation_failed=True,
            )
        except Exception as exc:
            # Unwrapped adapter errors (odd payloads from compatible hosts).
            logger.exception(
                "answer_generation_crashed",
                document_id=document_id,
                provider=self._llm.get_provider_name(),
                error_type=type(exc).__name__,
            )
            return Answer(
                answer_text=_GENERATION_ERROR_TEMPLATE.format(error=str(exc) or type(exc).__name__),
                sources=sources,
                generation_failed=True,
            )

        logger.info(
            "answer_generated",
            document_id=document_id,
            provider=self._llm.get_provider_name(),
            sources=len(sources),
            top_score=sources[0].score,
            context_chars=len(context),
            fallback_embedding=embedding.is_fallback,
            elapsed_seconds=round(time.monotonic() - t0, 3),
        )
        return Answer(answer_text=answer_text, sources=sources)
