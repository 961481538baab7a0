"""Sentence-aware text chunker.

Splits normalized document text into overlapping windows for embedding.
Windows are built from whole sentences, so a passage is never cut in the
middle of a sentence unless that sentence alone is larger than a chunk.

Each chunk is a contiguous slice of the input, which makes
``start_index`` / ``end_index`` exact offsets.  When a chunk is closed, the
next one is seeded with the trailing ``overlap`` characters of the closed
chunk so context carries across the boundary.  The seed is used only if the
seeded chunk still fits in ``chunk_size``.
"""

from __future__ import annotations

import re

from docqa.models.rag import TextChunk
from docqa.utils.logging import get_logger

logger = get_logger(__name__)

# A sentence is a run of non-terminators followed by one or more terminal
# punctuation marks, or by the end of the text.
_SENTENCE_RE = re.compile(r"[^.!?]+(?:[.!?]+|$)")


def split_sentences(text: str) -> list[tuple[int, int]]:
    """Return ``(start, end)`` spans of the sentences in *text*.

    Spans exclude surrounding whitespace and keep terminal punctuation.
    A leading run of punctuation with no preceding words is dropped.
    """
    spans: list[tuple[int, int]] = []
    for match in _SENTENCE_RE.finditer(text):
        start, end = match.start(), match.end()
        while start < end and text[start].isspace():
            start += 1
        while end > start and text[end - 1].isspace():
            end -= 1
        if start < end:
            spans.append((start, end))
    return spans


class TextChunker:
    """Greedy sentence accumulator producing overlapping chunks.

    Parameters
    ----------
    chunk_size:
        Target maximum chunk length in characters (default 800).
    overlap:
        Number of trailing characters of a closed chunk carried into the
        next one (default 100).  Must be smaller than *chunk_size*.
    """

    def __init__(self, chunk_size: int = 800, overlap: int = 100) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if overlap < 0 or overlap >= chunk_size:
            raise ValueError(
                f"overlap must be in [0, chunk_size), got {overlap} for chunk_size {chunk_size}"
            )
        self._chunk_size = chunk_size
        self._overlap = overlap

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    @property
    def overlap(self) -> int:
        return self._overlap

    def chunk(self, text: str) -> list[TextChunk]:
        """Split *text* into chunks.

        Returns
        -------
        list[TextChunk]
            Chunks in text order with ``chunk_index`` 0..n-1.  Empty or
            whitespace-only input yields an empty list.
        """
        spans = split_sentences(text)
        if not spans:
            return []

        windows: list[tuple[int, int]] = []
        start, end = spans[0]
        for sent_start, sent_end in spans[1:]:
            if sent_end - start <= self._chunk_size:
                end = sent_end
                continue
            windows.append((start, end))
            start = self._seed_start(text, start, end, sent_end)
            if start is None:
                start = sent_start
            end = sent_end
        windows.append((start, end))

        chunks = [
            TextChunk(chunk_index=i, text=text[s:e], start_index=s, end_index=e)
            for i, (s, e) in enumerate(windows)
        ]
        logger.debug(
            "chunking_complete",
            text_length=len(text),
            sentences=len(spans),
            chunks=len(chunks),
            chunk_size=self._chunk_size,
            overlap=self._overlap,
        )
        return chunks

    def _seed_start(self, text: str, start: int, end: int, next_end: int) -> int | None:
        """Return where the next chunk begins if seeded with overlap, else ``None``."""
        if self._overlap == 0:
            return None
        seed = max(start, end - self._overlap)
        while seed < end and text[seed].isspace():
            seed += 1
        if seed >= end or next_end - seed > self._chunk_size:
            return None
        return seed
