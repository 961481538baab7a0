"""PyMuPDF text extractor adapter.

Implements :class:`ITextExtractor` for PDF uploads using ``fitz``
(PyMuPDF).  Extraction runs in two passes:

1. **Primary** -- open the document and read the text layer of every page.
2. **Recovery** -- if the primary pass raises (damaged xref, broken page
   tree, ...), reopen the document and read page by page, skipping pages
   that fail, up to ``max_recovery_pages`` pages.

Either way the text is normalized before the minimum-length check.
PyMuPDF is synchronous C code, so each pass runs in a worker thread via
:func:`asyncio.to_thread` to keep the event loop free.
"""

from __future__ import annotations

import asyncio

import fitz  # PyMuPDF

from docqa.interfaces.text_extractor import ITextExtractor
from docqa.utils.errors import EmptyContentError, ExtractionFailedError
from docqa.utils.logging import get_logger
from docqa.utils.text_normalizer import normalize_extracted_text

logger = get_logger(__name__)


class PyMuPDFTextExtractor(ITextExtractor):
    """Text extractor for PDF documents backed by PyMuPDF."""

    def __init__(self, max_recovery_pages: int = 200) -> None:
        self._max_recovery_pages = max_recovery_pages

    # ------------------------------------------------------------------
    # ITextExtractor implementation
    # ------------------------------------------------------------------

    async def extract(self, raw: bytes) -> str:
        if not raw:
            raise EmptyContentError(provider_name=self.get_provider_name())

        try:
            text = await asyncio.to_thread(self._read_all_pages, raw)
            mode = "primary"
        except Exception as exc:
            logger.warning(
                "pdf_primary_extraction_failed",
                error=str(exc),
                max_pages=self._max_recovery_pages,
            )
            try:
                text = await asyncio.to_thread(self._read_pages_leniently, raw)
            except Exception as recovery_exc:
                raise ExtractionFailedError(
                    message=f"Could not read PDF: {recovery_exc}",
                    provider_name=self.get_provider_name(),
                ) from recovery_exc
            mode = "recovery"

        normalized = normalize_extracted_text(text)
        if len(normalized) < self.MIN_TEXT_LENGTH:
            logger.warning(
                "pdf_no_extractable_text",
                mode=mode,
                raw_length=len(text),
                normalized_length=len(normalized),
            )
            raise EmptyContentError(provider_name=self.get_provider_name())

        logger.info(
            "pdf_text_extracted",
            mode=mode,
            bytes=len(raw),
            raw_length=len(text),
            text_length=len(normalized),
        )
        return normalized

    def get_provider_name(self) -> str:
        return "pymupdf"

    # ------------------------------------------------------------------
    # Private helpers (run in a worker thread)
    # ------------------------------------------------------------------

    @staticmethod
    def _read_all_pages(raw: bytes) -> str:
        with fitz.open(stream=raw, filetype="pdf") as doc:
            return "\n".join(page.get_text() for page in doc)

    def _read_pages_leniently(self, raw: bytes) -> str:
        """Read up to ``max_recovery_pages`` pages, skipping unreadable ones."""
        parts: list[str] = []
        skipped = 0
        with fitz.open(stream=raw, filetype="pdf") as doc:
            page_count = min(doc.page_count, self._max_recovery_pages)
            for page_number in range(page_count):
                try:
                    parts.append(doc.load_page(page_number).get_text())
                except Exception as exc:
                    skipped += 1
                    logger.debug(
                        "pdf_page_skipped",
                        page=page_number,
                        error=str(exc),
                    )
        if skipped:
            logger.warning("pdf_recovery_pages_skipped", skipped=skipped, read=len(parts))
        return "\n".join(parts)
