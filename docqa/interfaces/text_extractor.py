"""Abstract base class for document text extractors.

Turns raw uploaded bytes into normalized plain text.  The shipped adapter
reads PDFs with PyMuPDF; other formats plug in behind the same contract.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementation: PyMuPDFTextExtractor (docqa/providers/extraction/)
class ITextExtractor(ABC):
    """Contract for converting a document payload into normalized text."""

    # Extractions shorter than this are treated as unreadable.
    MIN_TEXT_LENGTH = 10

    @abstractmethod
    async def extract(self, raw: bytes) -> str:
        """Extract and normalize the text of a document.

        Parameters
        ----------
        raw:
            The complete document payload.

        Returns
        -------
        str
            Text with whitespace collapsed to single spaces and
            non-printable characters removed.  Always at least
            :attr:`MIN_TEXT_LENGTH` characters long.

        Raises
        ------
        docqa.utils.errors.EmptyContentError
            If the document yields too little text (e.g. image-only scans).
        docqa.utils.errors.ExtractionFailedError
            If the document cannot be parsed, even in degraded mode.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"pymupdf"``."""
