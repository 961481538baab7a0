"""Document text extractors."""

from docqa.providers.extraction.pymupdf_extractor import PyMuPDFTextExtractor

__all__ = ["PyMuPDFTextExtractor"]
