"""Document ingestion pipeline: **extract -> chunk -> embed -> store**.

1. **Extract** (via ITextExtractor) -- raw PDF bytes to normalized text.
2. **Chunk** (chunker.py / TextChunker) -- sentence-aware overlapping
   windows with exact character offsets.
3. **Embed** (via EmbeddingService) -- remote embeddings with a local
   hash fallback.
4. **Store** (via IVectorStoreProvider) -- records upserted into the
   vector index, keyed ``{document_id}_{chunk_index}``.

IngestionService orchestrates the four stages.
"""

from docqa.services.ingestion.chunker import TextChunker, split_sentences
from docqa.services.ingestion.ingestion_service import IngestionService

__all__ = ["IngestionService", "TextChunker", "split_sentences"]
