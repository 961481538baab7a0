"""Business-logic services.

- **embedding_service** -- remote embeddings with the hash fallback.
- **ingestion** -- extract, chunk, embed and store an uploaded document.
- **answer_service** -- retrieve a document's best passages and generate
  an answer from them.
"""
