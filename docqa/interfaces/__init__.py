"""Interface definitions for every external service docqa talks to.

Services depend only on these abstract base classes; concrete adapters in
``docqa/providers/`` are built once at startup in ``docqa/main.py`` and
injected by reference.  Tests inject ``MagicMock(spec=...)`` fakes.

    Interface              ->  Concrete implementations (docqa/providers/)
    ---------------------------------------------------------------------
    ITextExtractor         ->  PyMuPDFTextExtractor
    IEmbeddingProvider     ->  OpenAIEmbeddingProvider, HashEmbeddingProvider
    IVectorStoreProvider   ->  ChromaDBProvider
    ILLMProvider           ->  OpenAILLMProvider, AnthropicLLMProvider
"""

from docqa.interfaces.embedding_provider import IEmbeddingProvider
from docqa.interfaces.llm_provider import ILLMProvider
from docqa.interfaces.text_extractor import ITextExtractor
from docqa.interfaces.vector_store_provider import IVectorStoreProvider

__all__ = [
    "IEmbeddingProvider",
    "ILLMProvider",
    "ITextExtractor",
    "IVectorStoreProvider",
]
