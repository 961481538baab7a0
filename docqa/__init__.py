"""docqa -- ask questions about an uploaded PDF.

Upload a document, index its text as embedded chunks in a vector store,
then answer natural-language questions from the most relevant passages.
"""

__version__ = "0.1.0"
