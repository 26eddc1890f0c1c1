"""
Syllabus RAG - Course Teaching-Assistant Retrieval Pipeline
===========================================================

A small Retrieval-Augmented Generation system that answers student questions
about a course syllabus (CS61A by default):

- Splits labeled syllabus sections into bounded-length chunks
- Embeds chunks with a local sentence-transformers model
- Indexes and queries them in a vector store (ChromaDB or Pinecone)
- Synthesizes a grounded answer with a confidence estimate

RAG flow: embed question → retrieve top-k chunks → build grounded prompt →
text completion → answer + sources + confidence.
"""

__version__ = "0.1.0"
__author__ = "Syllabus RAG Team"
__license__ = "MIT"

__all__ = [
    # Version info
    "__version__",
    "__author__",
    "__license__",
    # Main modules (imported on demand)
    "shared",
    "ingestion",
    "indexing",
    "rag",
    "cli",
]
