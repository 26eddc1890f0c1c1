"""
Indexing Module - Embeddings and vector storage.
================================================

This module handles embedding generation and vector database operations:

- embeddings_base: Abstract interface for embedding providers
- embeddings_sbert: SBERT (sentence-transformers) local embeddings
- vector_store: Vector index contract and ChromaDB backend
- pinecone_store: Pinecone hosted backend

The index contract lets the pipeline switch between ChromaDB and Pinecone
without changing retrieval logic.
"""

from syllabus_rag.indexing.embeddings_base import (
    EmbeddingProvider,
    create_embedding_provider,
)
from syllabus_rag.indexing.embeddings_sbert import SBERTEmbeddingProvider
from syllabus_rag.indexing.vector_store import (
    ChromaVectorIndex,
    VectorIndex,
    create_vector_index,
)

__all__ = [
    # Embeddings
    "EmbeddingProvider",
    "create_embedding_provider",
    "SBERTEmbeddingProvider",
    # Vector Index
    "VectorIndex",
    "ChromaVectorIndex",
    "create_vector_index",
]
