"""
Shared Module - Common utilities, configuration, schemas, errors, and logging.
==============================================================================

This module provides foundational components used across all other modules:

- config: Configuration loading and management
- logging: Structured logging setup
- errors: Typed pipeline exceptions
- schemas: Pydantic data models
- utils: Utility functions (hashing, ids, JSON I/O)
"""

from syllabus_rag.shared.config import Settings, get_settings
from syllabus_rag.shared.errors import (
    CompletionError,
    ConfigurationError,
    IndexingError,
    ModelLoadError,
    RetrievalError,
    SynthesisError,
    SyllabusRAGError,
)
from syllabus_rag.shared.logging import get_logger, setup_logging
from syllabus_rag.shared.schemas import (
    Chunk,
    ChunkMetadata,
    IndexedEntry,
    PipelineStatus,
    RAGAnswer,
    RetrievalHit,
    Section,
)
from syllabus_rag.shared.utils import compute_hash, generate_chunk_id

__all__ = [
    # Config
    "get_settings",
    "Settings",
    # Logging
    "get_logger",
    "setup_logging",
    # Errors
    "SyllabusRAGError",
    "ConfigurationError",
    "ModelLoadError",
    "IndexingError",
    "RetrievalError",
    "SynthesisError",
    "CompletionError",
    # Schemas
    "Section",
    "Chunk",
    "ChunkMetadata",
    "IndexedEntry",
    "RetrievalHit",
    "RAGAnswer",
    "PipelineStatus",
    # Utils
    "compute_hash",
    "generate_chunk_id",
]
