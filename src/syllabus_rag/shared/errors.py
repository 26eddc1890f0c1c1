"""
Errors Module - Typed exceptions for the RAG pipeline.
======================================================

Taxonomy:
- ConfigurationError: required credentials/identifiers missing (fatal at startup)
- ModelLoadError: embedding model failed to load (retryable)
- IndexingError: a chunk failed to embed or upsert (fatal to the build call)
- RetrievalError: vector store query failed (recovered to an empty result)
- SynthesisError / CompletionError: completion capability failed
  (recovered to a canned answer)
"""

from typing import Any, Optional


class SyllabusRAGError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        """
        Initialize error with message and optional context.

        Args:
            message: Human-readable error description
            context: Additional context (operation, backend, ids, ...)
        """
        super().__init__(message)
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{super().__str__()} [Context: {ctx_str}]"
        return super().__str__()


class ConfigurationError(SyllabusRAGError):
    """Raised when required configuration or credentials are missing."""


class ModelLoadError(SyllabusRAGError):
    """Raised when the embedding model cannot be loaded."""


class IndexingError(SyllabusRAGError):
    """Raised when building the index fails part-way."""


class RetrievalError(SyllabusRAGError):
    """Raised when the vector store cannot answer a query."""


class SynthesisError(SyllabusRAGError):
    """Raised when answer synthesis cannot produce a completion."""


class CompletionError(SynthesisError):
    """Raised when the completion capability is unreachable or rejects a request."""
