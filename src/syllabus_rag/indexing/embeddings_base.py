"""
Embeddings Base Module - Abstract interface for embedding providers.
===================================================================

Defines the abstract base class for embedding providers:
- Lazy, single-flight model loading (at most one load under concurrent first use)
- Failed loads leave the provider uninitialized so a later call retries
- Provider-agnostic embed_text / embed_query / embed_batch
"""

import threading
from abc import ABC, abstractmethod
from typing import Optional

from syllabus_rag.shared.config import Settings, get_settings
from syllabus_rag.shared.errors import ModelLoadError
from syllabus_rag.shared.logging import get_logger

logger = get_logger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Abstract Base Class
# ─────────────────────────────────────────────────────────────────────────────


class EmbeddingProvider(ABC):
    """
    Abstract base class for embedding providers.

    Implementations must provide:
    - _load_model(): Load the underlying model (called at most once per success)
    - _encode(): Encode non-empty texts into vectors

    Properties:
    - model_name: Name of the embedding model
    - dimensions: Embedding vector dimensions
    - provider_name: Provider identifier
    """

    def __init__(self) -> None:
        self._init_lock = threading.Lock()
        self._initialized = False

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Get the provider name identifier."""
        pass

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the model name being used."""
        pass

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Get the embedding vector dimensions."""
        pass

    @abstractmethod
    def _load_model(self) -> None:
        """Load the model. Raise on failure."""
        pass

    @abstractmethod
    def _encode(self, texts: list[str], show_progress: bool = False) -> list[list[float]]:
        """
        Encode texts into vectors.

        Args:
            texts: Non-empty texts to encode
            show_progress: Whether to show progress bar

        Returns:
            One vector per text, in input order
        """
        pass

    # ─────────────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def is_initialized(self) -> bool:
        """Check whether the model has been loaded."""
        return self._initialized

    def initialize(self) -> None:
        """
        Load the model if it is not loaded yet.

        Idempotent. Concurrent callers wait for a single load.

        Raises:
            ModelLoadError: If the model cannot be loaded
        """
        if self._initialized:
            return

        with self._init_lock:
            if self._initialized:
                return

            logger.info(f"Loading embedding model: {self.model_name}")
            try:
                self._load_model()
            except ModelLoadError:
                logger.error(f"Failed to load embedding model {self.model_name}")
                raise
            except Exception as e:
                logger.error(f"Failed to load embedding model {self.model_name}: {e}")
                raise ModelLoadError(
                    f"Failed to load embedding model: {e}",
                    context={"provider": self.provider_name, "model": self.model_name},
                ) from e

            self._initialized = True
            logger.info(f"Embedding model ready: {self.model_name} (dims={self.dimensions})")

    # ─────────────────────────────────────────────────────────────────────────
    # Embedding
    # ─────────────────────────────────────────────────────────────────────────

    def embed_text(self, text: str) -> list[float]:
        """
        Embed a single text string.

        Args:
            text: Text to embed

        Returns:
            Embedding vector as list of floats
        """
        return self.embed_batch([text])[0]

    def embed_query(self, query: str) -> list[float]:
        """
        Embed a query text.

        Some providers may use different embeddings for queries vs documents.
        Default implementation just calls embed_text().
        """
        return self.embed_text(query)

    def embed_batch(
        self,
        texts: list[str],
        show_progress: bool = False,
    ) -> list[list[float]]:
        """
        Embed multiple texts efficiently.

        Blank texts get a zero vector.

        Args:
            texts: List of texts to embed
            show_progress: Whether to show progress bar

        Returns:
            List of embedding vectors, same order as texts
        """
        if not texts:
            return []

        self.initialize()

        non_empty_indices = [i for i, text in enumerate(texts) if text and text.strip()]
        encoded = (
            self._encode([texts[i] for i in non_empty_indices], show_progress=show_progress)
            if non_empty_indices
            else []
        )

        result = [[0.0] * self.dimensions for _ in range(len(texts))]
        for i, vector in zip(non_empty_indices, encoded):
            result[i] = vector

        return result

    def get_info(self) -> dict:
        """
        Get provider information.

        Returns:
            Dictionary with provider details
        """
        return {
            "provider": self.provider_name,
            "model": self.model_name,
            "dimensions": self.dimensions,
            "initialized": self.is_initialized,
        }


# ─────────────────────────────────────────────────────────────────────────────
# Provider Factory
# ─────────────────────────────────────────────────────────────────────────────


def create_embedding_provider(settings: Optional[Settings] = None) -> EmbeddingProvider:
    """
    Create the configured embedding provider.

    The model itself is not loaded until first use.

    Args:
        settings: Settings instance (uses global if None)

    Returns:
        EmbeddingProvider instance

    Example:
        >>> provider = create_embedding_provider()
        >>> embeddings = provider.embed_batch(["text1", "text2"])
    """
    from syllabus_rag.indexing.embeddings_sbert import SBERTEmbeddingProvider

    settings = settings or get_settings()
    provider = SBERTEmbeddingProvider(
        model_name=settings.get_effective_embedding_model(),
        device=settings.embeddings.device,
        batch_size=settings.embeddings.batch_size,
        dimensions=settings.embeddings.dimensions,
    )

    logger.debug(
        f"Created embedding provider: {provider.provider_name} (model={provider.model_name})"
    )
    return provider
