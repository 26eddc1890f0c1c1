"""
SBERT Embeddings Module - Local embeddings via sentence-transformers.
====================================================================

Provides free, local embeddings using pre-trained SBERT models.
No API key required - runs entirely on local hardware.

Vectors are mean-pooled and L2-normalized, so cosine similarity is
a plain dot product.

Recommended models:
- all-MiniLM-L6-v2: Fast, 384 dimensions (default)
- paraphrase-multilingual-MiniLM-L12-v2: Multilingual, 384 dimensions
- all-mpnet-base-v2: Better quality, 768 dimensions
"""

from typing import Optional

from tqdm import tqdm

from syllabus_rag.indexing.embeddings_base import EmbeddingProvider
from syllabus_rag.shared.config import get_settings
from syllabus_rag.shared.logging import get_logger

logger = get_logger(__name__)


# Model dimension mapping for common models
MODEL_DIMENSIONS = {
    "all-MiniLM-L6-v2": 384,
    "all-MiniLM-L12-v2": 384,
    "all-mpnet-base-v2": 768,
    "paraphrase-multilingual-MiniLM-L12-v2": 384,
    "multi-qa-MiniLM-L6-cos-v1": 384,
}


class SBERTEmbeddingProvider(EmbeddingProvider):
    """
    SBERT embedding provider using sentence-transformers.

    Features:
    - Free, local embeddings (no API key needed)
    - Automatic device selection (CPU/GPU)
    - Lazy, single-flight model loading
    - Efficient batch processing

    Example:
        >>> provider = SBERTEmbeddingProvider()
        >>> embedding = provider.embed_text("递归是一种强大的编程技术")
        >>> print(len(embedding))  # 384 for default model
    """

    def __init__(
        self,
        model_name: Optional[str] = None,
        device: Optional[str] = None,
        batch_size: Optional[int] = None,
        dimensions: Optional[int] = None,
    ):
        """
        Initialize the SBERT provider.

        Args:
            model_name: Model name from Hugging Face (default from config)
            device: Device to use ("cpu", "cuda", "auto")
            batch_size: Batch size for encoding
            dimensions: Expected dimensions if the model is not in the known list
        """
        super().__init__()
        settings = get_settings()
        embeddings_config = settings.embeddings

        self._model_name = model_name or settings.get_effective_embedding_model()
        self._device = device or embeddings_config.device
        self._batch_size = batch_size or embeddings_config.batch_size

        # Get dimensions from mapping or config
        self._dimensions = MODEL_DIMENSIONS.get(
            self._model_name,
            dimensions or embeddings_config.dimensions,
        )

        self._model = None

        logger.debug(
            f"SBERT provider configured: model={self._model_name}, "
            f"device={self._device}, batch_size={self._batch_size}"
        )

    @property
    def provider_name(self) -> str:
        """Get the provider name."""
        return "sbert"

    @property
    def model_name(self) -> str:
        """Get the model name."""
        return self._model_name

    @property
    def dimensions(self) -> int:
        """Get embedding dimensions."""
        return self._dimensions

    def _resolve_device(self) -> str:
        if self._device != "auto":
            return self._device

        import torch

        return "cuda" if torch.cuda.is_available() else "cpu"

    def _load_model(self) -> None:
        """Load the sentence transformer model."""
        from sentence_transformers import SentenceTransformer

        device = self._resolve_device()
        model = SentenceTransformer(self._model_name, device=device)

        # Update dimensions from actual model
        self._dimensions = model.get_sentence_embedding_dimension() or self._dimensions
        self._model = model

        logger.info(
            f"SBERT model loaded: {self._model_name} "
            f"(dims={self._dimensions}, device={device})"
        )

    def _encode(self, texts: list[str], show_progress: bool = False) -> list[list[float]]:
        """Encode texts with normalized embeddings, optionally with a progress bar."""
        if not show_progress:
            return self._encode_batch(texts)

        vectors: list[list[float]] = []
        for i in tqdm(range(0, len(texts), self._batch_size), desc="Embedding"):
            vectors.extend(self._encode_batch(texts[i : i + self._batch_size]))
        return vectors

    def _encode_batch(self, texts: list[str]) -> list[list[float]]:
        embeddings = self._model.encode(
            texts,
            batch_size=self._batch_size,
            convert_to_numpy=True,
            normalize_embeddings=True,
            show_progress_bar=False,
        )
        return [embedding.tolist() for embedding in embeddings]

    def get_info(self) -> dict:
        """Get provider information."""
        info = super().get_info()

        info["batch_size"] = self._batch_size
        info["device"] = self._device

        if self._model is not None:
            info["device_actual"] = str(self._model.device)

        return info
