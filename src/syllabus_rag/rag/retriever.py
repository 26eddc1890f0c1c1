"""
Retriever Module - Semantic chunk retrieval from the vector index.
=================================================================

Embeds a question and returns the top-k most similar chunks:
- Highest score first, at most k hits
- Blank questions return nothing
- Index failures degrade to an empty result
"""

from typing import Optional

from syllabus_rag.indexing.embeddings_base import EmbeddingProvider
from syllabus_rag.indexing.vector_store import VectorIndex
from syllabus_rag.shared.config import get_settings
from syllabus_rag.shared.errors import RetrievalError
from syllabus_rag.shared.logging import get_logger
from syllabus_rag.shared.schemas import RetrievalHit
from syllabus_rag.shared.utils import truncate_text

logger = get_logger(__name__)


class Retriever:
    """
    Retrieves relevant chunks from the vector index.

    Example:
        >>> retriever = Retriever(embedder, index)
        >>> hits = retriever.retrieve("期中考试什么时候")
        >>> for hit in hits:
        ...     print(f"{hit.chapter}: {hit.score:.3f}")
    """

    def __init__(
        self,
        embedder: EmbeddingProvider,
        index: VectorIndex,
        top_k: Optional[int] = None,
    ):
        """
        Initialize the retriever.

        Args:
            embedder: Embedding provider for questions
            index: Vector index to search
            top_k: Default number of results (uses config if None)
        """
        self.embedder = embedder
        self.index = index
        self._top_k = top_k if top_k is not None else get_settings().get_effective_top_k()

        logger.debug(f"Retriever initialized: top_k={self._top_k}")

    @property
    def top_k(self) -> int:
        """Get the default number of results."""
        return self._top_k

    def retrieve(self, question: str, top_k: Optional[int] = None) -> list[RetrievalHit]:
        """
        Retrieve the chunks most similar to a question.

        Args:
            question: Question text
            top_k: Number of results (uses default if None)

        Returns:
            List of RetrievalHit objects sorted by score, at most top_k long

        Raises:
            ModelLoadError: If the embedding model cannot be loaded
        """
        if not question or not question.strip():
            logger.warning("Empty question provided")
            return []

        k = self._top_k if top_k is None else top_k
        if k < 1:
            return []

        vector = self.embedder.embed_query(question)

        try:
            hits = self.index.query(vector, k)
        except RetrievalError as e:
            logger.warning(f"Retrieval failed, continuing without context: {e}")
            return []

        hits = sorted(hits, key=lambda h: h.score, reverse=True)[:k]

        logger.info(
            f"Retrieved {len(hits)} chunks for question: '{truncate_text(question, 50)}' (k={k})"
        )
        return hits
