"""
Pinecone Store Module - Hosted vector index backend.
====================================================

Implements the VectorIndex contract on a Pinecone index:
- Upserts in batches of {id, values, metadata}
- Optional namespace isolation
- Scores are the index metric (create the index with metric="cosine")
"""

from typing import Any, Optional

from pinecone import Pinecone

from syllabus_rag.indexing.vector_store import VectorIndex
from syllabus_rag.shared.errors import IndexingError, RetrievalError
from syllabus_rag.shared.logging import get_logger
from syllabus_rag.shared.schemas import IndexedEntry, RetrievalHit

logger = get_logger(__name__)

PINECONE_BATCH_SIZE = 100


class PineconeVectorIndex(VectorIndex):
    """
    Pinecone-backed vector index.

    Example:
        >>> index = PineconeVectorIndex(api_key="...", index_name="cs61a-syllabus")
        >>> index.upsert(entries)
        >>> hits = index.query(vector, top_k=3)
    """

    def __init__(
        self,
        api_key: str,
        index_name: str,
        namespace: str = "",
        index: Optional[Any] = None,
    ):
        """
        Initialize the index connection.

        Args:
            api_key: Pinecone API key
            index_name: Name of an existing Pinecone index
            namespace: Namespace within the index ("" for the default)
            index: Pre-built index handle (skips client creation)
        """
        self.index_name = index_name
        self.namespace = namespace

        if index is not None:
            self._index = index
        else:
            self._index = Pinecone(api_key=api_key).Index(index_name)

        logger.info(f"Pinecone index connected: index={index_name}, namespace={namespace or '-'}")

    @property
    def backend_name(self) -> str:
        """Get the backend name."""
        return "pinecone"

    def _namespace_kwargs(self) -> dict[str, str]:
        return {"namespace": self.namespace} if self.namespace else {}

    @property
    def count(self) -> int:
        """Get the number of vectors in this namespace."""
        stats = self._index.describe_index_stats()
        if self.namespace:
            namespace_stats = (stats.namespaces or {}).get(self.namespace)
            return namespace_stats.vector_count if namespace_stats else 0
        return stats.total_vector_count

    def upsert(self, entries: list[IndexedEntry]) -> int:
        """Upsert entries in batches."""
        if not entries:
            return 0

        written = 0
        for i in range(0, len(entries), PINECONE_BATCH_SIZE):
            batch = entries[i : i + PINECONE_BATCH_SIZE]
            vectors = [
                {"id": entry.id, "values": entry.vector, "metadata": entry.store_metadata()}
                for entry in batch
            ]
            try:
                self._index.upsert(vectors=vectors, **self._namespace_kwargs())
            except Exception as e:
                logger.error(f"Pinecone upsert failed at batch {i // PINECONE_BATCH_SIZE + 1}: {e}")
                raise IndexingError(
                    f"Failed to upsert entries: {e}",
                    context={"backend": "pinecone", "written": written},
                ) from e

            written += len(batch)

        logger.info(f"Upserted {written} entries into Pinecone index {self.index_name}")
        return written

    def query(self, vector: list[float], top_k: int) -> list[RetrievalHit]:
        """Query the index by vector."""
        if top_k < 1:
            return []

        try:
            response = self._index.query(
                vector=vector,
                top_k=top_k,
                include_metadata=True,
                **self._namespace_kwargs(),
            )
            hits = [
                RetrievalHit.from_store(
                    chunk_id=match.id,
                    score=match.score,
                    metadata=match.metadata,
                )
                for match in (response.matches or [])
            ]
        except Exception as e:
            logger.error(f"Pinecone query failed: {e}")
            raise RetrievalError(
                f"Failed to query index: {e}",
                context={"backend": "pinecone", "index": self.index_name},
            ) from e

        hits.sort(key=lambda h: h.score, reverse=True)
        return hits

    def ids(self) -> list[str]:
        """List all ids in the namespace."""
        try:
            ids: list[str] = []
            for page in self._index.list(**self._namespace_kwargs()):
                ids.extend(page)
            return ids
        except Exception as e:
            raise IndexingError(f"Failed to list ids: {e}", context={"backend": "pinecone"}) from e

    def delete(self, ids: list[str]) -> int:
        """Delete entries by id."""
        if not ids:
            return 0

        try:
            for i in range(0, len(ids), PINECONE_BATCH_SIZE):
                self._index.delete(ids=ids[i : i + PINECONE_BATCH_SIZE], **self._namespace_kwargs())
        except Exception as e:
            raise IndexingError(f"Failed to delete entries: {e}", context={"backend": "pinecone"}) from e

        logger.info(f"Deleted {len(ids)} entries from Pinecone index {self.index_name}")
        return len(ids)

    def get_stats(self) -> dict[str, Any]:
        """Get statistics about the index."""
        stats = super().get_stats()
        stats["index_name"] = self.index_name
        stats["namespace"] = self.namespace
        return stats
