"""
Vector Store Module - Vector index contract and ChromaDB backend.
=================================================================

Provides a narrow interface to a vector database:
- Idempotent upsert of (id, vector, metadata) entries
- Top-k cosine similarity search, highest score first
- Id listing and deletion for pruning stale entries
- Backend selection from configuration (ChromaDB or Pinecone)

Store failures surface as IndexingError on writes and RetrievalError
on queries.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

import chromadb
from chromadb.config import Settings as ChromaSettings

from syllabus_rag.shared.config import Settings, get_settings
from syllabus_rag.shared.errors import ConfigurationError, IndexingError, RetrievalError
from syllabus_rag.shared.logging import get_logger
from syllabus_rag.shared.schemas import IndexedEntry, RetrievalHit

logger = get_logger(__name__)

CHROMA_BATCH_SIZE = 500


# ─────────────────────────────────────────────────────────────────────────────
# Vector Index Contract
# ─────────────────────────────────────────────────────────────────────────────


class VectorIndex(ABC):
    """
    Abstract vector index.

    Implementations must provide:
    - upsert(): Write entries, replacing any with the same id
    - query(): Top-k nearest entries by cosine similarity
    - ids(): All stored ids
    - delete(): Remove entries by id
    - count: Number of stored entries
    """

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Get the backend identifier."""
        pass

    @property
    @abstractmethod
    def count(self) -> int:
        """Get the number of entries in the index."""
        pass

    @abstractmethod
    def upsert(self, entries: list[IndexedEntry]) -> int:
        """
        Insert or replace entries.

        Args:
            entries: Entries to write

        Returns:
            Number of entries written

        Raises:
            IndexingError: If the store rejects the write
        """
        pass

    @abstractmethod
    def query(self, vector: list[float], top_k: int) -> list[RetrievalHit]:
        """
        Find the entries nearest to a vector.

        Args:
            vector: Query embedding
            top_k: Maximum number of hits

        Returns:
            Hits sorted by score (highest first); empty for an empty index

        Raises:
            RetrievalError: If the store cannot answer
        """
        pass

    @abstractmethod
    def ids(self) -> list[str]:
        """List every stored entry id."""
        pass

    @abstractmethod
    def delete(self, ids: list[str]) -> int:
        """
        Delete entries by id.

        Returns:
            Number of ids submitted for deletion
        """
        pass

    def get_stats(self) -> dict[str, Any]:
        """Get statistics about the index."""
        return {"backend": self.backend_name, "count": self.count}


# ─────────────────────────────────────────────────────────────────────────────
# ChromaDB Backend
# ─────────────────────────────────────────────────────────────────────────────


class ChromaVectorIndex(VectorIndex):
    """
    ChromaDB-backed vector index.

    Features:
    - Persistent local storage (or in-memory ephemeral mode)
    - Cosine distance space; score = 1 - distance
    - Batched upserts

    Example:
        >>> index = ChromaVectorIndex(collection_name="syllabus_chunks")
        >>> index.upsert(entries)
        >>> hits = index.query(vector, top_k=3)
        >>> for hit in hits:
        ...     print(hit.score, hit.chapter)
    """

    def __init__(
        self,
        collection_name: str,
        persist_directory: Optional[Path] = None,
        mode: str = "persistent",
        client: Optional[Any] = None,
    ):
        """
        Initialize the index.

        Args:
            collection_name: Name of the ChromaDB collection
            persist_directory: Directory for persistent storage
            mode: "persistent" or "ephemeral"
            client: Pre-built ChromaDB client (overrides mode)
        """
        self.collection_name = collection_name
        self.persist_directory = Path(persist_directory) if persist_directory else None
        self.mode = mode

        chroma_settings = ChromaSettings(anonymized_telemetry=False, allow_reset=True)

        if client is not None:
            self._client = client
        elif mode == "ephemeral":
            self._client = chromadb.EphemeralClient(settings=chroma_settings)
        elif mode == "persistent":
            if self.persist_directory is None:
                raise ConfigurationError(
                    "Persistent Chroma index requires a directory",
                    context={"collection": collection_name},
                )
            self.persist_directory.mkdir(parents=True, exist_ok=True)
            self._client = chromadb.PersistentClient(
                path=str(self.persist_directory),
                settings=chroma_settings,
            )
        else:
            raise ConfigurationError(
                f"Unknown Chroma mode: {mode}. Valid options: persistent, ephemeral"
            )

        # Embeddings are supplied by the caller, never computed by Chroma
        self._collection = self._client.get_or_create_collection(
            name=collection_name,
            metadata={"hnsw:space": "cosine"},
        )

        logger.info(
            f"Chroma index initialized: collection={collection_name}, mode={mode}, "
            f"existing_count={self._collection.count()}"
        )

    @property
    def backend_name(self) -> str:
        """Get the backend name."""
        return "chroma"

    @property
    def count(self) -> int:
        """Get the number of items in the collection."""
        return self._collection.count()

    def upsert(self, entries: list[IndexedEntry]) -> int:
        """Upsert entries in batches."""
        if not entries:
            return 0

        written = 0
        for i in range(0, len(entries), CHROMA_BATCH_SIZE):
            batch = entries[i : i + CHROMA_BATCH_SIZE]
            try:
                self._collection.upsert(
                    ids=[entry.id for entry in batch],
                    embeddings=[entry.vector for entry in batch],
                    documents=[entry.content for entry in batch],
                    metadatas=[entry.store_metadata() for entry in batch],
                )
            except Exception as e:
                logger.error(f"Chroma upsert failed at batch {i // CHROMA_BATCH_SIZE + 1}: {e}")
                raise IndexingError(
                    f"Failed to upsert entries: {e}",
                    context={"backend": "chroma", "written": written},
                ) from e

            written += len(batch)
            logger.debug(f"Upserted batch {i // CHROMA_BATCH_SIZE + 1}: {written}/{len(entries)}")

        logger.info(f"Upserted {written} entries into {self.collection_name}")
        return written

    def query(self, vector: list[float], top_k: int) -> list[RetrievalHit]:
        """Query the collection by vector."""
        if top_k < 1:
            return []

        try:
            total = self._collection.count()
            if total == 0:
                return []

            results = self._collection.query(
                query_embeddings=[vector],
                n_results=min(top_k, total),
                include=["documents", "metadatas", "distances"],
            )
            return self._results_to_hits(results)
        except Exception as e:
            logger.error(f"Chroma query failed: {e}")
            raise RetrievalError(
                f"Failed to query index: {e}",
                context={"backend": "chroma", "collection": self.collection_name},
            ) from e

    def ids(self) -> list[str]:
        """List all ids in the collection."""
        try:
            return list(self._collection.get(include=[])["ids"])
        except Exception as e:
            raise IndexingError(f"Failed to list ids: {e}", context={"backend": "chroma"}) from e

    def delete(self, ids: list[str]) -> int:
        """Delete entries by id."""
        if not ids:
            return 0

        try:
            self._collection.delete(ids=ids)
        except Exception as e:
            raise IndexingError(f"Failed to delete entries: {e}", context={"backend": "chroma"}) from e

        logger.info(f"Deleted {len(ids)} entries from {self.collection_name}")
        return len(ids)

    def _results_to_hits(self, results: dict) -> list[RetrievalHit]:
        """Convert ChromaDB results to RetrievalHit objects."""
        if not results or not results.get("ids") or not results["ids"][0]:
            return []

        ids = results["ids"][0]
        documents = (results.get("documents") or [[]])[0]
        metadatas = (results.get("metadatas") or [[]])[0]
        distances = (results.get("distances") or [[]])[0]

        hits = []
        for i, chunk_id in enumerate(ids):
            # Cosine distance: similarity = 1 - distance
            distance = distances[i] if distances else 1.0
            hits.append(
                RetrievalHit.from_store(
                    chunk_id=chunk_id,
                    score=1.0 - distance,
                    metadata=metadatas[i] if metadatas else None,
                    document=documents[i] if documents else None,
                )
            )

        hits.sort(key=lambda h: h.score, reverse=True)
        return hits

    def get_stats(self) -> dict[str, Any]:
        """Get statistics about the collection."""
        stats = super().get_stats()
        stats["collection_name"] = self.collection_name
        stats["mode"] = self.mode
        if self.persist_directory is not None:
            stats["persist_directory"] = str(self.persist_directory)
        return stats


# ─────────────────────────────────────────────────────────────────────────────
# Factory Function
# ─────────────────────────────────────────────────────────────────────────────


def create_vector_index(settings: Optional[Settings] = None) -> VectorIndex:
    """
    Create the configured vector index.

    Args:
        settings: Settings instance (uses global if None)

    Returns:
        VectorIndex instance

    Raises:
        ConfigurationError: If the backend is unknown or its credentials are missing
    """
    settings = settings or get_settings()
    backend = settings.get_effective_vector_backend()

    if backend == "chroma":
        chroma_config = settings.vector_store.chroma
        return ChromaVectorIndex(
            collection_name=chroma_config.collection_name,
            persist_directory=settings.resolve_path(chroma_config.persist_dir),
            mode=chroma_config.mode,
        )

    if backend == "pinecone":
        from syllabus_rag.indexing.pinecone_store import PineconeVectorIndex

        if not settings.pinecone_api_key:
            raise ConfigurationError("PINECONE_API_KEY is required for the pinecone backend")

        index_name = settings.get_effective_pinecone_index()
        if not index_name:
            raise ConfigurationError("PINECONE_INDEX is required for the pinecone backend")

        return PineconeVectorIndex(
            api_key=settings.pinecone_api_key,
            index_name=index_name,
            namespace=settings.vector_store.pinecone.namespace,
        )

    raise ConfigurationError(
        f"Unknown vector store backend: {backend}. Valid options: chroma, pinecone"
    )
