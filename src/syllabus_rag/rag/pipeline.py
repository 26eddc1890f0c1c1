"""
Pipeline Module - End-to-end RAG orchestration.
===============================================

Wires the components together:
- Index build: sections → chunks → embeddings → vector index
- Query: question → retrieval → grounded answer with confidence
- Status: read-only lifecycle snapshot

Lifecycle:
    uninitialized → indexing → ready
    (a failed build records the error and returns to uninitialized, unless an
    earlier build completed; then it stays in indexing over the old entries)

Index builds are serialized; queries take no lock and never raise.
"""

import threading
from typing import Optional

from syllabus_rag.indexing.embeddings_base import EmbeddingProvider, create_embedding_provider
from syllabus_rag.indexing.vector_store import VectorIndex, create_vector_index
from syllabus_rag.ingestion.chunker import Chunker, ChunkerConfig
from syllabus_rag.ingestion.sources import SectionSource, get_mock_sections
from syllabus_rag.rag.completion import create_completion_client
from syllabus_rag.rag.generator import AnswerSynthesizer
from syllabus_rag.rag.prompts import QUERY_ERROR_ANSWER, PromptBuilder
from syllabus_rag.rag.retriever import Retriever
from syllabus_rag.shared.config import Settings, get_settings
from syllabus_rag.shared.errors import IndexingError, ModelLoadError, SyllabusRAGError
from syllabus_rag.shared.logging import get_logger
from syllabus_rag.shared.schemas import (
    IndexedEntry,
    PipelinePhase,
    PipelineStatus,
    RAGAnswer,
    Section,
)
from syllabus_rag.shared.utils import truncate_text

logger = get_logger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Pipeline Class
# ─────────────────────────────────────────────────────────────────────────────


class RAGPipeline:
    """
    Syllabus question-answering pipeline.

    Construct one per process and pass it to callers explicitly.

    Example:
        >>> pipeline = create_pipeline()
        >>> pipeline.initialize_rag()
        >>> result = pipeline.query("期中考试什么时候")
        >>> print(result.answer, result.confidence)
    """

    def __init__(
        self,
        embedder: EmbeddingProvider,
        index: VectorIndex,
        synthesizer: Optional[AnswerSynthesizer] = None,
        chunker: Optional[Chunker] = None,
        section_source: Optional[SectionSource] = None,
        top_k: Optional[int] = None,
        prune_stale: Optional[bool] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            embedder: Embedding provider (shared by indexing and retrieval)
            index: Vector index
            synthesizer: Answer synthesizer (created from config if None)
            chunker: Section chunker (created from config if None)
            section_source: Section provider for initialize_rag()
            top_k: Default number of chunks to retrieve
            prune_stale: Delete index entries absent from a new build
        """
        settings = get_settings()

        self.embedder = embedder
        self.index = index
        self.synthesizer = synthesizer or AnswerSynthesizer()
        self.chunker = chunker or Chunker()
        self.section_source = section_source or SectionSource()
        self.retriever = Retriever(embedder, index, top_k=top_k)
        self.prune_stale = (
            prune_stale if prune_stale is not None else settings.indexing.prune_stale
        )

        self._build_lock = threading.Lock()
        self._phase = PipelinePhase.UNINITIALIZED
        self._indexed_chunks = 0
        self._has_built = False
        self._last_error: Optional[str] = None

    # ─────────────────────────────────────────────────────────────────────────
    # State
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def phase(self) -> PipelinePhase:
        """Get the current lifecycle phase."""
        return self._phase

    @property
    def is_initialized(self) -> bool:
        """Check whether the last index build completed."""
        return self._phase == PipelinePhase.READY

    def status(self) -> PipelineStatus:
        """
        Get a snapshot of the pipeline state.

        Returns:
            PipelineStatus (no side effects)
        """
        return PipelineStatus(
            is_initialized=self.is_initialized,
            has_embedding_model=self.embedder.is_initialized,
            phase=self._phase,
            indexed_chunks=self._indexed_chunks,
            last_error=self._last_error,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Index Building
    # ─────────────────────────────────────────────────────────────────────────

    def initialize(self, sections: list[Section], show_progress: bool = False) -> int:
        """
        Build the index from sections.

        Args:
            sections: Sections to index
            show_progress: Whether to show an embedding progress bar

        Returns:
            Number of chunks indexed

        Raises:
            ModelLoadError: If the embedding model cannot be loaded
            IndexingError: If chunking, embedding or writing fails
        """
        with self._build_lock:
            return self._build(sections, show_progress=show_progress)

    def reindex(self, sections: list[Section], show_progress: bool = False) -> int:
        """Rebuild the index from a new set of sections."""
        return self.initialize(sections, show_progress=show_progress)

    def initialize_rag(self, use_real_source: bool = False, show_progress: bool = False) -> int:
        """
        Build the index from the section provider.

        Args:
            use_real_source: Scrape the course website (falls back to fixtures)
            show_progress: Whether to show an embedding progress bar

        Returns:
            Number of chunks indexed
        """
        sections = self.section_source.get_sections(use_real_source=use_real_source)
        return self.initialize(sections, show_progress=show_progress)

    def _build(self, sections: list[Section], show_progress: bool = False) -> int:
        """Run one index build. Caller must hold the build lock."""
        logger.info(f"Building index from {len(sections)} sections")
        self._phase = PipelinePhase.INDEXING

        try:
            chunks = self.chunker.chunk_sections(sections)
            vectors = self.embedder.embed_batch(
                [chunk.content for chunk in chunks], show_progress=show_progress
            )
            entries = [
                IndexedEntry.from_chunk(chunk, vector) for chunk, vector in zip(chunks, vectors)
            ]
            self.index.upsert(entries)

            if self.prune_stale:
                self._prune({entry.id for entry in entries})

        except (ModelLoadError, IndexingError) as e:
            self._fail(e)
            raise
        except Exception as e:
            self._fail(e)
            raise IndexingError(f"Index build failed: {e}") from e

        self._indexed_chunks = len(entries)
        self._has_built = True
        self._last_error = None
        self._phase = PipelinePhase.READY
        logger.info(f"Index ready with {len(entries)} chunks")
        return len(entries)

    def _prune(self, keep_ids: set[str]) -> None:
        stale = [chunk_id for chunk_id in self.index.ids() if chunk_id not in keep_ids]
        if stale:
            logger.info(f"Pruning {len(stale)} stale entries")
            self.index.delete(stale)

    def _fail(self, error: Exception) -> None:
        logger.error(f"Index build failed: {error}")
        self._last_error = str(error)
        # A failed re-index keeps serving whatever entries are already stored
        self._phase = (
            PipelinePhase.INDEXING if self._has_built else PipelinePhase.UNINITIALIZED
        )

    def _ensure_initialized(self) -> None:
        """Build the fixture index if the pipeline is still uninitialized."""
        with self._build_lock:
            if self._phase != PipelinePhase.UNINITIALIZED:
                return
            logger.info("Pipeline not initialized, indexing fixture sections")
            self._build(get_mock_sections())

    # ─────────────────────────────────────────────────────────────────────────
    # Querying
    # ─────────────────────────────────────────────────────────────────────────

    def query(self, question: str, top_k: Optional[int] = None) -> RAGAnswer:
        """
        Answer a question from the indexed syllabus.

        Args:
            question: Student question
            top_k: Number of chunks to retrieve (uses default if None)

        Returns:
            RAGAnswer; failures yield a canned answer with no sources
        """
        try:
            if self._phase == PipelinePhase.UNINITIALIZED:
                try:
                    self._ensure_initialized()
                except SyllabusRAGError as e:
                    logger.warning(f"Default initialization failed, querying existing index: {e}")

            hits = self.retriever.retrieve(question, top_k=top_k)
            answer = self.synthesizer.synthesize(question, hits)
            confidence = hits[0].score if hits else 0.0

            logger.info(
                f"Answered '{truncate_text(question, 50)}' "
                f"(sources={len(hits)}, confidence={confidence:.3f})"
            )
            return RAGAnswer(answer=answer, sources=hits, confidence=confidence)

        except Exception as e:
            logger.error(f"Query failed: {e}")
            return RAGAnswer(answer=QUERY_ERROR_ANSWER, sources=[], confidence=0.0)


# ─────────────────────────────────────────────────────────────────────────────
# Factory Function
# ─────────────────────────────────────────────────────────────────────────────


def create_pipeline(settings: Optional[Settings] = None) -> RAGPipeline:
    """
    Create a pipeline from configuration.

    Args:
        settings: Settings instance (uses global if None)

    Returns:
        RAGPipeline (uninitialized; the model loads on first use)

    Raises:
        ConfigurationError: If the vector store or completion backend is misconfigured
    """
    settings = settings or get_settings()

    synthesizer = AnswerSynthesizer(
        completion_client=create_completion_client(settings),
        prompt_builder=PromptBuilder(course_name=settings.course.name),
    )

    return RAGPipeline(
        embedder=create_embedding_provider(settings),
        index=create_vector_index(settings),
        synthesizer=synthesizer,
        chunker=Chunker(ChunkerConfig(max_length=settings.chunking.max_length)),
        section_source=SectionSource(settings=settings),
        top_k=settings.get_effective_top_k(),
        prune_stale=settings.indexing.prune_stale,
    )
