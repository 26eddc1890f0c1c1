"""
Tests for the RAG Pipeline.
===========================

Tests for:
- Index build lifecycle and status
- End-to-end querying over the fixture syllabus
- Failure handling (model load, completion, unexpected errors)
- Re-indexing and stale entry pruning
"""

from unittest.mock import MagicMock, patch

import pytest

from tests.conftest import BigramEmbeddingProvider


class BrokenEmbeddingProvider(BigramEmbeddingProvider):
    """Embedding provider whose model never loads."""

    def _load_model(self) -> None:
        self.load_count += 1
        raise OSError("model files not found")


# ─────────────────────────────────────────────────────────────────────────────
# Lifecycle Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestPipelineLifecycle:
    """Tests for index building and status."""

    def test_initial_status(self, make_pipeline):
        """Test the status of a fresh pipeline."""
        from syllabus_rag.shared.schemas import PipelinePhase

        pipeline = make_pipeline()
        status = pipeline.status()

        assert not status.is_initialized
        assert not status.has_embedding_model
        assert status.phase == PipelinePhase.UNINITIALIZED.value
        assert status.indexed_chunks == 0
        assert status.last_error is None

    def test_initialize_with_fixtures(self, make_pipeline, mock_sections, chroma_index):
        """Test building the index from the fixture sections."""
        from syllabus_rag.shared.schemas import PipelinePhase

        pipeline = make_pipeline()
        count = pipeline.initialize(mock_sections)

        assert count >= len(mock_sections)
        assert pipeline.is_initialized
        assert pipeline.phase == PipelinePhase.READY
        assert chroma_index.count == count

        status = pipeline.status()
        assert status.is_initialized
        assert status.has_embedding_model
        assert status.indexed_chunks == count

    def test_initialize_rag_uses_section_source(self, make_pipeline, mock_sections):
        """Test building from the configured section provider."""
        source = MagicMock()
        source.get_sections.return_value = mock_sections

        pipeline = make_pipeline(section_source=source)
        pipeline.initialize_rag()

        source.get_sections.assert_called_once_with(use_real_source=False)
        assert pipeline.is_initialized

    def test_status_has_no_side_effects(self, make_pipeline, fake_embedder):
        """Test that reading status does not load the model."""
        pipeline = make_pipeline()
        pipeline.status()
        pipeline.status()

        assert fake_embedder.load_count == 0
        assert not pipeline.is_initialized

    def test_model_load_failure(self, make_pipeline, mock_sections):
        """Test that a failed build returns to uninitialized with the error recorded."""
        from syllabus_rag.shared.errors import ModelLoadError
        from syllabus_rag.shared.schemas import PipelinePhase

        pipeline = make_pipeline(embedder=BrokenEmbeddingProvider())

        with pytest.raises(ModelLoadError):
            pipeline.initialize(mock_sections)

        assert pipeline.phase == PipelinePhase.UNINITIALIZED
        assert "model files not found" in pipeline.status().last_error

    def test_index_failure_is_wrapped(self, make_pipeline, mock_sections):
        """Test that unexpected build errors surface as IndexingError."""
        from syllabus_rag.shared.errors import IndexingError

        index = MagicMock()
        index.upsert.side_effect = RuntimeError("disk full")
        pipeline = make_pipeline(index=index)

        with pytest.raises(IndexingError):
            pipeline.initialize(mock_sections)
        assert not pipeline.is_initialized

    def test_reindex_prunes_stale_entries(self, make_pipeline, mock_sections, sample_section, chroma_index):
        """Test that re-indexing removes entries absent from the new build."""
        from syllabus_rag.ingestion.chunker import Chunker

        pipeline = make_pipeline()
        pipeline.initialize(mock_sections)

        count = pipeline.reindex([sample_section])

        expected_ids = {chunk.id for chunk in Chunker().chunk_sections([sample_section])}
        assert count == len(expected_ids)
        assert set(chroma_index.ids()) == expected_ids

    def test_reindex_without_pruning(self, make_pipeline, mock_sections, sample_section, chroma_index):
        """Test that pruning can be disabled."""
        pipeline = make_pipeline(prune_stale=False)
        first = pipeline.initialize(mock_sections)

        pipeline.reindex([sample_section])

        assert chroma_index.count > first

    def test_failed_reindex_keeps_existing_entries(self, make_pipeline, chroma_index, mock_completion_client):
        """Test that a failed re-index does not trigger a fixture rebuild on the next query."""
        from syllabus_rag.shared.errors import IndexingError
        from syllabus_rag.shared.schemas import PipelinePhase, Section

        office_hours = Section(
            title="Office Hours",
            content="办公时间在每周三下午3-5点。 地点在 Soda Hall 781。",
            week=0,
            topics=["办公时间"],
            type="policy",
        )
        pipeline = make_pipeline()
        pipeline.initialize([office_hours])
        existing_ids = set(chroma_index.ids())

        with patch.object(chroma_index, "upsert", side_effect=IndexingError("disk full")):
            with pytest.raises(IndexingError):
                pipeline.reindex([office_hours])

        assert pipeline.phase == PipelinePhase.INDEXING
        assert not pipeline.is_initialized
        assert "disk full" in pipeline.status().last_error

        result = pipeline.query("办公时间是什么时候")

        assert set(chroma_index.ids()) == existing_ids
        assert [hit.chapter for hit in result.sources] == ["Office Hours"]
        assert pipeline.phase == PipelinePhase.INDEXING

    def test_initialize_is_idempotent(self, make_pipeline, mock_sections, chroma_index):
        """Test that indexing the same sections twice keeps one copy."""
        pipeline = make_pipeline()
        first = pipeline.initialize(mock_sections)
        second = pipeline.initialize(mock_sections)

        assert first == second
        assert chroma_index.count == first


# ─────────────────────────────────────────────────────────────────────────────
# Query Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestPipelineQuery:
    """Tests for end-to-end querying."""

    def test_midterm_question(self, make_pipeline, mock_sections, mock_completion_client):
        """Test that the exam section is the top source for a midterm question."""
        pipeline = make_pipeline()
        pipeline.initialize(mock_sections)

        result = pipeline.query("期中考试什么时候")

        assert result.answer == "期中考试 1 定于 7月17日 晚上7-9点。"
        assert 0 < len(result.sources) <= 3
        assert result.sources[0].chapter == "期中考试 1"
        assert "7月17日" in result.sources[0].content
        assert result.confidence == pytest.approx(result.sources[0].score)
        assert result.confidence > 0

        prompt = mock_completion_client.complete.call_args.args[0]
        assert "章节: 期中考试 1" in prompt

    def test_query_auto_initializes(self, make_pipeline, fake_embedder):
        """Test that querying an uninitialized pipeline indexes the fixtures."""
        pipeline = make_pipeline()

        result = pipeline.query("递归是什么")

        assert pipeline.is_initialized
        assert fake_embedder.load_count == 1
        assert result.sources[0].chapter == "递归"

    def test_top_k_override(self, make_pipeline, mock_sections):
        """Test per-query top_k."""
        pipeline = make_pipeline()
        pipeline.initialize(mock_sections)

        assert len(pipeline.query("考试", top_k=1).sources) == 1

    def test_zero_top_k(self, make_pipeline, mock_sections, mock_completion_client):
        """Test that top_k=0 retrieves nothing."""
        pipeline = make_pipeline()
        pipeline.initialize(mock_sections)

        result = pipeline.query("期中考试什么时候", top_k=0)

        assert result.sources == []
        assert result.confidence == 0.0
        mock_completion_client.complete.assert_not_called()

    def test_vector_store_failure(self, make_pipeline, mock_sections, chroma_index, mock_completion_client):
        """Test that an unreachable store yields an answer with no sources."""
        pipeline = make_pipeline()
        pipeline.initialize(mock_sections)

        collection = MagicMock()
        collection.count.side_effect = RuntimeError("connection refused")
        collection.query.side_effect = RuntimeError("connection refused")
        chroma_index._collection = collection

        result = pipeline.query("期中考试什么时候")

        assert result.sources == []
        assert result.confidence == 0.0
        assert result.answer == "抱歉，我在 CS61A 课程大纲中没有找到相关信息。"
        mock_completion_client.complete.assert_not_called()

    def test_degraded_answer(self, make_pipeline, mock_sections, mock_completion_client):
        """Test that completion failures keep the sources."""
        from syllabus_rag.rag.prompts import DEGRADED_ANSWER
        from syllabus_rag.shared.errors import CompletionError

        mock_completion_client.complete.side_effect = CompletionError("unreachable")
        pipeline = make_pipeline()
        pipeline.initialize(mock_sections)

        result = pipeline.query("期中考试什么时候")

        assert result.answer == DEGRADED_ANSWER
        assert result.sources
        assert result.confidence > 0

    def test_empty_index(self, make_pipeline, mock_completion_client):
        """Test the no-information answer over an empty index."""
        pipeline = make_pipeline()
        pipeline.initialize([])

        result = pipeline.query("期中考试什么时候")

        assert result.answer == "抱歉，我在 CS61A 课程大纲中没有找到相关信息。"
        assert result.sources == []
        assert result.confidence == 0.0
        mock_completion_client.complete.assert_not_called()

    def test_model_failure_yields_error_answer(self, make_pipeline):
        """Test that an unusable model produces the error answer instead of raising."""
        from syllabus_rag.rag.prompts import QUERY_ERROR_ANSWER

        pipeline = make_pipeline(embedder=BrokenEmbeddingProvider())

        result = pipeline.query("期中考试什么时候")

        assert result.answer == QUERY_ERROR_ANSWER
        assert result.sources == []
        assert result.confidence == 0.0
        assert pipeline.status().last_error is not None

    def test_unexpected_error_yields_error_answer(self, make_pipeline, mock_sections):
        """Test that any failure in the query path is contained."""
        from syllabus_rag.rag.prompts import QUERY_ERROR_ANSWER

        pipeline = make_pipeline()
        pipeline.initialize(mock_sections)
        pipeline.synthesizer = MagicMock()
        pipeline.synthesizer.synthesize.side_effect = KeyError("boom")

        result = pipeline.query("期中考试什么时候")

        assert result.answer == QUERY_ERROR_ANSWER
        assert result.sources == []
