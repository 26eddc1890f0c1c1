"""
Tests for the CLI.
==================

Commands run through Typer's CliRunner with the pipeline factory patched
to use the deterministic embedder and a temporary index.
"""

from unittest.mock import MagicMock, PropertyMock, patch

import pytest
from typer.testing import CliRunner


@pytest.fixture
def runner():
    return CliRunner()


class TestCLI:
    """Tests for the Typer commands."""

    def test_query_plain(self, runner, make_pipeline):
        """Test plain-text answers with numbered sources."""
        from syllabus_rag.cli.main import app

        pipeline = make_pipeline()
        with patch("syllabus_rag.cli.main._build_pipeline", return_value=pipeline):
            result = runner.invoke(app, ["query", "期中考试什么时候", "--plain"])

        assert result.exit_code == 0
        assert "期中考试 1 定于 7月17日 晚上7-9点。" in result.output
        assert "来源信息：" in result.output
        assert "1. 期中考试 1 (相似度:" in result.output

    def test_query_plain_without_sources(self, runner, make_pipeline):
        """Test hiding sources."""
        from syllabus_rag.cli.main import app

        pipeline = make_pipeline()
        with patch("syllabus_rag.cli.main._build_pipeline", return_value=pipeline):
            result = runner.invoke(app, ["query", "期中考试什么时候", "--plain", "--no-sources"])

        assert result.exit_code == 0
        assert "来源信息" not in result.output

    def test_init(self, runner, make_pipeline, chroma_index):
        """Test building the index from the fixture sections."""
        from syllabus_rag.cli.main import app

        pipeline = make_pipeline()
        with patch("syllabus_rag.cli.main._build_pipeline", return_value=pipeline):
            result = runner.invoke(app, ["init"])

        assert result.exit_code == 0
        assert "Indexed" in result.output
        assert chroma_index.count > 0

    def test_init_failure_exits_nonzero(self, runner, make_pipeline):
        """Test that a failed build exits with status 1."""
        from syllabus_rag.cli.main import app
        from tests.test_pipeline import BrokenEmbeddingProvider

        pipeline = make_pipeline(embedder=BrokenEmbeddingProvider())
        with patch("syllabus_rag.cli.main._build_pipeline", return_value=pipeline):
            result = runner.invoke(app, ["init"])

        assert result.exit_code == 1

    def test_status(self, runner, make_pipeline):
        """Test the status table."""
        from syllabus_rag.cli.main import app

        pipeline = make_pipeline()
        with patch("syllabus_rag.cli.main._build_pipeline", return_value=pipeline):
            result = runner.invoke(app, ["status"])

        assert result.exit_code == 0
        assert "Pipeline Status" in result.output
        assert "hashed-bigrams" in result.output

    def test_info(self, runner):
        """Test the configuration overview."""
        from syllabus_rag.cli.main import app

        result = runner.invoke(app, ["info"])

        assert result.exit_code == 0
        assert "Syllabus RAG" in result.output
        assert "XAI_API_KEY" in result.output

    def test_status_with_unreachable_index(self, runner, make_pipeline):
        """Test that status still renders when the index cannot be counted."""
        from syllabus_rag.cli.main import app

        index = MagicMock()
        type(index).count = PropertyMock(side_effect=RuntimeError("connection refused"))
        pipeline = make_pipeline(index=index)
        with patch("syllabus_rag.cli.main._build_pipeline", return_value=pipeline):
            result = runner.invoke(app, ["status"])

        assert result.exit_code == 0
        assert "unavailable" in result.output
