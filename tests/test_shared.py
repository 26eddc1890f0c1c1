"""
Tests for Shared Module.
========================

Tests for:
- Settings loading and environment overrides
- Typed errors
- Utility functions
- Logging setup
"""

import logging

import pytest


class TestSettings:
    """Tests for configuration loading."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for name in ("TOP_K", "VECTOR_BACKEND", "EMBEDDING_MODEL", "LOG_LEVEL", "COMPLETION_PROVIDER"):
            monkeypatch.delenv(name, raising=False)

    def test_default_config_file(self, config_path):
        """Test that the shipped YAML loads with the documented defaults."""
        from syllabus_rag.shared.config import load_settings

        settings = load_settings(config_path)

        assert settings.course.name == "CS61A"
        assert settings.chunking.max_length == 200
        assert settings.get_effective_top_k() == 3
        assert settings.get_effective_vector_backend() == "chroma"
        assert settings.get_effective_completion_provider() == "xai"
        assert settings.completion.xai.model_name == "grok-2-1212"

    def test_yaml_values(self, tmp_path):
        """Test loading a custom YAML file."""
        from syllabus_rag.shared.config import load_settings

        config_file = tmp_path / "settings.yaml"
        config_file.write_text(
            "course:\n  name: CS61B\nchunking:\n  max_length: 50\nretrieval:\n  top_k: 5\n",
            encoding="utf-8",
        )

        settings = load_settings(config_file)

        assert settings.course.name == "CS61B"
        assert settings.chunking.max_length == 50
        assert settings.get_effective_top_k() == 5

    def test_missing_file_uses_defaults(self, tmp_path):
        """Test that a missing YAML file falls back to model defaults."""
        from syllabus_rag.shared.config import load_settings

        settings = load_settings(tmp_path / "missing.yaml")
        assert settings.chunking.max_length == 200

    def test_environment_overrides(self, monkeypatch):
        """Test that environment variables win over YAML values."""
        from syllabus_rag.shared.config import Settings

        monkeypatch.setenv("TOP_K", "7")
        monkeypatch.setenv("VECTOR_BACKEND", " Pinecone ")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = Settings(retrieval={"top_k": 5})

        assert settings.get_effective_top_k() == 7
        assert settings.get_effective_vector_backend() == "pinecone"
        assert settings.get_effective_log_level() == "DEBUG"

    def test_resolve_path(self, tmp_path):
        """Test relative paths resolve against the project root."""
        from syllabus_rag.shared.config import Settings

        settings = Settings()

        assert settings.resolve_path("data/index") == settings.project_root / "data/index"
        assert settings.resolve_path(str(tmp_path)) == tmp_path

    def test_reload_settings(self):
        """Test that reloading builds a fresh instance."""
        from syllabus_rag.shared.config import get_settings, reload_settings

        first = get_settings()
        assert get_settings() is first

        second = reload_settings()
        assert second is not first
        assert get_settings() is second


class TestErrors:
    """Tests for the exception hierarchy."""

    def test_context_in_message(self):
        """Test that context is rendered into the message."""
        from syllabus_rag.shared.errors import IndexingError

        error = IndexingError("upsert failed", context={"backend": "chroma", "written": 0})

        assert error.context == {"backend": "chroma", "written": 0}
        assert str(error) == "upsert failed [Context: backend=chroma, written=0]"

    def test_hierarchy(self):
        """Test that completion failures are synthesis failures."""
        from syllabus_rag.shared.errors import CompletionError, SyllabusRAGError, SynthesisError

        error = CompletionError("unreachable")

        assert isinstance(error, SynthesisError)
        assert isinstance(error, SyllabusRAGError)
        assert str(error) == "unreachable"


class TestUtils:
    """Tests for utility functions."""

    def test_generate_chunk_id(self):
        """Test that ids are deterministic and depend on every part."""
        from syllabus_rag.shared.utils import compute_hash, generate_chunk_id

        text_hash = compute_hash("期中考试")
        chunk_id = generate_chunk_id("期中考试 1", 4, 0, text_hash)

        assert chunk_id == generate_chunk_id("期中考试 1", 4, 0, text_hash)
        assert chunk_id.startswith("chunk_")
        assert chunk_id.endswith(text_hash[:8])
        assert chunk_id != generate_chunk_id("期中考试 1", 4, 1, text_hash)
        assert chunk_id != generate_chunk_id("递归", 4, 0, text_hash)

    def test_truncate_text(self):
        """Test truncation with suffix."""
        from syllabus_rag.shared.utils import truncate_text

        assert truncate_text("short", 10) == "short"
        assert truncate_text("a" * 20, 10) == "aaaaaaa..."

    def test_clean_whitespace(self):
        """Test whitespace collapsing."""
        from syllabus_rag.shared.utils import clean_whitespace

        assert clean_whitespace("  a \n\t b  ") == "a b"

    def test_json_round_trip_keeps_unicode(self, tmp_path):
        """Test JSON files keep non-ASCII text readable."""
        from syllabus_rag.shared.utils import load_json, save_json

        path = tmp_path / "nested" / "data.json"
        save_json(path, {"title": "课程政策"})

        assert "课程政策" in path.read_text(encoding="utf-8")
        assert load_json(path) == {"title": "课程政策"}


class TestLogging:
    """Tests for logging setup."""

    def test_force_reconfigures(self, tmp_path):
        """Test that forced setup replaces handlers and honors the level."""
        from syllabus_rag.shared.logging import get_logger, setup_logging

        log_file = tmp_path / "logs" / "app.log"
        setup_logging(level="WARNING", use_rich=False, log_file=str(log_file), force=True)

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert any(isinstance(h, logging.FileHandler) for h in root.handlers)

        get_logger("syllabus_rag.test").warning("written to file")
        for handler in root.handlers:
            handler.flush()
        assert "written to file" in log_file.read_text(encoding="utf-8")

        for handler in root.handlers:
            handler.close()
        setup_logging(level="INFO", force=True)
        assert logging.getLogger("chromadb").level == logging.WARNING
