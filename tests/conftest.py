"""
Pytest Configuration and Fixtures.
===================================

Shared fixtures for all test modules:
- Sample section and hit fixtures
- A deterministic embedding provider (hashed character bigrams)
- Temporary Chroma indices
- Mock completion clients
"""

import hashlib
import math
from pathlib import Path
from typing import Optional
from unittest.mock import MagicMock

import pytest

from syllabus_rag.indexing.embeddings_base import EmbeddingProvider


# ─────────────────────────────────────────────────────────────────────────────
# Fake Embedding Provider
# ─────────────────────────────────────────────────────────────────────────────


class BigramEmbeddingProvider(EmbeddingProvider):
    """
    Deterministic stand-in for a sentence-transformers model.

    Counts character bigrams (whitespace ignored) into hashed buckets and
    L2-normalizes, so texts sharing words score higher under cosine.
    """

    def __init__(self, dimensions: int = 4096):
        super().__init__()
        self._dims = dimensions
        self.load_count = 0

    @property
    def provider_name(self) -> str:
        return "bigram"

    @property
    def model_name(self) -> str:
        return "hashed-bigrams"

    @property
    def dimensions(self) -> int:
        return self._dims

    def _load_model(self) -> None:
        self.load_count += 1

    def _bucket(self, token: str) -> int:
        digest = hashlib.md5(token.encode("utf-8")).hexdigest()
        return int(digest, 16) % self._dims

    def _vector(self, text: str) -> list[float]:
        chars = [c for c in text.lower() if not c.isspace()]
        tokens = ["".join(pair) for pair in zip(chars, chars[1:])] or chars
        vector = [0.0] * self._dims
        for token in tokens:
            vector[self._bucket(token)] += 1.0
        norm = math.sqrt(sum(v * v for v in vector)) or 1.0
        return [v / norm for v in vector]

    def _encode(self, texts: list[str], show_progress: bool = False) -> list[list[float]]:
        return [self._vector(text) for text in texts]


# ─────────────────────────────────────────────────────────────────────────────
# Path Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_path(project_root: Path) -> Path:
    """Get the config file path."""
    return project_root / "config" / "settings.yaml"


# ─────────────────────────────────────────────────────────────────────────────
# Sample Data Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def sample_section_data() -> dict:
    """Sample section data in the camelCase shape used by scraped dumps."""
    return {
        "title": "Lab 0",
        "content": "截止日期是6月30日。 关注环境设置。 完成终端练习。",
        "week": 1,
        "difficulty": "beginner",
        "topics": ["环境配置", "终端使用"],
        "type": "assignment",
        "learningObjectives": ["配置 Python 开发环境"],
        "prerequisites": ["无"],
    }


@pytest.fixture
def sample_section(sample_section_data: dict):
    """Sample Section instance."""
    from syllabus_rag.shared.schemas import Section

    return Section.model_validate(sample_section_data)


@pytest.fixture
def mock_sections():
    """The built-in fixture sections."""
    from syllabus_rag.ingestion.sources import get_mock_sections

    return get_mock_sections()


@pytest.fixture
def sample_retrieval_hits():
    """Sample RetrievalHit instances, highest score first."""
    from syllabus_rag.shared.schemas import Chunk, ChunkMetadata, RetrievalHit

    return [
        RetrievalHit(
            chunk=Chunk(
                id="chunk_exam",
                content="期中考试 1 定于 7月17日 晚上7-9点进行，仅限线下考试",
                metadata=ChunkMetadata(chapter="期中考试 1", type="exam", week=3),
            ),
            score=0.82,
        ),
        RetrievalHit(
            chunk=Chunk(
                id="chunk_policy",
                content="考试必须按时参加，除非有特殊情况",
                metadata=ChunkMetadata(chapter="课程政策", type="policy", week=0),
            ),
            score=0.41,
        ),
    ]


# ─────────────────────────────────────────────────────────────────────────────
# Component Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def fake_embedder() -> BigramEmbeddingProvider:
    """Deterministic embedding provider."""
    return BigramEmbeddingProvider()


@pytest.fixture
def chroma_index(tmp_path: Path):
    """Empty persistent Chroma index in a temporary directory."""
    from syllabus_rag.indexing.vector_store import ChromaVectorIndex

    return ChromaVectorIndex(
        collection_name="test_chunks",
        persist_directory=tmp_path / "index",
    )


@pytest.fixture
def mock_completion_client():
    """Completion client that always answers."""
    from syllabus_rag.rag.completion import CompletionClient

    client = MagicMock(spec=CompletionClient)
    client.provider_name = "mock"
    client.model_name = "mock-model"
    client.complete.return_value = "期中考试 1 定于 7月17日 晚上7-9点。"
    return client


@pytest.fixture
def make_pipeline(fake_embedder, chroma_index, mock_completion_client):
    """Factory for pipelines built on the fake embedder and a temp index."""
    from syllabus_rag.ingestion.chunker import Chunker, ChunkerConfig
    from syllabus_rag.rag.generator import AnswerSynthesizer
    from syllabus_rag.rag.pipeline import RAGPipeline
    from syllabus_rag.rag.prompts import PromptBuilder

    def _make(
        embedder: Optional[EmbeddingProvider] = None,
        index=None,
        completion_client=None,
        **kwargs,
    ) -> RAGPipeline:
        synthesizer = AnswerSynthesizer(
            completion_client=completion_client or mock_completion_client,
            prompt_builder=PromptBuilder(course_name="CS61A"),
        )
        return RAGPipeline(
            embedder=embedder or fake_embedder,
            index=index or chroma_index,
            synthesizer=synthesizer,
            chunker=Chunker(ChunkerConfig(max_length=200)),
            top_k=kwargs.pop("top_k", 3),
            **kwargs,
        )

    return _make


# ─────────────────────────────────────────────────────────────────────────────
# Pytest Configuration
# ─────────────────────────────────────────────────────────────────────────────


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "requires_api: marks tests that require API keys"
    )
