"""
Schemas Module - Pydantic data models for the application.
==========================================================

Defines all data contracts used across the pipeline:
- Syllabus section and chunk models
- Index entry and retrieval models
- Answer and pipeline status models
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# ─────────────────────────────────────────────────────────────────────────────
# Enums
# ─────────────────────────────────────────────────────────────────────────────


class Difficulty(str, Enum):
    """Section difficulty level."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class SectionType(str, Enum):
    """Kind of syllabus material a section describes."""

    ASSIGNMENT = "assignment"
    EXAM = "exam"
    LECTURE = "lecture"
    POLICY = "policy"


class PipelinePhase(str, Enum):
    """Index build lifecycle."""

    UNINITIALIZED = "uninitialized"
    INDEXING = "indexing"
    READY = "ready"


# ─────────────────────────────────────────────────────────────────────────────
# Source Models
# ─────────────────────────────────────────────────────────────────────────────


class Section(BaseModel):
    """
    A labeled unit of syllabus material.

    Produced by the fixture set or the scraper and never modified afterwards.
    Accepts camelCase keys (learningObjectives) as well as snake_case.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str = Field(..., description="Section title (becomes the chunk chapter)")
    content: str = Field(..., description="Free text of the section")
    week: Optional[int] = Field(default=None, ge=0, description="Course week")
    difficulty: Optional[Difficulty] = Field(default=None, description="Difficulty level")
    topics: list[str] = Field(default_factory=list, description="Ordered topic labels")
    type: SectionType = Field(..., description="assignment/exam/lecture/policy")
    learning_objectives: Optional[list[str]] = Field(
        default=None, alias="learningObjectives", description="Learning objectives"
    )
    prerequisites: Optional[list[str]] = Field(default=None, description="Prerequisites")


# ─────────────────────────────────────────────────────────────────────────────
# Chunk Models
# ─────────────────────────────────────────────────────────────────────────────


class ChunkMetadata(BaseModel):
    """
    Fixed metadata record attached to every chunk.

    This is the only metadata shape that crosses the vector store boundary;
    unknown keys coming back from a store are dropped.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    chapter: str = Field(default="", description="Section title")
    topic: str = Field(default="", description="Comma-joined section topics")
    difficulty: Optional[Difficulty] = Field(default=None, description="Difficulty level")
    week: Optional[int] = Field(default=None, description="Course week")
    type: Optional[SectionType] = Field(default=None, description="Section type")

    @classmethod
    def from_section(cls, section: Section) -> "ChunkMetadata":
        """Derive chunk metadata from its source section."""
        return cls(
            chapter=section.title,
            topic=", ".join(section.topics),
            difficulty=section.difficulty,
            week=section.week,
            type=section.type,
        )

    def to_store_dict(self, content: str) -> dict[str, Any]:
        """
        Convert to a flat metadata dict for a vector store.

        None values are omitted (stores reject them) and the literal chunk
        content is carried along so retrieval needs no secondary lookup.
        """
        data = self.model_dump(mode="json", exclude_none=True)
        data["content"] = content
        return data


class Chunk(BaseModel):
    """
    The atomic retrievable unit.

    Chunks are created at indexing time and never mutated; re-indexing
    produces a new chunk set.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Stable chunk identifier")
    content: str = Field(..., min_length=1, description="Chunk text")
    metadata: ChunkMetadata = Field(default_factory=ChunkMetadata)

    @property
    def chapter(self) -> str:
        """Get the chapter label."""
        return self.metadata.chapter


# ─────────────────────────────────────────────────────────────────────────────
# Index & Retrieval Models
# ─────────────────────────────────────────────────────────────────────────────


class IndexedEntry(BaseModel):
    """The persisted unit inside the vector store."""

    id: str
    vector: list[float]
    metadata: ChunkMetadata
    content: str

    @classmethod
    def from_chunk(cls, chunk: Chunk, vector: list[float]) -> "IndexedEntry":
        """Pair a chunk with its embedding."""
        return cls(id=chunk.id, vector=vector, metadata=chunk.metadata, content=chunk.content)

    def store_metadata(self) -> dict[str, Any]:
        """Metadata dict as written to the store."""
        return self.metadata.to_store_dict(self.content)


class RetrievalHit(BaseModel):
    """
    A retrieved chunk with its cosine similarity score.

    Returned from vector index queries, highest score first.
    """

    chunk: Chunk
    score: float = Field(..., description="Cosine similarity in [-1, 1]")

    @classmethod
    def from_store(
        cls,
        chunk_id: str,
        score: float,
        metadata: Optional[dict[str, Any]],
        document: Optional[str] = None,
    ) -> "RetrievalHit":
        """Rebuild a hit from raw store output (id, score, metadata)."""
        raw = dict(metadata or {})
        content = raw.pop("content", None) or document or ""
        return cls(
            chunk=Chunk(
                id=chunk_id,
                content=content,
                metadata=ChunkMetadata.model_validate(raw),
            ),
            score=float(score),
        )

    @property
    def chunk_id(self) -> str:
        """Get the chunk id."""
        return self.chunk.id

    @property
    def content(self) -> str:
        """Get the chunk text."""
        return self.chunk.content

    @property
    def chapter(self) -> str:
        """Get the chapter label."""
        return self.chunk.metadata.chapter


# ─────────────────────────────────────────────────────────────────────────────
# Answer & Status Models
# ─────────────────────────────────────────────────────────────────────────────


class RAGAnswer(BaseModel):
    """
    Answer returned to callers.

    `confidence` is the top retrieval score, or 0 when nothing was retrieved.
    """

    answer: str = Field(..., description="Generated or canned answer text")
    sources: list[RetrievalHit] = Field(default_factory=list, description="Chunks used")
    confidence: float = Field(default=0.0, description="Top similarity score")


class PipelineStatus(BaseModel):
    """Read-only snapshot of the pipeline state."""

    is_initialized: bool = False
    has_embedding_model: bool = False
    phase: PipelinePhase = PipelinePhase.UNINITIALIZED
    indexed_chunks: int = 0
    last_error: Optional[str] = None

    model_config = ConfigDict(use_enum_values=True)
