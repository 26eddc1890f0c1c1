"""
Chunker Module - Sentence-packing text chunking for vector storage.
===================================================================

Splits syllabus sections into bounded-length chunks for embedding:
- Splits on sentence-terminal punctuation (ASCII and full-width)
- Greedily packs whole sentences up to a maximum length
- Never splits inside a sentence; an overlong sentence becomes its own chunk
- Carries the section's metadata onto every chunk
- Generates stable, deterministic chunk IDs
"""

import re
from dataclasses import dataclass
from typing import Iterable, Optional

from syllabus_rag.shared.config import get_settings
from syllabus_rag.shared.logging import get_logger
from syllabus_rag.shared.schemas import Chunk, ChunkMetadata, Section
from syllabus_rag.shared.utils import compute_hash, generate_chunk_id

logger = get_logger(__name__)

# Runs of sentence-terminal punctuation: . ! ? and full-width 。！？
SENTENCE_END = re.compile(r"[.!?。！？]+")


# ─────────────────────────────────────────────────────────────────────────────
# Chunking Configuration
# ─────────────────────────────────────────────────────────────────────────────


@dataclass
class ChunkerConfig:
    """Configuration for text chunking."""

    # Maximum chunk length in characters (single sentences may exceed it)
    max_length: int = 200

    def __post_init__(self) -> None:
        if self.max_length < 1:
            raise ValueError(f"max_length must be positive, got {self.max_length}")


# ─────────────────────────────────────────────────────────────────────────────
# Sentence Splitting & Packing
# ─────────────────────────────────────────────────────────────────────────────


def split_sentences(text: str) -> list[str]:
    """
    Split text into trimmed, non-empty sentence fragments.

    The terminal punctuation itself is dropped.

    Example:
        >>> split_sentences("截止日期是6月30日。 关注环境设置。")
        ['截止日期是6月30日', '关注环境设置']
    """
    if not text:
        return []
    fragments = (fragment.strip() for fragment in SENTENCE_END.split(text))
    return [fragment for fragment in fragments if fragment]


def pack_sentences(sentences: Iterable[str], max_length: int) -> list[str]:
    """
    Greedily pack sentences into chunks of at most `max_length` characters.

    Sentences are joined with a single space. A sentence that does not fit is
    moved to a new chunk; a sentence longer than `max_length` on its own is
    kept whole.
    """
    chunks: list[str] = []
    buffer = ""

    for sentence in sentences:
        if not buffer:
            buffer = sentence
        elif len(buffer) + 1 + len(sentence) > max_length:
            chunks.append(buffer)
            buffer = sentence
        else:
            buffer = f"{buffer} {sentence}"

    if buffer:
        chunks.append(buffer)

    return chunks


# ─────────────────────────────────────────────────────────────────────────────
# Chunker Class
# ─────────────────────────────────────────────────────────────────────────────


class Chunker:
    """
    Chunks syllabus sections into pieces for embedding.

    Each chunk:
    - Has a stable, deterministic ID
    - Carries the section metadata verbatim
    - Holds whole sentences only

    Example:
        >>> chunker = Chunker(ChunkerConfig(max_length=200))
        >>> chunks = chunker.chunk(section)
        >>> for chunk in chunks:
        ...     print(chunk.id, len(chunk.content))
    """

    def __init__(self, config: Optional[ChunkerConfig] = None):
        """
        Initialize the chunker.

        Args:
            config: Custom configuration (loads from settings if None)
        """
        if config is None:
            settings = get_settings()
            config = ChunkerConfig(max_length=settings.chunking.max_length)

        self.config = config

    @property
    def max_length(self) -> int:
        """Get the configured maximum chunk length."""
        return self.config.max_length

    def chunk(self, section: Section, section_index: int = 0) -> list[Chunk]:
        """
        Chunk a single section.

        Args:
            section: Section to chunk
            section_index: Position of the section in its batch (part of the id)

        Returns:
            List of Chunks in source order
        """
        metadata = ChunkMetadata.from_section(section)
        texts = pack_sentences(split_sentences(section.content), self.config.max_length)

        chunks = [
            Chunk(
                id=generate_chunk_id(section.title, section_index, i, compute_hash(text)),
                content=text,
                metadata=metadata,
            )
            for i, text in enumerate(texts)
        ]

        logger.debug(f"Created {len(chunks)} chunks for section '{section.title}'")
        return chunks

    def chunk_sections(self, sections: list[Section]) -> list[Chunk]:
        """
        Chunk multiple sections.

        Args:
            sections: Sections to chunk

        Returns:
            All chunks, section by section
        """
        chunks: list[Chunk] = []
        for index, section in enumerate(sections):
            chunks.extend(self.chunk(section, section_index=index))

        logger.info(f"Created {len(chunks)} chunks from {len(sections)} sections")
        return chunks


# ─────────────────────────────────────────────────────────────────────────────
# Convenience Functions
# ─────────────────────────────────────────────────────────────────────────────


def chunk_sections(
    sections: list[Section],
    max_length: Optional[int] = None,
) -> list[Chunk]:
    """
    Chunk sections into Chunks.

    Args:
        sections: Sections to chunk
        max_length: Optional custom maximum chunk length

    Returns:
        List of all Chunks
    """
    config = ChunkerConfig(max_length=max_length) if max_length is not None else None
    return Chunker(config=config).chunk_sections(sections)
