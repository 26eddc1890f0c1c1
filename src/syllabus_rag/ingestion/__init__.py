"""
Ingestion Module - Provide and chunk syllabus sections.
=======================================================

This module handles the ingestion side of the pipeline:

- sources: Built-in fixture sections and the section provider
- scraper: Best-effort course website scraping into sections
- chunker: Sentence-packing chunking for vector storage

Pipeline flow:
    Fixtures / Scraper → Sections → Chunker → Chunks
"""

from syllabus_rag.ingestion.chunker import (
    Chunker,
    ChunkerConfig,
    chunk_sections,
    pack_sentences,
    split_sentences,
)
from syllabus_rag.ingestion.scraper import SyllabusScraper
from syllabus_rag.ingestion.sources import MOCK_SECTIONS, SectionSource, get_mock_sections

__all__ = [
    # Chunker
    "Chunker",
    "ChunkerConfig",
    "chunk_sections",
    "pack_sentences",
    "split_sentences",
    # Scraper
    "SyllabusScraper",
    # Sources
    "MOCK_SECTIONS",
    "SectionSource",
    "get_mock_sections",
]
