"""
Utilities Module - Common helper functions.
==========================================

Provides utility functions for:
- Hashing (SHA256 for deterministic ids)
- Chunk id generation (stable, reproducible ids)
- JSON file I/O
- Text helpers
"""

import hashlib
import json
import re
from pathlib import Path
from typing import Any

from syllabus_rag.shared.logging import get_logger

logger = get_logger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Hashing & IDs
# ─────────────────────────────────────────────────────────────────────────────


def compute_hash(text: str, algorithm: str = "sha256") -> str:
    """
    Compute hash of text content.

    Args:
        text: Text to hash
        algorithm: Hash algorithm (default: sha256)

    Returns:
        Hexadecimal hash string

    Example:
        >>> compute_hash("hello world")
        'b94d27b9934d3e08a52e52d7da7dabfac484efe37a5380ee9088f7ace2efcde9'
    """
    hasher = hashlib.new(algorithm)
    hasher.update(text.encode("utf-8"))
    return hasher.hexdigest()


def generate_chunk_id(
    section_title: str,
    section_index: int,
    chunk_index: int,
    text_hash: str,
) -> str:
    """
    Generate stable chunk ID.

    Format: chunk_{title_hash}_{section_index}_{chunk_index}_{text_hash_prefix}

    Titles are hashed rather than slugged since syllabus titles are often
    not ASCII.

    Args:
        section_title: Title of the source section
        section_index: Position of the section in its batch
        chunk_index: Index of chunk within the section
        text_hash: Hash of chunk text content

    Returns:
        Stable chunk ID
    """
    title_hash = compute_hash(section_title)[:8]
    return f"chunk_{title_hash}_{section_index}_{chunk_index}_{text_hash[:8]}"


# ─────────────────────────────────────────────────────────────────────────────
# Directory & JSON File I/O
# ─────────────────────────────────────────────────────────────────────────────


def ensure_directory(path: Path) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path

    Returns:
        The path (for chaining)
    """
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def load_json(file_path: Path) -> Any:
    """
    Load data from a JSON file.

    Raises:
        FileNotFoundError: If file doesn't exist
        json.JSONDecodeError: If file is not valid JSON
    """
    with open(Path(file_path), "r", encoding="utf-8") as f:
        return json.load(f)


def save_json(file_path: Path, data: Any, indent: int = 2) -> None:
    """
    Save data to a JSON file.

    Args:
        file_path: Path to JSON file
        data: Data to save (must be JSON serializable)
        indent: Indentation level (default: 2)
    """
    file_path = Path(file_path)
    ensure_directory(file_path.parent)

    with open(file_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent, ensure_ascii=False, default=str)

    logger.debug(f"Saved JSON to {file_path}")


# ─────────────────────────────────────────────────────────────────────────────
# Text Utilities
# ─────────────────────────────────────────────────────────────────────────────


def truncate_text(text: str, max_length: int = 100, suffix: str = "...") -> str:
    """Truncate text to a maximum length."""
    if len(text) <= max_length:
        return text
    return text[: max_length - len(suffix)] + suffix


def clean_whitespace(text: str) -> str:
    """
    Collapse runs of whitespace into single spaces.

    Args:
        text: Text to clean

    Returns:
        Text with normalized whitespace
    """
    return re.sub(r"\s+", " ", text).strip()
