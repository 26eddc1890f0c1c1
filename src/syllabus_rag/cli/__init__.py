"""
CLI Module - Command-line interface for Syllabus RAG.
=====================================================

Provides CLI commands for:
- Building the vector index
- Querying the RAG pipeline
- Inspecting status and configuration

Usage:
    syllabus-rag --help
    syllabus-rag init --real-source
    syllabus-rag query "期中考试什么时候"

Components:
- main: Typer CLI application
"""

from syllabus_rag.cli.main import app, cli

__all__ = ["app", "cli"]
