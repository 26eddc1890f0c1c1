"""
Tests Package - Unit and integration tests for Syllabus RAG.
============================================================

Test modules:
- test_ingestion: Chunker, section source, scraper tests
- test_indexing: Embedding provider and vector index tests
- test_rag: Prompt, retriever, completion, synthesizer tests
- test_pipeline: End-to-end pipeline tests

Run tests with:
    pytest tests/
    pytest tests/ -v -m "not slow"
"""
