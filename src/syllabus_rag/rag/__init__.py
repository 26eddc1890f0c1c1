"""
RAG Module - Retrieval-Augmented Generation pipeline.
=====================================================

This module implements the complete RAG workflow:

- retriever: Question embedding and top-k chunk retrieval
- prompts: Prompt templates and canned answers
- completion: Pluggable text-completion clients (xAI, Gemini)
- generator: Grounded answer synthesis with fallbacks
- pipeline: Index building, querying and status

RAG Flow:
    Question → Retriever → Relevant Chunks → Prompt Builder → LLM → Grounded Answer
"""

from syllabus_rag.rag.completion import (
    CompletionClient,
    GeminiCompletionClient,
    XAICompletionClient,
    create_completion_client,
)
from syllabus_rag.rag.generator import AnswerSynthesizer
from syllabus_rag.rag.pipeline import RAGPipeline, create_pipeline
from syllabus_rag.rag.prompts import PromptBuilder, format_answer_with_sources, format_context
from syllabus_rag.rag.retriever import Retriever

__all__ = [
    # Retriever
    "Retriever",
    # Prompts
    "PromptBuilder",
    "format_context",
    "format_answer_with_sources",
    # Completion
    "CompletionClient",
    "XAICompletionClient",
    "GeminiCompletionClient",
    "create_completion_client",
    # Generator
    "AnswerSynthesizer",
    # Pipeline
    "RAGPipeline",
    "create_pipeline",
]
