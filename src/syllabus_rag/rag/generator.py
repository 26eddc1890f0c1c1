"""
Generator Module - Grounded answer synthesis.
=============================================

Turns a question and its retrieved chunks into an answer:
- No retrieved context: fixed no-information answer, no completion call
- Completion unreachable or rejected: fixed degraded answer
- Completion returned no content: fixed "cannot generate" answer

synthesize() never raises.
"""

from typing import Optional

from syllabus_rag.rag.completion import CompletionClient, create_completion_client
from syllabus_rag.rag.prompts import DEGRADED_ANSWER, NO_CONTENT_ANSWER, PromptBuilder
from syllabus_rag.shared.config import get_settings
from syllabus_rag.shared.errors import SynthesisError
from syllabus_rag.shared.logging import get_logger
from syllabus_rag.shared.schemas import RetrievalHit
from syllabus_rag.shared.utils import truncate_text

logger = get_logger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Answer Synthesizer
# ─────────────────────────────────────────────────────────────────────────────


class AnswerSynthesizer:
    """
    Generates grounded answers from retrieved chunks.

    Example:
        >>> synthesizer = AnswerSynthesizer()
        >>> answer = synthesizer.synthesize("期中考试什么时候", hits)
        >>> print(answer)
    """

    def __init__(
        self,
        completion_client: Optional[CompletionClient] = None,
        prompt_builder: Optional[PromptBuilder] = None,
    ):
        """
        Initialize the synthesizer.

        Args:
            completion_client: Completion backend (created from config if None)
            prompt_builder: Prompt builder (uses the configured course if None)
        """
        self._completion_client = completion_client
        self.prompt_builder = prompt_builder or PromptBuilder(
            course_name=get_settings().course.name
        )

    @property
    def completion_client(self) -> CompletionClient:
        """Lazy-load the completion client."""
        if self._completion_client is None:
            self._completion_client = create_completion_client()
        return self._completion_client

    def synthesize(self, question: str, hits: list[RetrievalHit]) -> str:
        """
        Generate an answer for a question.

        Args:
            question: Student question
            hits: Retrieved chunks in rank order

        Returns:
            Answer text (generated or canned)
        """
        if not hits:
            logger.info("No context retrieved, returning no-information answer")
            return self.prompt_builder.no_information_answer

        logger.info(f"Generating answer for: {truncate_text(question, 50)}")

        try:
            system_prompt, user_prompt = self.prompt_builder.build_prompt(question, hits)
            answer = self.completion_client.complete(user_prompt, system_prompt=system_prompt)
        except SynthesisError as e:
            logger.warning(f"Completion unavailable, using degraded answer: {e}")
            return DEGRADED_ANSWER
        except Exception as e:
            logger.error(f"Unexpected synthesis failure, using degraded answer: {e}")
            return DEGRADED_ANSWER

        if not answer or not answer.strip():
            logger.warning("Completion returned no content")
            return NO_CONTENT_ANSWER

        return answer
