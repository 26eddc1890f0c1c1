"""
Prompts Module - Prompt templates and canned answers for grounded generation.
============================================================================

Provides:
- The course teaching-assistant system prompt
- The user prompt carrying retrieved context and the verbatim question
- Fixed answers for the no-context and failure paths
- Rendering an answer together with its numbered sources
"""

from syllabus_rag.shared.logging import get_logger
from syllabus_rag.shared.schemas import RetrievalHit

logger = get_logger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# System Prompt
# ─────────────────────────────────────────────────────────────────────────────


SYSTEM_PROMPT_TEMPLATE = "你是一个 {course} 课程的助教，专门回答关于课程内容、作业、考试和政策的问题。"


# ─────────────────────────────────────────────────────────────────────────────
# User Prompt Template
# ─────────────────────────────────────────────────────────────────────────────


USER_PROMPT_TEMPLATE = """你是一个 {course} 课程的助教。请根据以下课程信息回答学生的问题。

课程信息：
{context}

学生问题：{query}

请提供准确、有帮助的回答。如果信息不完整，请说明。"""


# ─────────────────────────────────────────────────────────────────────────────
# Canned Answers
# ─────────────────────────────────────────────────────────────────────────────


NO_INFORMATION_TEMPLATE = "抱歉，我在 {course} 课程大纲中没有找到相关信息。"

# Completion capability unreachable or rejected the request
DEGRADED_ANSWER = "基于提供的课程信息，我可以回答你的问题。如果需要更详细的回答，请稍后再试。"

# Completion succeeded but returned no content
NO_CONTENT_ANSWER = "抱歉，无法生成回答。"

# Unexpected failure anywhere in the query path
QUERY_ERROR_ANSWER = "抱歉，处理您的问题时出现错误。"

UNKNOWN_CHAPTER = "未知"


# ─────────────────────────────────────────────────────────────────────────────
# Context Formatting
# ─────────────────────────────────────────────────────────────────────────────


def format_chunk_for_context(hit: RetrievalHit) -> str:
    """Format a single chunk for inclusion in prompt context."""
    chapter = hit.chapter or UNKNOWN_CHAPTER
    return f"章节: {chapter}\n内容: {hit.content}"


def format_context(hits: list[RetrievalHit]) -> str:
    """Format chunks in rank order, separated by a blank line."""
    return "\n\n".join(format_chunk_for_context(hit) for hit in hits)


def format_answer_with_sources(answer: str, sources: list[RetrievalHit]) -> str:
    """
    Append a numbered list of source chapters with similarity percentages.

    Example:
        >>> print(format_answer_with_sources("7月17日晚上7-9点。", hits))
        7月17日晚上7-9点。

        来源信息：
        1. 期中考试 1 (相似度: 62.3%)
    """
    if not sources:
        return answer

    lines = [answer, "", "来源信息："]
    for i, hit in enumerate(sources, 1):
        lines.append(f"{i}. {hit.chapter} (相似度: {hit.score * 100:.1f}%)")

    return "\n".join(lines)


# ─────────────────────────────────────────────────────────────────────────────
# Prompt Builder
# ─────────────────────────────────────────────────────────────────────────────


class PromptBuilder:
    """
    Builds prompts for RAG generation.

    Example:
        >>> builder = PromptBuilder(course_name="CS61A")
        >>> system, user = builder.build_prompt(query, hits)
    """

    def __init__(self, course_name: str = "CS61A"):
        """
        Initialize the prompt builder.

        Args:
            course_name: Course name used in the assistant role and canned answers
        """
        self.course_name = course_name

    @property
    def system_prompt(self) -> str:
        """Get the teaching-assistant system prompt."""
        return SYSTEM_PROMPT_TEMPLATE.format(course=self.course_name)

    @property
    def no_information_answer(self) -> str:
        """Get the answer used when nothing relevant was retrieved."""
        return NO_INFORMATION_TEMPLATE.format(course=self.course_name)

    def build_prompt(self, query: str, hits: list[RetrievalHit]) -> tuple[str, str]:
        """
        Build a grounded RAG prompt.

        Args:
            query: Student question (inserted verbatim)
            hits: Retrieved chunks, in rank order

        Returns:
            Tuple of (system_prompt, user_prompt)
        """
        user_prompt = USER_PROMPT_TEMPLATE.format(
            course=self.course_name,
            context=format_context(hits),
            query=query,
        )
        logger.debug(f"Built prompt with {len(hits)} context chunks ({len(user_prompt)} chars)")
        return self.system_prompt, user_prompt
