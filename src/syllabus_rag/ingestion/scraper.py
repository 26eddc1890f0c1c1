"""
Scraper Module - Best-effort course website scraping into sections.
===================================================================

Fetches the configured course pages and turns each into a Section:
- Automatic retries with exponential backoff
- Main text from <main>, .content or <body>, minus scripts and styles
- Heuristic week, difficulty, topics, type, objectives and prerequisites
- Optional JSON dump of the scraped sections
"""

import re
from pathlib import Path
from typing import Optional

import requests
from bs4 import BeautifulSoup
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from syllabus_rag.shared.config import Settings, get_settings
from syllabus_rag.shared.logging import get_logger
from syllabus_rag.shared.schemas import Difficulty, Section, SectionType
from syllabus_rag.shared.utils import clean_whitespace, save_json

logger = get_logger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Heuristics
# ─────────────────────────────────────────────────────────────────────────────

COMMON_TOPICS = [
    "python",
    "functions",
    "control",
    "recursion",
    "data structures",
    "object-oriented programming",
    "algorithms",
    "testing",
    "debugging",
    "environment diagrams",
    "abstraction",
    "inheritance",
    "polymorphism",
]

OBJECTIVE_KEYWORDS = ("learning objective", "goal", "understand", "learn")
PREREQUISITE_KEYWORDS = ("prerequisite", "required", "before")

MAX_OBJECTIVES = 5
MAX_PREREQUISITES = 3

_WEEK_PATTERN = re.compile(r"week[-\s]?(\d+)", re.IGNORECASE)
_COURSE_PREFIX = re.compile(r"CS61A\s*[-|]\s*", re.IGNORECASE)
_TITLE_SUFFIX = re.compile(r"\s*[-|]\s*.*$")


def clean_title(title: str) -> str:
    """
    Strip the course prefix and any trailing site suffix from a page title.

    Example:
        >>> clean_title("CS61A - Policies | Berkeley")
        'Policies'
    """
    title = _COURSE_PREFIX.sub("", title, count=1)
    title = _TITLE_SUFFIX.sub("", title)
    return title.strip()


def extract_week(url: str) -> Optional[int]:
    """Extract a week number from a URL like `/week-3/`."""
    match = _WEEK_PATTERN.search(url)
    return int(match.group(1)) if match else None


def determine_difficulty(content: str) -> Difficulty:
    """Guess the difficulty level from keywords in the content."""
    lower = content.lower()
    if "advanced" in lower or "complex" in lower:
        return Difficulty.ADVANCED
    if "intermediate" in lower or "medium" in lower:
        return Difficulty.INTERMEDIATE
    return Difficulty.BEGINNER


def extract_topics(content: str) -> list[str]:
    """Find the well-known course topics mentioned in the content."""
    lower = content.lower()
    return [topic for topic in COMMON_TOPICS if topic in lower]


def determine_type(url: str, content: str) -> SectionType:
    """Classify a page as assignment, exam, policy or lecture."""
    lower_url = url.lower()
    lower = content.lower()

    if "lab" in lower_url or "homework" in lower_url or "assignment" in lower:
        return SectionType.ASSIGNMENT
    if "exam" in lower_url or "exam" in lower or "test" in lower:
        return SectionType.EXAM
    if "policy" in lower_url or "policy" in lower or "rule" in lower:
        return SectionType.POLICY
    return SectionType.LECTURE


def _matching_lines(lines: list[str], keywords: tuple[str, ...], limit: int) -> list[str]:
    matches = []
    for line in lines:
        lower = line.lower()
        if any(keyword in lower for keyword in keywords):
            matches.append(line)
            if len(matches) >= limit:
                break
    return matches


def extract_learning_objectives(lines: list[str]) -> list[str]:
    """Collect lines that read like learning objectives."""
    return _matching_lines(lines, OBJECTIVE_KEYWORDS, MAX_OBJECTIVES)


def extract_prerequisites(lines: list[str]) -> list[str]:
    """Collect lines that read like prerequisites."""
    return _matching_lines(lines, PREREQUISITE_KEYWORDS, MAX_PREREQUISITES)


# ─────────────────────────────────────────────────────────────────────────────
# Scraper Class
# ─────────────────────────────────────────────────────────────────────────────


class SyllabusScraper:
    """
    Scrapes course web pages into Sections.

    Individual page failures are logged and skipped; an empty result is
    left to the caller to handle.

    Example:
        >>> scraper = SyllabusScraper()
        >>> sections = scraper.scrape()
        >>> for section in sections:
        ...     print(section.title, section.type)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        urls: Optional[list[str]] = None,
        timeout: Optional[int] = None,
        max_retries: Optional[int] = None,
    ):
        """
        Initialize the scraper.

        Args:
            settings: Settings instance (uses global if None)
            urls: Pages to scrape (defaults to scraper.urls)
            timeout: Request timeout in seconds
            max_retries: Maximum attempts per page
        """
        settings = settings or get_settings()
        scraper_config = settings.scraper

        self.urls = urls if urls is not None else list(scraper_config.urls)
        self.timeout = timeout if timeout is not None else scraper_config.timeout
        self.max_retries = max(
            1, max_retries if max_retries is not None else scraper_config.max_retries
        )
        self.user_agent = scraper_config.user_agent

        self._session: Optional[requests.Session] = None

    @property
    def session(self) -> requests.Session:
        """Get or create the requests session."""
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update(
                {
                    "User-Agent": self.user_agent,
                    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
                }
            )
        return self._session

    def _fetch(self, url: str) -> str:
        """Fetch a page's HTML with retries on network errors."""

        @retry(
            retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(min=1, max=8),
            reraise=True,
            before_sleep=lambda retry_state: logger.warning(
                f"Retry {retry_state.attempt_number}/{self.max_retries} for {url}"
            ),
        )
        def _get_with_retry() -> requests.Response:
            return self.session.get(url, timeout=self.timeout)

        response = _get_with_retry()
        response.raise_for_status()
        return response.text

    def parse_page(self, url: str, html: str) -> Optional[Section]:
        """
        Turn one page's HTML into a Section.

        Args:
            url: Page URL (used for week and type heuristics)
            html: Raw HTML

        Returns:
            Section, or None if the page has no text
        """
        soup = BeautifulSoup(html, "lxml")

        title_tag = soup.find("title")
        raw_title = title_tag.get_text() if title_tag else ""
        title = clean_title(raw_title) or "Unknown Page"

        container = soup.find("main") or soup.select_one(".content") or soup.body
        if container is None:
            return None

        for tag in container.find_all(["script", "style"]):
            tag.decompose()

        lines = [
            clean_whitespace(line)
            for line in container.get_text("\n").splitlines()
            if line.strip()
        ]
        content = clean_whitespace(" ".join(lines))
        if not content:
            return None

        return Section(
            title=title,
            content=content,
            week=extract_week(url),
            difficulty=determine_difficulty(content),
            topics=extract_topics(content),
            type=determine_type(url, content),
            learning_objectives=extract_learning_objectives(lines),
            prerequisites=extract_prerequisites(lines),
        )

    def scrape_page(self, url: str) -> Optional[Section]:
        """Fetch and parse a single page; failures are logged and yield None."""
        logger.info(f"Scraping: {url}")
        try:
            html = self._fetch(url)
        except requests.RequestException as e:
            logger.warning(f"Failed to scrape {url}: {e}")
            return None

        return self.parse_page(url, html)

    def scrape(self) -> list[Section]:
        """
        Scrape every configured page.

        Returns:
            Sections for the pages that produced text
        """
        sections = []
        for url in self.urls:
            section = self.scrape_page(url)
            if section is not None:
                sections.append(section)

        logger.info(f"Scraped {len(sections)} sections from {len(self.urls)} pages")
        return sections

    def save_sections(self, sections: list[Section], path: Path) -> Path:
        """
        Save scraped sections to JSON for inspection.

        Args:
            sections: Sections to save
            path: Output file path

        Returns:
            The path written
        """
        data = [section.model_dump(mode="json", by_alias=True) for section in sections]
        save_json(path, data)
        logger.info(f"Saved {len(sections)} scraped sections to {path}")
        return Path(path)
