"""
Completion Module - Pluggable text-completion clients.
======================================================

Provides a minimal completion contract with two backends:
- xAI chat completions over HTTP (requests)
- Google Gemini (google-generativeai)

Contract:
- complete() returns the generated text, or None if the response has no content
- Unreachable services, non-2xx responses and missing credentials raise CompletionError
"""

from abc import ABC, abstractmethod
from typing import Optional

import requests
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from syllabus_rag.shared.config import Settings, get_settings
from syllabus_rag.shared.errors import CompletionError, ConfigurationError
from syllabus_rag.shared.logging import get_logger

logger = get_logger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Abstract Base Class
# ─────────────────────────────────────────────────────────────────────────────


class CompletionClient(ABC):
    """Abstract text-completion capability."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Get the provider name identifier."""
        pass

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the model name being used."""
        pass

    @abstractmethod
    def complete(self, prompt: str, system_prompt: Optional[str] = None) -> Optional[str]:
        """
        Generate a completion.

        Args:
            prompt: User prompt
            system_prompt: Optional system instructions

        Returns:
            Generated text, or None if the response carried no content

        Raises:
            CompletionError: If the service is unreachable or rejects the request
        """
        pass


# ─────────────────────────────────────────────────────────────────────────────
# xAI Client
# ─────────────────────────────────────────────────────────────────────────────


class XAICompletionClient(CompletionClient):
    """
    xAI chat-completions client.

    Network errors and timeouts are retried with exponential backoff;
    HTTP error statuses are not.

    Example:
        >>> client = XAICompletionClient(api_key="xai-...")
        >>> client.complete("期中考试什么时候？", system_prompt="你是一个助教。")
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: Optional[str] = None,
        base_url: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        session: Optional[requests.Session] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize the client.

        Args:
            api_key: xAI API key (default from XAI_API_KEY)
            model_name: Model name (default from config)
            base_url: Chat completions endpoint
            max_tokens: Maximum tokens to generate
            temperature: Generation temperature
            timeout: Request timeout in seconds
            max_retries: Maximum attempts on network errors
            session: Custom requests session
            settings: Settings instance (uses global if None)
        """
        settings = settings or get_settings()
        xai_config = settings.completion.xai

        self.api_key = api_key if api_key is not None else settings.xai_api_key
        self._model_name = model_name or xai_config.model_name
        self.base_url = base_url or xai_config.base_url
        self.max_tokens = max_tokens or xai_config.max_tokens
        self.temperature = temperature if temperature is not None else xai_config.temperature
        self.timeout = timeout or xai_config.timeout
        self.max_retries = max(
            1, max_retries if max_retries is not None else xai_config.max_retries
        )
        self._session = session

        logger.debug(
            f"xAI client configured: model={self._model_name}, "
            f"timeout={self.timeout}s, max_retries={self.max_retries}"
        )

    @property
    def provider_name(self) -> str:
        """Get the provider name."""
        return "xai"

    @property
    def model_name(self) -> str:
        """Get the model name."""
        return self._model_name

    @property
    def session(self) -> requests.Session:
        """Get or create the requests session."""
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def _build_payload(self, prompt: str, system_prompt: Optional[str]) -> dict:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        return {
            "model": self._model_name,
            "messages": messages,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "stream": False,
        }

    def _post(self, payload: dict) -> requests.Response:
        """POST with retries on connection errors and timeouts."""

        @retry(
            retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=1, min=1, max=8),
            reraise=True,
            before_sleep=lambda retry_state: logger.warning(
                f"xAI request retry {retry_state.attempt_number}/{self.max_retries}"
            ),
        )
        def _post_with_retry() -> requests.Response:
            return self.session.post(
                self.base_url,
                json=payload,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                timeout=self.timeout,
            )

        return _post_with_retry()

    def complete(self, prompt: str, system_prompt: Optional[str] = None) -> Optional[str]:
        """Call the chat completions endpoint."""
        if not self.api_key:
            raise CompletionError("XAI_API_KEY is not set", context={"provider": "xai"})

        try:
            response = self._post(self._build_payload(prompt, system_prompt))
        except requests.RequestException as e:
            raise CompletionError(f"xAI request failed: {e}", context={"provider": "xai"}) from e

        if not response.ok:
            raise CompletionError(
                f"xAI API error: {response.status_code} {response.reason}",
                context={"provider": "xai", "status": response.status_code},
            )

        try:
            data = response.json()
        except ValueError as e:
            raise CompletionError(f"xAI returned invalid JSON: {e}", context={"provider": "xai"}) from e

        choices = data.get("choices") or []
        if not choices:
            return None
        message = choices[0].get("message") or {}
        return message.get("content")


# ─────────────────────────────────────────────────────────────────────────────
# Gemini Client
# ─────────────────────────────────────────────────────────────────────────────


class GeminiCompletionClient(CompletionClient):
    """
    Gemini completion client using google-generativeai.

    Example:
        >>> client = GeminiCompletionClient()
        >>> client.complete("期中考试什么时候？")
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: Optional[str] = None,
        temperature: Optional[float] = None,
        max_output_tokens: Optional[int] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize the client.

        Args:
            api_key: Gemini API key (default from GEMINI_API_KEY)
            model_name: Gemini model name (default from config)
            temperature: Generation temperature
            max_output_tokens: Maximum tokens to generate
            settings: Settings instance (uses global if None)
        """
        settings = settings or get_settings()
        gemini_config = settings.completion.gemini

        self.api_key = api_key if api_key is not None else settings.gemini_api_key
        self._model_name = model_name or gemini_config.model_name
        self.temperature = temperature if temperature is not None else gemini_config.temperature
        self.max_output_tokens = max_output_tokens or gemini_config.max_output_tokens

        self._client = None

    @property
    def provider_name(self) -> str:
        """Get the provider name."""
        return "gemini"

    @property
    def model_name(self) -> str:
        """Get the model name."""
        return self._model_name

    @property
    def client(self):
        """Lazy-load the configured Gemini module."""
        if self._client is None:
            if not self.api_key:
                raise CompletionError("GEMINI_API_KEY is not set", context={"provider": "gemini"})

            import google.generativeai as genai

            genai.configure(api_key=self.api_key)
            self._client = genai
            logger.debug("Gemini client initialized")
        return self._client

    def complete(self, prompt: str, system_prompt: Optional[str] = None) -> Optional[str]:
        """Generate content with Gemini."""
        model = self.client.GenerativeModel(
            model_name=self._model_name,
            system_instruction=system_prompt or None,
            generation_config={
                "temperature": self.temperature,
                "max_output_tokens": self.max_output_tokens,
            },
        )

        try:
            response = model.generate_content(prompt)
        except Exception as e:
            raise CompletionError(
                f"Gemini request failed: {e}", context={"provider": "gemini"}
            ) from e

        try:
            return response.text
        except ValueError:
            # Blocked or empty candidates
            return None


# ─────────────────────────────────────────────────────────────────────────────
# Factory Function
# ─────────────────────────────────────────────────────────────────────────────


def create_completion_client(settings: Optional[Settings] = None) -> CompletionClient:
    """
    Create the configured completion client.

    A missing API key is only logged; calls will then fall back to the
    degraded answer.

    Raises:
        ConfigurationError: If the provider is unknown
    """
    settings = settings or get_settings()
    provider = settings.get_effective_completion_provider()

    if provider == "xai":
        if not settings.xai_api_key:
            logger.warning("XAI_API_KEY is not set; answers will use the fallback text")
        return XAICompletionClient(settings=settings)

    if provider == "gemini":
        if not settings.gemini_api_key:
            logger.warning("GEMINI_API_KEY is not set; answers will use the fallback text")
        return GeminiCompletionClient(settings=settings)

    raise ConfigurationError(
        f"Unknown completion provider: {provider}. Valid options: xai, gemini"
    )
