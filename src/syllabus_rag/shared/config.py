"""
Configuration Module - Load and validate application settings.
==============================================================

Loads configuration from:
1. config/settings.yaml (defaults)
2. Environment variables from .env file
3. Environment variables from system

Environment variables override YAML defaults.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file early
load_dotenv()


def _find_project_root() -> Path:
    """Find the project root directory by looking for pyproject.toml."""
    current = Path(__file__).resolve()
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            return parent
    # Fallback to current working directory
    return Path.cwd()


PROJECT_ROOT = _find_project_root()
CONFIG_DIR = PROJECT_ROOT / "config"
DEFAULT_CONFIG_FILE = CONFIG_DIR / "settings.yaml"


# ─────────────────────────────────────────────────────────────────────────────
# Nested Configuration Models
# ─────────────────────────────────────────────────────────────────────────────


class CourseConfig(BaseModel):
    """Course identity used in prompts and canned answers."""

    name: str = "CS61A"


class ChunkingConfig(BaseModel):
    """Text chunking settings."""

    max_length: int = 200


class EmbeddingsConfig(BaseModel):
    """Sentence-transformers embedding settings."""

    model_name: str = "all-MiniLM-L6-v2"
    dimensions: int = 384
    device: str = "auto"
    batch_size: int = 32


class ChromaConfig(BaseModel):
    """ChromaDB backend settings."""

    collection_name: str = "syllabus_chunks"
    mode: str = "persistent"  # persistent | ephemeral
    persist_dir: str = "data/index"


class PineconeConfig(BaseModel):
    """Pinecone backend settings (credentials come from the environment)."""

    index_name: str = ""
    namespace: str = ""


class VectorStoreConfig(BaseModel):
    """Vector store backend selection."""

    backend: str = "chroma"  # chroma | pinecone
    chroma: ChromaConfig = Field(default_factory=ChromaConfig)
    pinecone: PineconeConfig = Field(default_factory=PineconeConfig)


class IndexingConfig(BaseModel):
    """Index build settings."""

    prune_stale: bool = True


class RetrievalConfig(BaseModel):
    """Retrieval settings."""

    top_k: int = 3


class XAICompletionConfig(BaseModel):
    """xAI chat-completions settings."""

    base_url: str = "https://api.x.ai/v1/chat/completions"
    model_name: str = "grok-2-1212"
    max_tokens: int = 1000
    temperature: float = 0.7
    timeout: float = 30.0
    max_retries: int = 2


class GeminiCompletionConfig(BaseModel):
    """Gemini generation settings."""

    model_name: str = "gemini-2.0-flash"
    temperature: float = 0.7
    max_output_tokens: int = 1000


class CompletionConfig(BaseModel):
    """Text-completion provider settings."""

    provider: str = "xai"  # xai | gemini
    xai: XAICompletionConfig = Field(default_factory=XAICompletionConfig)
    gemini: GeminiCompletionConfig = Field(default_factory=GeminiCompletionConfig)


class ScraperConfig(BaseModel):
    """Course website scraping settings."""

    urls: list[str] = Field(
        default_factory=lambda: [
            "https://cs61a.org",
            "https://cs61a.org/about/",
            "https://cs61a.org/schedule/",
            "https://cs61a.org/policies/",
        ]
    )
    timeout: int = 15
    max_retries: int = 2
    user_agent: str = "Syllabus-RAG/0.1.0"
    save_path: str = ""


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = "INFO"
    format: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    rich_console: bool = True
    file: str = ""


# ─────────────────────────────────────────────────────────────────────────────
# Main Settings Class
# ─────────────────────────────────────────────────────────────────────────────


class Settings(BaseSettings):
    """
    Main application settings.

    Loads from:
    1. config/settings.yaml (defaults)
    2. Environment variables

    Environment variables override YAML settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # API Keys (from environment only)
    xai_api_key: str = Field(default="", validation_alias="XAI_API_KEY")
    gemini_api_key: str = Field(default="", validation_alias="GEMINI_API_KEY")
    pinecone_api_key: str = Field(default="", validation_alias="PINECONE_API_KEY")

    # Top-level environment overrides
    pinecone_index: Optional[str] = Field(default=None, validation_alias="PINECONE_INDEX")
    vector_backend: Optional[str] = Field(default=None, validation_alias="VECTOR_BACKEND")
    completion_provider: Optional[str] = Field(
        default=None, validation_alias="COMPLETION_PROVIDER"
    )
    embedding_model: Optional[str] = Field(default=None, validation_alias="EMBEDDING_MODEL")
    top_k: Optional[int] = Field(default=None, validation_alias="TOP_K")
    log_level: Optional[str] = Field(default=None, validation_alias="LOG_LEVEL")

    # Nested configurations (from YAML)
    course: CourseConfig = Field(default_factory=CourseConfig)
    chunking: ChunkingConfig = Field(default_factory=ChunkingConfig)
    embeddings: EmbeddingsConfig = Field(default_factory=EmbeddingsConfig)
    vector_store: VectorStoreConfig = Field(default_factory=VectorStoreConfig)
    indexing: IndexingConfig = Field(default_factory=IndexingConfig)
    retrieval: RetrievalConfig = Field(default_factory=RetrievalConfig)
    completion: CompletionConfig = Field(default_factory=CompletionConfig)
    scraper: ScraperConfig = Field(default_factory=ScraperConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    _project_root: Path = PROJECT_ROOT

    @field_validator("xai_api_key", "gemini_api_key", "pinecone_api_key", mode="before")
    @classmethod
    def validate_api_key(cls, v: Any) -> str:
        """Allow empty API keys; the consumers decide whether that is fatal."""
        if v is None:
            return ""
        return str(v).strip()

    @property
    def project_root(self) -> Path:
        """Get the project root directory."""
        return self._project_root

    def resolve_path(self, path: str) -> Path:
        """Resolve a configured path relative to the project root."""
        candidate = Path(path)
        if candidate.is_absolute():
            return candidate
        return self._project_root / candidate

    def get_effective_vector_backend(self) -> str:
        """Get the effective vector store backend (env override or config)."""
        if self.vector_backend:
            return self.vector_backend.lower().strip()
        return self.vector_store.backend.lower().strip()

    def get_effective_pinecone_index(self) -> str:
        """Get the effective Pinecone index name (env override or config)."""
        if self.pinecone_index:
            return self.pinecone_index.strip()
        return self.vector_store.pinecone.index_name.strip()

    def get_effective_completion_provider(self) -> str:
        """Get the effective completion provider (env override or config)."""
        if self.completion_provider:
            return self.completion_provider.lower().strip()
        return self.completion.provider.lower().strip()

    def get_effective_embedding_model(self) -> str:
        """Get the effective embedding model (env override or config)."""
        if self.embedding_model:
            return self.embedding_model
        return self.embeddings.model_name

    def get_effective_top_k(self) -> int:
        """Get the effective top-k value (env override or config)."""
        if self.top_k is not None:
            return self.top_k
        return self.retrieval.top_k

    def get_effective_log_level(self) -> str:
        """Get the effective log level (env override or config)."""
        if self.log_level:
            return self.log_level.upper()
        return self.logging.level.upper()


def _load_yaml_config(config_path: Path) -> dict[str, Any]:
    """Load configuration from YAML file."""
    if not config_path.exists():
        return {}

    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
        return data if data else {}


def _create_settings(config_path: Optional[Path] = None) -> Settings:
    """Create settings instance by merging YAML defaults with environment."""
    if config_path is None:
        config_path = DEFAULT_CONFIG_FILE

    yaml_config = _load_yaml_config(config_path)

    # YAML values act as defaults, env vars override
    return Settings(**yaml_config)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get the singleton settings instance.

    Returns:
        Settings instance with merged configuration

    Example:
        >>> settings = get_settings()
        >>> print(settings.retrieval.top_k)
        3
    """
    return _create_settings()


def reload_settings() -> Settings:
    """
    Force reload of settings (clears cache).

    Returns:
        Fresh Settings instance
    """
    get_settings.cache_clear()
    return get_settings()


def load_settings(config_path: Path) -> Settings:
    """Create an uncached Settings instance from a specific YAML file."""
    return _create_settings(config_path)
