"""Configuration management for gtdindex."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from .instrumentation import TracingConfig


@dataclass
class OpenAIConfig:
    """OpenAI embeddings API configuration (default provider)."""

    api_key: str = ""
    base_url: str = "https://api.openai.com/v1"
    embedding_model: str = "text-embedding-3-small"
    embedding_dimension: int = 1536
    timeout: float = 60.0


@dataclass
class LMStudioConfig:
    """LM Studio local server configuration (OpenAI-compatible)."""

    base_url: str = "http://localhost:1234"
    embedding_model: str = "nomic-embed-text"
    embedding_dimension: int = 768
    timeout: float = 120.0


@dataclass
class MigrationConfig:
    """ENEX migration configuration."""

    batch_size: int = 10
    # Priority given to documents enqueued for embedding during migration
    default_priority: int = 5


@dataclass
class EmbeddingQueueConfig:
    """Embedding queue processing configuration."""

    batch_size: int = 10
    max_input_chars: int = 8000
    # None means retry forever
    max_attempts: int | None = 5
    backoff_base_seconds: float = 30.0
    backoff_max_seconds: float = 3600.0
    # Claims older than this are considered abandoned
    lease_seconds: float = 300.0


@dataclass
class SearchConfig:
    """Hybrid search configuration."""

    default_limit: int = 50
    vector_weight: float = 0.6
    snippet_tokens: int = 30
    snippet_fallback_chars: int = 200


def _default_db_path() -> Path:
    """Get default database path."""
    cache_dir = Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache"))
    return cache_dir / "gtdindex" / "index.db"


@dataclass
class Config:
    """Main application configuration."""

    db_path: Path = field(default_factory=_default_db_path)
    embedding_provider: str = "openai"
    openai: OpenAIConfig = field(default_factory=OpenAIConfig)
    lm_studio: LMStudioConfig = field(default_factory=LMStudioConfig)
    migration: MigrationConfig = field(default_factory=MigrationConfig)
    embedding_queue: EmbeddingQueueConfig = field(default_factory=EmbeddingQueueConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    tracing: TracingConfig = field(default_factory=TracingConfig)
    blob_dir: Path | None = None

    @property
    def embedding_dimension(self) -> int:
        """Vector width expected by the document store."""
        if self.embedding_provider == "lm-studio":
            return self.lm_studio.embedding_dimension
        return self.openai.embedding_dimension

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        config = cls()

        if provider := os.environ.get("EMBEDDING_PROVIDER"):
            config.embedding_provider = provider.lower().strip()

        # OpenAI configuration
        if api_key := os.environ.get("OPENAI_API_KEY"):
            config.openai.api_key = api_key
        if url := os.environ.get("OPENAI_BASE_URL"):
            config.openai.base_url = url
        if model := os.environ.get("EMBEDDING_MODEL"):
            config.openai.embedding_model = model

        # LM Studio configuration
        if url := os.environ.get("LM_STUDIO_URL"):
            config.lm_studio.base_url = url

        if batch_size := os.environ.get("MIGRATION_BATCH_SIZE"):
            config.migration.batch_size = int(batch_size)

        if max_attempts := os.environ.get("EMBEDDING_MAX_ATTEMPTS"):
            value = int(max_attempts)
            config.embedding_queue.max_attempts = value if value > 0 else None

        if backoff := os.environ.get("EMBEDDING_BACKOFF_BASE_SECONDS"):
            config.embedding_queue.backoff_base_seconds = max(float(backoff), 0.0)

        if weight := os.environ.get("SEARCH_VECTOR_WEIGHT"):
            config.search.vector_weight = float(weight)

        if path := os.environ.get("INDEX_PATH"):
            config.db_path = Path(path)

        if blob_dir := os.environ.get("BLOB_DIR"):
            config.blob_dir = Path(blob_dir)

        # Tracing configuration
        if os.environ.get("TRACING_ENABLED", "").lower() in ("1", "true", "yes"):
            config.tracing.enabled = True
        if endpoint := os.environ.get("OTLP_ENDPOINT"):
            config.tracing.endpoint = endpoint

        return config
