"""Tests for configuration loading."""

from pathlib import Path

import pytest

from gtdindex.core.config import Config

ENV_VARS = [
    "EMBEDDING_PROVIDER",
    "OPENAI_API_KEY",
    "OPENAI_BASE_URL",
    "EMBEDDING_MODEL",
    "LM_STUDIO_URL",
    "MIGRATION_BATCH_SIZE",
    "EMBEDDING_MAX_ATTEMPTS",
    "EMBEDDING_BACKOFF_BASE_SECONDS",
    "SEARCH_VECTOR_WEIGHT",
    "INDEX_PATH",
    "BLOB_DIR",
    "TRACING_ENABLED",
    "OTLP_ENDPOINT",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestConfig:
    """Tests for Config.from_env."""

    def test_defaults(self):
        config = Config.from_env()

        assert config.embedding_provider == "openai"
        assert config.openai.api_key == ""
        assert config.embedding_dimension == 1536
        assert config.migration.batch_size == 10
        assert config.embedding_queue.max_attempts == 5
        assert config.search.vector_weight == 0.6
        assert config.blob_dir is None
        assert not config.tracing.enabled

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        monkeypatch.setenv("MIGRATION_BATCH_SIZE", "25")
        monkeypatch.setenv("SEARCH_VECTOR_WEIGHT", "0.3")
        monkeypatch.setenv("INDEX_PATH", str(tmp_path / "gtd.db"))
        monkeypatch.setenv("BLOB_DIR", str(tmp_path / "blobs"))
        monkeypatch.setenv("TRACING_ENABLED", "true")

        config = Config.from_env()

        assert config.openai.api_key == "sk-env"
        assert config.migration.batch_size == 25
        assert config.search.vector_weight == 0.3
        assert config.db_path == Path(tmp_path / "gtd.db")
        assert config.blob_dir == Path(tmp_path / "blobs")
        assert config.tracing.enabled

    def test_lm_studio_dimension(self, monkeypatch):
        monkeypatch.setenv("EMBEDDING_PROVIDER", " LM-Studio")

        config = Config.from_env()

        assert config.embedding_provider == "lm-studio"
        assert config.embedding_dimension == 768

    def test_non_positive_max_attempts_means_unbounded(self, monkeypatch):
        monkeypatch.setenv("EMBEDDING_MAX_ATTEMPTS", "0")
        assert Config.from_env().embedding_queue.max_attempts is None

    def test_backoff_base_override(self, monkeypatch):
        assert Config.from_env().embedding_queue.backoff_base_seconds == 30.0

        monkeypatch.setenv("EMBEDDING_BACKOFF_BASE_SECONDS", "0")
        assert Config.from_env().embedding_queue.backoff_base_seconds == 0.0
