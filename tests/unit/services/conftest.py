"""Fixtures for service tests."""

from pathlib import Path

import pytest

from gtdindex.core.config import Config


@pytest.fixture
def config(tmp_path: Path) -> Config:
    """Configuration pointing at a temporary store, without a credential."""
    config = Config(db_path=tmp_path / "index.db")
    config.openai.api_key = ""
    config.openai.embedding_dimension = 8
    return config


@pytest.fixture
def with_fake_provider(monkeypatch, fake_provider):
    """Make the container resolve the fake embedding provider."""
    monkeypatch.setattr(
        "gtdindex.services.container.create_embedding_provider",
        lambda config: fake_provider,
    )
    return fake_provider
