"""Fixtures for embedding provider tests."""

import pytest

from gtdindex.core.config import LMStudioConfig, OpenAIConfig


def make_embedding_response(embedding: list[float] | None = None) -> dict:
    """Build an OpenAI-style embeddings response body."""
    return {
        "object": "list",
        "data": [{"object": "embedding", "index": 0, "embedding": embedding or [0.1] * 4}],
        "model": "test-model",
    }


@pytest.fixture
def openai_config() -> OpenAIConfig:
    return OpenAIConfig(
        api_key="sk-test",
        base_url="https://api.test/v1",
        embedding_model="text-embedding-3-small",
        embedding_dimension=4,
    )


@pytest.fixture
def lm_studio_config() -> LMStudioConfig:
    return LMStudioConfig(
        base_url="http://localhost:1234",
        embedding_model="nomic-embed-text",
        embedding_dimension=4,
    )
