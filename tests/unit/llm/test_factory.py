"""Tests for the embedding provider factory."""

import pytest

from gtdindex.core.config import Config
from gtdindex.llm.factory import create_embedding_provider, get_provider_name
from gtdindex.llm.lm_studio import LMStudioEmbeddingProvider
from gtdindex.llm.openai import OpenAIEmbeddingProvider


class TestCreateEmbeddingProvider:
    """Tests for create_embedding_provider."""

    def test_missing_key_means_no_provider(self):
        config = Config()
        config.openai.api_key = ""

        assert create_embedding_provider(config) is None

    def test_openai_with_key(self):
        config = Config()
        config.openai.api_key = "sk-test"

        assert isinstance(create_embedding_provider(config), OpenAIEmbeddingProvider)

    def test_lm_studio(self):
        config = Config()
        config.embedding_provider = "LM-Studio "

        assert isinstance(create_embedding_provider(config), LMStudioEmbeddingProvider)

    def test_unknown_provider(self):
        config = Config()
        config.embedding_provider = "carrier-pigeon"

        with pytest.raises(ValueError, match="Unknown embedding provider"):
            create_embedding_provider(config)

    def test_provider_names(self):
        config = Config()
        assert get_provider_name(config) == "OpenAI"
        config.embedding_provider = "lm-studio"
        assert get_provider_name(config) == "LM Studio"
