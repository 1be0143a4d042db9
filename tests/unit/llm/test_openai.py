"""Tests for the OpenAI embeddings provider."""

import json

import httpx
import pytest
import respx
from httpx import Response

from gtdindex.core.config import OpenAIConfig
from gtdindex.core.exceptions import EmbeddingError
from gtdindex.core.types import EmbeddingResult
from gtdindex.llm.base import EmbeddingProvider
from gtdindex.llm.openai import OpenAIEmbeddingProvider

from .conftest import make_embedding_response

EMBEDDINGS_URL = "https://api.test/v1/embeddings"


class TestOpenAIProviderInit:
    """Tests for OpenAIEmbeddingProvider initialization."""

    def test_implements_embedding_provider(self, openai_config):
        assert isinstance(OpenAIEmbeddingProvider(openai_config), EmbeddingProvider)

    def test_requires_api_key(self):
        with pytest.raises(ValueError, match="OPENAI_API_KEY"):
            OpenAIEmbeddingProvider(OpenAIConfig(api_key=""))

    def test_defaults(self, openai_config):
        provider = OpenAIEmbeddingProvider(openai_config)
        assert provider.get_default_embedding_model() == "text-embedding-3-small"
        assert provider.dimension == 4
        assert provider.embeddings_url == EMBEDDINGS_URL


class TestOpenAIEmbed:
    """Tests for OpenAIEmbeddingProvider.embed."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_embed_success(self, openai_config):
        route = respx.post(EMBEDDINGS_URL).mock(
            return_value=Response(200, json=make_embedding_response([0.1, 0.2, 0.3, 0.4]))
        )

        provider = OpenAIEmbeddingProvider(openai_config)
        result = await provider.embed("weekly review")

        assert isinstance(result, EmbeddingResult)
        assert result.embedding == [0.1, 0.2, 0.3, 0.4]
        assert result.model == "text-embedding-3-small"

        request = route.calls[0].request
        assert request.headers["Authorization"] == "Bearer sk-test"
        assert json.loads(request.content) == {"model": "text-embedding-3-small", "input": "weekly review"}
        await provider.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_http_error_status(self, openai_config):
        respx.post(EMBEDDINGS_URL).mock(return_value=Response(429, text="rate limit exceeded"))

        provider = OpenAIEmbeddingProvider(openai_config)
        with pytest.raises(EmbeddingError, match="HTTP 429.*rate limit"):
            await provider.embed("text")
        await provider.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_transport_error(self, openai_config):
        respx.post(EMBEDDINGS_URL).mock(side_effect=httpx.ConnectError("refused"))

        provider = OpenAIEmbeddingProvider(openai_config)
        with pytest.raises(EmbeddingError, match="request failed"):
            await provider.embed("text")
        await provider.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_malformed_body(self, openai_config):
        respx.post(EMBEDDINGS_URL).mock(return_value=Response(200, json={"data": []}))

        provider = OpenAIEmbeddingProvider(openai_config)
        with pytest.raises(EmbeddingError, match="Malformed"):
            await provider.embed("text")
        await provider.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_dimension_mismatch(self, openai_config):
        respx.post(EMBEDDINGS_URL).mock(
            return_value=Response(200, json=make_embedding_response([0.1, 0.2]))
        )

        provider = OpenAIEmbeddingProvider(openai_config)
        with pytest.raises(EmbeddingError, match="dimension mismatch"):
            await provider.embed("text")
        await provider.close()


class TestOpenAIAvailability:
    """Tests for is_available."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_available(self, openai_config):
        respx.get("https://api.test/v1/models").mock(return_value=Response(200, json={"data": []}))

        provider = OpenAIEmbeddingProvider(openai_config)
        assert await provider.is_available()
        await provider.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_unavailable(self, openai_config):
        respx.get("https://api.test/v1/models").mock(side_effect=httpx.ConnectError("down"))

        provider = OpenAIEmbeddingProvider(openai_config)
        assert not await provider.is_available()
        await provider.close()
