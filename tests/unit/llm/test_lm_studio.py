"""Tests for the LM Studio embeddings provider."""

import pytest
import respx
from httpx import Response

from gtdindex.core.exceptions import EmbeddingError
from gtdindex.llm.lm_studio import LMStudioEmbeddingProvider

from .conftest import make_embedding_response


class TestLMStudioEmbed:
    """Tests for LMStudioEmbeddingProvider.embed."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_embed_success(self, lm_studio_config):
        route = respx.post("http://localhost:1234/v1/embeddings").mock(
            return_value=Response(200, json=make_embedding_response([1.0, 0.0, 0.0, 0.0]))
        )

        provider = LMStudioEmbeddingProvider(lm_studio_config)
        result = await provider.embed("call plumber", is_query=True)

        assert result.embedding == [1.0, 0.0, 0.0, 0.0]
        assert result.model == "nomic-embed-text"
        assert "Authorization" not in route.calls[0].request.headers
        await provider.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_error_status(self, lm_studio_config):
        respx.post("http://localhost:1234/v1/embeddings").mock(return_value=Response(500))

        provider = LMStudioEmbeddingProvider(lm_studio_config)
        with pytest.raises(EmbeddingError, match="HTTP 500"):
            await provider.embed("text")
        await provider.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_is_available(self, lm_studio_config):
        respx.get("http://localhost:1234/v1/models").mock(return_value=Response(200, json={}))

        provider = LMStudioEmbeddingProvider(lm_studio_config)
        assert await provider.is_available()
        await provider.close()
