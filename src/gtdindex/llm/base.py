"""Abstract base class for embedding providers."""

import time
from abc import ABC, abstractmethod

import httpx
from loguru import logger

from ..core.exceptions import EmbeddingError
from ..core.types import EmbeddingResult


class EmbeddingProvider(ABC):
    """Abstract base class for embedding providers.

    A provider turns bounded text into a fixed-dimension vector. Failures
    raise EmbeddingError with a message fit for the queue's last_error.
    """

    @abstractmethod
    async def embed(
        self,
        text: str,
        model: str | None = None,
        is_query: bool = False,
    ) -> EmbeddingResult:
        """Generate an embedding for text.

        Args:
            text: Text to embed.
            model: Optional model override. Uses default if None.
            is_query: If True, embed as query. If False, embed as document.

        Returns:
            EmbeddingResult with embedding vector and model name.

        Raises:
            EmbeddingError: If the request fails or the response is unusable.
        """
        pass

    @abstractmethod
    async def is_available(self) -> bool:
        """Check if the embedding service is reachable."""
        pass

    @abstractmethod
    def get_default_embedding_model(self) -> str:
        """Get default embedding model name."""
        pass

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Vector width produced by the default model."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the provider and release any resources."""
        pass


class OpenAICompatibleProvider(EmbeddingProvider):
    """Shared client for servers speaking the OpenAI ``/embeddings`` protocol.

    Subclasses set ``label`` and implement ``api_root``; everything about the
    request, the response shape and the dimension check lives here.
    """

    label = "Embedding API"

    def __init__(self, config, headers: dict[str, str] | None = None):
        self.config = config
        self._client = httpx.AsyncClient(timeout=config.timeout, headers=headers)

    @property
    @abstractmethod
    def api_root(self) -> str:
        """Base URL the ``/embeddings`` and ``/models`` paths hang off."""

    @property
    def embeddings_url(self) -> str:
        return f"{self.api_root}/embeddings"

    @property
    def dimension(self) -> int:
        return self.config.embedding_dimension

    def get_default_embedding_model(self) -> str:
        return self.config.embedding_model

    async def embed(
        self,
        text: str,
        model: str | None = None,
        is_query: bool = False,
    ) -> EmbeddingResult:
        """POST one input and return its vector.

        Raises:
            EmbeddingError: On transport errors, non-200 responses, malformed
                bodies or a vector of the wrong dimension.
        """
        model = model or self.config.embedding_model
        preview = text[:50] + "..." if len(text) > 50 else text
        logger.debug(f"Embedding text ({len(text)} chars, is_query={is_query}): {preview!r}")
        start_time = time.perf_counter()

        try:
            response = await self._client.post(
                self.embeddings_url,
                json={"model": model, "input": text},
            )
        except httpx.HTTPError as e:
            elapsed = (time.perf_counter() - start_time) * 1000
            logger.warning(f"{self.label} request failed after {elapsed:.1f}ms: {e}")
            raise EmbeddingError(f"{self.label} request failed: {e}") from e

        elapsed = (time.perf_counter() - start_time) * 1000
        if response.status_code != 200:
            logger.warning(f"{self.label} returned HTTP {response.status_code} in {elapsed:.1f}ms")
            raise EmbeddingError(
                f"{self.label} returned HTTP {response.status_code}: {response.text[:200]}"
            )

        try:
            embedding = response.json()["data"][0]["embedding"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise EmbeddingError(f"Malformed embedding response: {e}") from e

        # Overridden models may legitimately use another width
        if model == self.config.embedding_model and len(embedding) != self.dimension:
            raise EmbeddingError(
                f"Embedding dimension mismatch: expected {self.dimension}, got {len(embedding)}"
            )

        logger.debug(f"Embedding generated: dim={len(embedding)}, {elapsed:.1f}ms")
        return EmbeddingResult(embedding=embedding, model=model)

    async def is_available(self) -> bool:
        try:
            response = await self._client.get(f"{self.api_root}/models", timeout=5.0)
        except httpx.HTTPError as e:
            logger.debug(f"{self.label} not available at {self.api_root}: {e}")
            return False
        return response.status_code == 200

    async def close(self) -> None:
        await self._client.aclose()
