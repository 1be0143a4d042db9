"""Embedding generation for documents and queries."""

import time

from loguru import logger

from ..core.exceptions import EmbeddingError
from ..core.instrumentation import traced_embed
from .base import EmbeddingProvider


def build_embedding_input(title: str, content: str, max_chars: int) -> str:
    """Title and content joined by a blank line, truncated to ``max_chars``."""
    return f"{title}\n\n{content}"[:max_chars]


class EmbeddingGenerator:
    """Generates vectors for documents and queries through a provider.

    Checks every vector against the dimension the document store expects.
    """

    def __init__(
        self,
        provider: EmbeddingProvider,
        dimension: int | None = None,
        max_input_chars: int = 8000,
    ):
        """Initialize embedding generator.

        Args:
            provider: Provider used for embedding calls.
            dimension: Expected vector width (defaults to the provider's).
            max_input_chars: Truncation bound for document input.
        """
        self.provider = provider
        self.dimension = dimension or provider.dimension
        self.max_input_chars = max_input_chars
        self.model = provider.get_default_embedding_model()

    async def embed_document(self, title: str, content: str) -> list[float]:
        """Generate the vector for a document.

        Raises:
            EmbeddingError: If the provider fails or returns a bad vector.
        """
        text = build_embedding_input(title, content, self.max_input_chars)
        return await self._embed(text, is_query=False)

    async def embed_query(self, query: str) -> list[float]:
        """Generate the vector for a search query.

        Raises:
            EmbeddingError: If the provider fails or returns a bad vector.
        """
        query_preview = query[:50] + "..." if len(query) > 50 else query
        logger.debug(f"Embedding query: {query_preview!r}")
        return await self._embed(query[: self.max_input_chars], is_query=True)

    async def _embed(self, text: str, is_query: bool) -> list[float]:
        start_time = time.perf_counter()
        with traced_embed(self.model, text, is_query=is_query) as meta:
            result = await self.provider.embed(text, model=self.model, is_query=is_query)
            meta["embedding_dim"] = len(result.embedding)

        if len(result.embedding) != self.dimension:
            raise EmbeddingError(
                f"Embedding dimension mismatch: expected {self.dimension}, "
                f"got {len(result.embedding)}"
            )

        elapsed = (time.perf_counter() - start_time) * 1000
        logger.debug(f"Embedded {len(text)} chars (query={is_query}) in {elapsed:.1f}ms")
        return result.embedding
