"""Fake embedding providers."""

import re

from gtdindex.core.exceptions import EmbeddingError
from gtdindex.core.types import EmbeddingResult
from gtdindex.llm.base import EmbeddingProvider

_WORD = re.compile(r"\w+")


def bag_of_words_vector(text: str, dimension: int = 8) -> list[float]:
    """Deterministic vector: each word bumps one bucket chosen from its letters."""
    vector = [0.0] * dimension
    for word in _WORD.findall(text.lower()):
        vector[sum(ord(ch) for ch in word) % dimension] += 1.0
    if not any(vector):
        vector[0] = 1.0
    return vector


class FakeEmbeddingProvider(EmbeddingProvider):
    """Provider returning bag-of-words vectors and recording every call."""

    def __init__(self, dimension: int = 8):
        self._dimension = dimension
        self.calls: list[tuple[str, bool]] = []
        self.closed = False

    @property
    def dimension(self) -> int:
        return self._dimension

    async def embed(self, text: str, model: str | None = None, is_query: bool = False) -> EmbeddingResult:
        self.calls.append((text, is_query))
        return EmbeddingResult(
            embedding=bag_of_words_vector(text, self._dimension),
            model=model or "fake-embed",
        )

    async def is_available(self) -> bool:
        return True

    def get_default_embedding_model(self) -> str:
        return "fake-embed"

    async def close(self) -> None:
        self.closed = True


class FailingEmbeddingProvider(FakeEmbeddingProvider):
    """Provider that raises EmbeddingError for texts containing a marker."""

    def __init__(self, dimension: int = 8, fail_marker: str = "", message: str = "rate limited"):
        super().__init__(dimension)
        self.fail_marker = fail_marker
        self.message = message

    async def embed(self, text: str, model: str | None = None, is_query: bool = False) -> EmbeddingResult:
        if self.fail_marker in text:
            self.calls.append((text, is_query))
            raise EmbeddingError(self.message)
        return await super().embed(text, model, is_query)
