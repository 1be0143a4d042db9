"""Embedding providers for gtdindex."""

from .base import EmbeddingProvider
from .embeddings import EmbeddingGenerator, build_embedding_input
from .factory import create_embedding_provider, get_provider_name
from .lm_studio import LMStudioEmbeddingProvider
from .openai import OpenAIEmbeddingProvider

__all__ = [
    "EmbeddingGenerator",
    "EmbeddingProvider",
    "LMStudioEmbeddingProvider",
    "OpenAIEmbeddingProvider",
    "build_embedding_input",
    "create_embedding_provider",
    "get_provider_name",
]
