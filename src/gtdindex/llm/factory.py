"""Embedding provider factory for instantiating the right provider."""

from loguru import logger

from ..core.config import Config
from .base import EmbeddingProvider
from .lm_studio import LMStudioEmbeddingProvider
from .openai import OpenAIEmbeddingProvider


def create_embedding_provider(config: Config) -> EmbeddingProvider | None:
    """Create the configured embedding provider.

    A missing OpenAI credential is a valid state: the function returns None
    and callers degrade (queue processing is skipped, search is lexical).

    Args:
        config: Application configuration.

    Returns:
        Configured EmbeddingProvider, or None if no credential is set.

    Raises:
        ValueError: If the provider name is not recognized.
    """
    provider_name = config.embedding_provider.lower().strip()

    if provider_name == "openai":
        if not config.openai.api_key:
            logger.info("No embedding credential configured; semantic features disabled")
            return None
        return OpenAIEmbeddingProvider(config.openai)
    elif provider_name == "lm-studio":
        return LMStudioEmbeddingProvider(config.lm_studio)
    else:
        raise ValueError(
            f"Unknown embedding provider: {provider_name}. "
            "Supported providers: openai, lm-studio"
        )


def get_provider_name(config: Config) -> str:
    """Get human-readable provider name."""
    provider = config.embedding_provider.lower().strip()
    names = {
        "openai": "OpenAI",
        "lm-studio": "LM Studio",
    }
    return names.get(provider, provider)
