"""OpenAI embeddings provider."""

from ..core.config import OpenAIConfig
from .base import OpenAICompatibleProvider


class OpenAIEmbeddingProvider(OpenAICompatibleProvider):
    """OpenAI API embeddings (``POST {base_url}/embeddings``) with bearer auth."""

    label = "Embedding API"

    def __init__(self, config: OpenAIConfig):
        """Require an API key and send it as a bearer token.

        Raises:
            ValueError: If no API key is configured.
        """
        if not config.api_key:
            raise ValueError("OPENAI_API_KEY environment variable not set")
        super().__init__(config, headers={"Authorization": f"Bearer {config.api_key}"})

    @property
    def api_root(self) -> str:
        return self.config.base_url.rstrip("/")
