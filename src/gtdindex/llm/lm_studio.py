"""LM Studio embeddings provider."""

from loguru import logger

from ..core.config import LMStudioConfig
from .base import OpenAICompatibleProvider


class LMStudioEmbeddingProvider(OpenAICompatibleProvider):
    """Local LM Studio server; same wire format as OpenAI, no credential."""

    label = "LM Studio"

    def __init__(self, config: LMStudioConfig):
        super().__init__(config)
        logger.debug(f"LM Studio provider initialized: base_url={config.base_url}")

    @property
    def api_root(self) -> str:
        return f"{self.config.base_url.rstrip('/')}/v1"
