"""Status service for index health and status reporting."""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from ..core.types import IndexStatus
from ..llm.factory import get_provider_name

if TYPE_CHECKING:
    from .container import ServiceContainer

SEARCH_WINDOW_SECONDS = 24 * 3600


class StatusService:
    """Service for index status and health reporting.

    This service provides information about:
    - Document and attachment counts
    - Embedding coverage and queue backlog (pending vs. out of attempts)
    - Recent search activity and provider availability

    Example:

        async with ServiceContainer(config) as services:
            status = services.status.get_status()
            print(f"Documents: {status.total_documents}")
            print(f"Waiting for embeddings: {status.pending_embeddings}")
    """

    def __init__(self, container: "ServiceContainer"):
        """Initialize StatusService.

        Args:
            container: Service container with shared resources.
        """
        self._container = container

    @classmethod
    def from_container(cls, container: "ServiceContainer") -> "StatusService":
        return cls(container)

    def get_status(self) -> IndexStatus:
        """Get current index status.

        Returns:
            IndexStatus with document, queue and search statistics.
        """
        logger.debug("Getting index status")
        container = self._container
        max_attempts = container.config.embedding_queue.max_attempts

        status = IndexStatus(
            total_documents=container.document_repo.count_active(),
            embedded_documents=container.document_repo.count_embedded(),
            pending_embeddings=container.queue_repo.count_pending(max_attempts),
            exhausted_embeddings=container.queue_repo.count_exhausted(max_attempts),
            total_attachments=container.attachment_repo.count(),
            searches_24h=container.history_repo.count_since(SEARCH_WINDOW_SECONDS),
            index_size_bytes=container.db.size_bytes(),
            embedding_configured=container.embedding_configured,
        )

        logger.debug(
            f"Index status: documents={status.total_documents}, "
            f"embedded={status.embedded_documents}, pending={status.pending_embeddings}, "
            f"exhausted={status.exhausted_embeddings}"
        )
        return status

    async def get_full_status(self) -> dict:
        """Get comprehensive status including provider reachability.

        Returns:
            Dictionary with all status information.
        """
        status = self.get_status()
        container = self._container

        provider = container.get_embedding_provider()
        provider_available = False
        if provider is not None:
            provider_available = await provider.is_available()

        return {
            "total_documents": status.total_documents,
            "embedded_documents": status.embedded_documents,
            "pending_embeddings": status.pending_embeddings,
            "exhausted_embeddings": status.exhausted_embeddings,
            "total_attachments": status.total_attachments,
            "searches_24h": status.searches_24h,
            "index_size_bytes": status.index_size_bytes,
            "database_path": str(container.config.db_path),
            "embedding_provider": get_provider_name(container.config),
            "embedding_configured": status.embedding_configured,
            "embedding_available": provider_available,
        }
