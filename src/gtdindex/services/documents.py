"""Document service for hand-created documents."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from loguru import logger

from ..core.exceptions import DocumentNotFoundError
from ..core.types import DEFAULT_CONTEXT, UNTITLED_NOTE, Document, DocumentDraft, DocumentStatus
from ..utils.clock import utc_now

if TYPE_CHECKING:
    from ..store.repositories import DocumentRepository, EmbeddingQueueRepository
    from .container import ServiceContainer

MANUAL_SOURCE_TYPE = "manual"


class DocumentService:
    """Create, update and soft-delete documents outside of imports.

    Every write keeps the FTS index in sync (through the repository) and
    queues the document for a fresh embedding.
    """

    def __init__(
        self,
        document_repo: "DocumentRepository",
        queue_repo: "EmbeddingQueueRepository",
        embedding_priority: int = 5,
    ):
        self._document_repo = document_repo
        self._queue_repo = queue_repo
        self._embedding_priority = embedding_priority

    @classmethod
    def from_container(cls, container: "ServiceContainer") -> "DocumentService":
        return cls(
            document_repo=container.document_repo,
            queue_repo=container.queue_repo,
            embedding_priority=container.config.migration.default_priority,
        )

    def create(
        self,
        title: str,
        content: str = "",
        contexts: list[str] | None = None,
        project: str | None = None,
        area: str | None = None,
        status: DocumentStatus | str = DocumentStatus.ACTIVE,
        metadata: dict[str, Any] | None = None,
        priority: int | None = None,
    ) -> Document:
        """Create a document and queue it for embedding.

        Args:
            title: Document title (placeholder if blank).
            content: Plain-text content.
            contexts: GTD contexts (``@inbox`` if none).
            project: Optional project.
            area: Optional area of responsibility.
            status: GTD status.
            metadata: Free-form metadata.
            priority: Embedding queue priority (service default if None).

        Returns:
            The stored Document.
        """
        now = utc_now()
        draft = DocumentDraft(
            source_id=None,
            title=title.strip() or UNTITLED_NOTE,
            content=content,
            contexts=list(contexts) if contexts else [DEFAULT_CONTEXT],
            project=project,
            area=area,
            created_at=now,
            updated_at=now,
            metadata=metadata or {},
            status=DocumentStatus(status),
            source_type=MANUAL_SOURCE_TYPE,
        )
        document, _ = self._document_repo.upsert(draft)
        self._queue_repo.enqueue(document.id, self._priority(priority))
        logger.info(f"Document created: id={document.id}, title={document.title[:50]!r}")
        return document

    def update(self, document_id: int, priority: int | None = None, **fields: Any) -> Document:
        """Update fields of a document and queue it for re-embedding.

        Accepted fields: title, content, contexts, project, area, status,
        metadata.

        Raises:
            DocumentNotFoundError: If the document does not exist or is inactive.
            ValueError: If an unknown field is given.
        """
        unknown = set(fields) - {"title", "content", "contexts", "project", "area", "status", "metadata"}
        if unknown:
            raise ValueError(f"Unknown document fields: {', '.join(sorted(unknown))}")
        if "contexts" in fields and not fields["contexts"]:
            fields["contexts"] = [DEFAULT_CONTEXT]

        document = self._document_repo.update(document_id, **fields)
        self._queue_repo.enqueue(document.id, self._priority(priority))
        return document

    def get(self, document_id: int) -> Document:
        """Get an active document.

        Raises:
            DocumentNotFoundError: If the document does not exist or is inactive.
        """
        document = self._document_repo.get(document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)
        return document

    def soft_delete(self, document_id: int) -> bool:
        """Deactivate a document; it disappears from search and listings.

        Returns:
            True if the document was active, False otherwise.
        """
        return self._document_repo.soft_delete(document_id)

    def _priority(self, priority: int | None) -> int:
        return self._embedding_priority if priority is None else priority
