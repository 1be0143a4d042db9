"""Repository classes for gtdindex tables."""

from .attachments import AttachmentRepository
from .documents import DocumentRepository, deserialize_embedding, serialize_embedding
from .history import SearchHistoryRepository
from .jobs import MigrationJobRepository
from .queue import EmbeddingQueueRepository, retry_delay

__all__ = [
    "AttachmentRepository",
    "DocumentRepository",
    "EmbeddingQueueRepository",
    "MigrationJobRepository",
    "SearchHistoryRepository",
    "deserialize_embedding",
    "retry_delay",
    "serialize_embedding",
]
