"""SQLite storage layer for gtdindex."""

from .database import Database
from .repositories import (
    AttachmentRepository,
    DocumentRepository,
    EmbeddingQueueRepository,
    MigrationJobRepository,
    SearchHistoryRepository,
)
from .search import LexicalSearchRepository, SearchRepository, VectorSearchRepository

__all__ = [
    "AttachmentRepository",
    "Database",
    "DocumentRepository",
    "EmbeddingQueueRepository",
    "LexicalSearchRepository",
    "MigrationJobRepository",
    "SearchHistoryRepository",
    "SearchRepository",
    "VectorSearchRepository",
]
