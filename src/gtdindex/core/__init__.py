"""Core configuration, exceptions and types for gtdindex."""

from .config import (
    Config,
    EmbeddingQueueConfig,
    LMStudioConfig,
    MigrationConfig,
    OpenAIConfig,
    SearchConfig,
)
from .exceptions import (
    DatabaseError,
    DocumentError,
    DocumentNotFoundError,
    EmbeddingError,
    EmbeddingNotConfiguredError,
    ExportFormatError,
    GTDIndexError,
    IngestError,
    LLMError,
    MigrationError,
    NoteStructureError,
    SearchError,
)
from .types import (
    Attachment,
    AttachmentDraft,
    Document,
    DocumentDraft,
    DocumentStatus,
    EmbeddingQueueEntry,
    EmbeddingResult,
    ErrorLogEntry,
    IndexStatus,
    MigrationJob,
    MigrationStatus,
    NoteRecord,
    RankedResult,
    RelatedDocument,
    ResourceRecord,
    SearchFilters,
    SearchResult,
    SearchSource,
    SearchType,
    Suggestion,
)

__all__ = [
    "Config",
    "OpenAIConfig",
    "LMStudioConfig",
    "MigrationConfig",
    "EmbeddingQueueConfig",
    "SearchConfig",
    "GTDIndexError",
    "DatabaseError",
    "IngestError",
    "ExportFormatError",
    "NoteStructureError",
    "DocumentError",
    "DocumentNotFoundError",
    "LLMError",
    "EmbeddingError",
    "EmbeddingNotConfiguredError",
    "SearchError",
    "MigrationError",
    "Attachment",
    "AttachmentDraft",
    "Document",
    "DocumentDraft",
    "DocumentStatus",
    "EmbeddingQueueEntry",
    "EmbeddingResult",
    "ErrorLogEntry",
    "IndexStatus",
    "MigrationJob",
    "MigrationStatus",
    "NoteRecord",
    "RankedResult",
    "RelatedDocument",
    "ResourceRecord",
    "SearchFilters",
    "SearchResult",
    "SearchSource",
    "SearchType",
    "Suggestion",
]
