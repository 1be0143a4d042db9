"""Type definitions for gtdindex."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class DocumentStatus(Enum):
    """GTD status of a document."""

    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class MigrationStatus(Enum):
    """Lifecycle state of a migration job."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Whether no further transitions are possible."""
        return self in (MigrationStatus.COMPLETED, MigrationStatus.FAILED)


class SearchType(Enum):
    """Requested retrieval strategy."""

    TEXT = "text"
    VECTOR = "vector"
    HYBRID = "hybrid"


class SearchSource(Enum):
    """Source of a candidate search hit."""

    FTS = "fts"
    VECTOR = "vec"


DEFAULT_CONTEXT = "@inbox"
UNTITLED_NOTE = "Untitled Note"


# =============================================================================
# Parsed export records
# =============================================================================


@dataclass(frozen=True)
class ResourceRecord:
    """One embedded resource (attachment) of a note as found in the export."""

    mime: Optional[str] = None
    data: Optional[str] = None
    encoding: str = "base64"
    file_name: Optional[str] = None
    hash: Optional[str] = None
    recognition: Optional[str] = None
    width: Optional[str] = None
    height: Optional[str] = None
    duration: Optional[str] = None
    attributes: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class NoteRecord:
    """One note as found in the export, before normalization.

    Repeated elements are always tuples, even for a single occurrence.
    """

    title: Optional[str] = None
    content: Optional[str] = None
    created: Optional[str] = None
    updated: Optional[str] = None
    tags: tuple[str, ...] = ()
    resources: tuple[ResourceRecord, ...] = ()
    guid: Optional[str] = None
    attributes: dict[str, str] = field(default_factory=dict)
    position: int = 0

    @property
    def is_empty(self) -> bool:
        """True when the record carries nothing to normalize."""
        return not (
            self.title
            or self.content
            or self.created
            or self.updated
            or self.tags
            or self.resources
            or self.guid
            or self.attributes
        )

    @property
    def label(self) -> str:
        """Identify the note in logs and error reports."""
        if self.title:
            return self.title
        return f"note #{self.position + 1}"


# =============================================================================
# Documents and attachments
# =============================================================================


@dataclass
class DocumentDraft:
    """A normalized document ready to be upserted into the document store.

    ``source_id`` is None for documents created by hand, which are never
    matched on re-import.
    """

    source_id: Optional[str]
    title: str
    content: str
    contexts: list[str]
    project: Optional[str]
    area: Optional[str]
    created_at: datetime
    updated_at: datetime
    metadata: dict[str, Any] = field(default_factory=dict)
    status: DocumentStatus = DocumentStatus.ACTIVE
    source_type: str = "evernote"
    resources: tuple[ResourceRecord, ...] = ()


@dataclass
class Document:
    """A stored document."""

    id: int
    source_id: Optional[str]
    title: str
    content: str
    contexts: list[str]
    project: Optional[str]
    area: Optional[str]
    status: DocumentStatus
    source_type: str
    metadata: dict[str, Any]
    created_at: str
    updated_at: str
    is_active: bool = True
    needs_embedding: bool = True
    embedding: Optional[list[float]] = None


@dataclass
class AttachmentDraft:
    """A decoded resource ready to be stored."""

    filename: str
    mime_type: str
    byte_size: int
    storage_reference: str
    extracted_text: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    data: bytes = field(default=b"", repr=False)


@dataclass
class Attachment:
    """A stored attachment belonging to a document."""

    id: int
    document_id: int
    filename: str
    mime_type: str
    byte_size: int
    storage_reference: str
    extracted_text: Optional[str]
    metadata: dict[str, Any]
    created_at: str


# =============================================================================
# Migration jobs and embedding queue
# =============================================================================


@dataclass
class ErrorLogEntry:
    """A single failure recorded on a migration job."""

    item: str
    message: str


@dataclass
class MigrationJob:
    """Progress and error state of one bulk import run."""

    job_id: str
    status: MigrationStatus = MigrationStatus.PENDING
    total_items: int = 0
    processed_items: int = 0
    failed_items: int = 0
    error_log: list[ErrorLogEntry] = field(default_factory=list)
    started_at: Optional[str] = None
    completed_at: Optional[str] = None
    last_checkpoint_at: Optional[str] = None


@dataclass
class EmbeddingQueueEntry:
    """A document waiting for (or done with) vector generation."""

    id: int
    document_id: int
    priority: int
    attempts: int
    last_error: Optional[str]
    created_at: str
    last_attempt_at: Optional[str] = None
    processed_at: Optional[str] = None
    title: str = ""
    content: str = ""

    @property
    def is_pending(self) -> bool:
        """True while the entry has not been processed."""
        return self.processed_at is None


@dataclass
class EmbeddingResult:
    """Result from embedding generation."""

    embedding: list[float]
    model: str


# =============================================================================
# Search
# =============================================================================


@dataclass
class SearchFilters:
    """Filters shared by lexical and vector candidate retrieval.

    Attributes:
        contexts: Match documents sharing at least one of these contexts.
        area: Exact area match.
        project: Exact project match.
    """

    contexts: Optional[list[str]] = None
    area: Optional[str] = None
    project: Optional[str] = None

    def as_dict(self) -> dict[str, Any]:
        """Serialize non-empty filters (for search history)."""
        return {
            key: value
            for key, value in (
                ("contexts", self.contexts),
                ("area", self.area),
                ("project", self.project),
            )
            if value
        }


@dataclass
class SearchResult:
    """A candidate from one retrieval method."""

    document_id: int
    title: str
    score: float
    source: SearchSource = SearchSource.FTS
    snippet: Optional[str] = None
    content: Optional[str] = None


@dataclass
class RankedResult:
    """Result after hybrid merging.

    Attributes:
        document_id: Internal document id.
        title: Document title.
        score: Combined score (vector_weight * vec + (1 - vector_weight) * text).
        text_score: Normalized lexical score (0 if not a lexical hit).
        vector_score: Cosine similarity (0 if not a vector hit).
        snippet: Text excerpt around the match.
        highlight: Snippet with query terms wrapped in <mark>.
        sources_count: Number of candidate sets that found this document.
        attachments_count: Number of attachments on the document.
    """

    document_id: int
    title: str
    score: float
    text_score: float = 0.0
    vector_score: float = 0.0
    snippet: str = ""
    highlight: str = ""
    sources_count: int = 1
    contexts: list[str] = field(default_factory=list)
    project: Optional[str] = None
    area: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    attachments_count: int = 0


@dataclass
class Suggestion:
    """A search-as-you-type suggestion."""

    type: str
    value: str


@dataclass
class RelatedDocument:
    """A document related to another by contexts or project."""

    document_id: int
    title: str
    relevance: int


@dataclass
class IndexStatus:
    """Status information for the store."""

    total_documents: int
    embedded_documents: int
    pending_embeddings: int
    exhausted_embeddings: int
    total_attachments: int
    searches_24h: int
    index_size_bytes: int
    embedding_configured: bool
