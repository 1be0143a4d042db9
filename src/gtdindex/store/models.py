"""SQLAlchemy ORM models for the gtdindex storage layer.

Declarative models mapped to the regular tables, in SQLAlchemy 2.0 style with
Mapped[] annotations. They back the Alembic migrations; the runtime
repositories talk to sqlite3 directly.

Note: the FTS5 virtual table (documents_fts) and the partial indexes on
embedding_queue are created with raw SQL in the migration.
"""

from typing import Optional

from sqlalchemy import ForeignKey, Integer, LargeBinary, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models in gtdindex."""

    pass


class DocumentModel(Base):
    """A normalized note or manually created document.

    Contexts and metadata are JSON text; the embedding is a packed float32
    blob that stays NULL until the queue processor fills it.
    """

    __tablename__ = "documents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    source_id: Mapped[Optional[str]] = mapped_column(String, unique=True, nullable=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    contexts: Mapped[str] = mapped_column(Text, nullable=False, default='["@inbox"]')
    project: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    area: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="active")
    source_type: Mapped[str] = mapped_column(String, nullable=False, default="evernote")
    metadata_json: Mapped[str] = mapped_column("metadata", Text, nullable=False, default="{}")
    embedding: Mapped[Optional[bytes]] = mapped_column(LargeBinary, nullable=True)
    needs_embedding: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    is_active: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[str] = mapped_column(String, nullable=False)
    updated_at: Mapped[str] = mapped_column(String, nullable=False)

    # Relationships
    attachments: Mapped[list["AttachmentModel"]] = relationship(
        "AttachmentModel", back_populates="document", cascade="all, delete-orphan"
    )
    context_rows: Mapped[list["DocumentContextModel"]] = relationship(
        "DocumentContextModel", cascade="all, delete-orphan"
    )


class DocumentContextModel(Base):
    """Inverted index row: one context of one document."""

    __tablename__ = "document_contexts"

    document_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("documents.id", ondelete="CASCADE"), primary_key=True
    )
    context: Mapped[str] = mapped_column(String, primary_key=True)


class AttachmentModel(Base):
    """A decoded resource attached to a document."""

    __tablename__ = "attachments"
    __table_args__ = (
        UniqueConstraint("document_id", "storage_reference", name="uq_attachments_document_reference"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    document_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("documents.id", ondelete="CASCADE"), nullable=False
    )
    filename: Mapped[str] = mapped_column(Text, nullable=False)
    mime_type: Mapped[str] = mapped_column(String, nullable=False)
    byte_size: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    storage_reference: Mapped[str] = mapped_column(Text, nullable=False)
    extracted_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    metadata_json: Mapped[str] = mapped_column("metadata", Text, nullable=False, default="{}")
    created_at: Mapped[str] = mapped_column(String, nullable=False)

    document: Mapped["DocumentModel"] = relationship("DocumentModel", back_populates="attachments")


class EmbeddingQueueModel(Base):
    """A pending (processed_at NULL) or finished embedding request."""

    __tablename__ = "embedding_queue"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    document_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("documents.id", ondelete="CASCADE"), nullable=False
    )
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[str] = mapped_column(String, nullable=False)
    last_attempt_at: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    processed_at: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    claim_token: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    claimed_at: Mapped[Optional[str]] = mapped_column(String, nullable=True)


class MigrationJobModel(Base):
    """Progress of one bulk import."""

    __tablename__ = "migration_jobs"

    job_id: Mapped[str] = mapped_column(String, primary_key=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="pending")
    total_items: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    processed_items: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    failed_items: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    error_log: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    started_at: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    completed_at: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    last_checkpoint_at: Mapped[Optional[str]] = mapped_column(String, nullable=True)


class SearchHistoryModel(Base):
    """One executed search."""

    __tablename__ = "search_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    query: Mapped[str] = mapped_column(Text, nullable=False)
    filters: Mapped[str] = mapped_column(Text, nullable=False, default="{}")
    result_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[str] = mapped_column(String, nullable=False)
