"""Baseline schema with all core tables.

Creates:
- documents: Normalized notes with JSON contexts/metadata and embedding blob
- document_contexts: Inverted index for context filtering
- documents_fts: Full-text search index (FTS5)
- attachments: Decoded resources per document
- embedding_queue: Pending vector generation, one open entry per document
- migration_jobs: Bulk import progress and error log
- search_history: Executed searches

Revision ID: 0001
Revises: None
Create Date: 2026-10-01
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create full baseline schema."""
    op.create_table(
        "documents",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("source_id", sa.Text(), nullable=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False, server_default=""),
        sa.Column("contexts", sa.Text(), nullable=False, server_default='["@inbox"]'),
        sa.Column("project", sa.Text(), nullable=True),
        sa.Column("area", sa.Text(), nullable=True),
        sa.Column("status", sa.Text(), nullable=False, server_default="active"),
        sa.Column("source_type", sa.Text(), nullable=False, server_default="evernote"),
        sa.Column("metadata", sa.Text(), nullable=False, server_default="{}"),
        sa.Column("embedding", sa.LargeBinary(), nullable=True),
        sa.Column("needs_embedding", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("is_active", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("source_id"),
    )

    op.create_table(
        "document_contexts",
        sa.Column("document_id", sa.Integer(), nullable=False),
        sa.Column("context", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(["document_id"], ["documents.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("document_id", "context"),
    )

    op.create_table(
        "attachments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("document_id", sa.Integer(), nullable=False),
        sa.Column("filename", sa.Text(), nullable=False),
        sa.Column("mime_type", sa.Text(), nullable=False),
        sa.Column("byte_size", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("storage_reference", sa.Text(), nullable=False),
        sa.Column("extracted_text", sa.Text(), nullable=True),
        sa.Column("metadata", sa.Text(), nullable=False, server_default="{}"),
        sa.Column("created_at", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(["document_id"], ["documents.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("document_id", "storage_reference"),
    )

    op.create_table(
        "embedding_queue",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("document_id", sa.Integer(), nullable=False),
        sa.Column("priority", sa.Integer(), nullable=False, server_default="5"),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_error", sa.Text(), nullable=True),
        sa.Column("created_at", sa.Text(), nullable=False),
        sa.Column("last_attempt_at", sa.Text(), nullable=True),
        sa.Column("processed_at", sa.Text(), nullable=True),
        sa.Column("claim_token", sa.Text(), nullable=True),
        sa.Column("claimed_at", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["document_id"], ["documents.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "migration_jobs",
        sa.Column("job_id", sa.Text(), nullable=False),
        sa.Column("status", sa.Text(), nullable=False, server_default="pending"),
        sa.Column("total_items", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("processed_items", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("failed_items", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("error_log", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("started_at", sa.Text(), nullable=True),
        sa.Column("completed_at", sa.Text(), nullable=True),
        sa.Column("last_checkpoint_at", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("job_id"),
    )

    op.create_table(
        "search_history",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("query", sa.Text(), nullable=False),
        sa.Column("filters", sa.Text(), nullable=False, server_default="{}"),
        sa.Column("result_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_index("idx_documents_project", "documents", ["project"])
    op.create_index("idx_documents_area", "documents", ["area"])
    op.create_index("idx_documents_active", "documents", ["is_active"])
    op.create_index("idx_document_contexts_context", "document_contexts", ["context"])
    op.create_index("idx_attachments_document", "attachments", ["document_id"])
    op.create_index("idx_search_history_created", "search_history", ["created_at"])

    # Partial indexes and FTS5 are SQLite-specific syntax
    op.execute(
        """
        CREATE INDEX idx_embedding_queue_pending
        ON embedding_queue(priority DESC, created_at ASC) WHERE processed_at IS NULL
        """
    )
    op.execute(
        """
        CREATE UNIQUE INDEX uq_embedding_queue_pending_document
        ON embedding_queue(document_id) WHERE processed_at IS NULL
        """
    )
    op.execute(
        """
        CREATE VIRTUAL TABLE documents_fts USING fts5(
            title, content,
            tokenize='porter unicode61'
        )
        """
    )


def downgrade() -> None:
    """Drop all tables."""
    op.execute("DROP TABLE IF EXISTS documents_fts")
    op.execute("DROP INDEX IF EXISTS uq_embedding_queue_pending_document")
    op.execute("DROP INDEX IF EXISTS idx_embedding_queue_pending")
    op.drop_index("idx_search_history_created", table_name="search_history")
    op.drop_index("idx_attachments_document", table_name="attachments")
    op.drop_index("idx_document_contexts_context", table_name="document_contexts")
    op.drop_index("idx_documents_active", table_name="documents")
    op.drop_index("idx_documents_area", table_name="documents")
    op.drop_index("idx_documents_project", table_name="documents")
    op.drop_table("search_history")
    op.drop_table("migration_jobs")
    op.drop_table("embedding_queue")
    op.drop_table("attachments")
    op.drop_table("document_contexts")
    op.drop_table("documents")
