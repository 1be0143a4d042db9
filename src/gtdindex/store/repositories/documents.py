"""Document storage and retrieval for gtdindex."""

import json
import sqlite3
import struct
from typing import Any

from loguru import logger

from ...core.exceptions import DocumentNotFoundError
from ...core.types import Document, DocumentDraft, DocumentStatus, SearchFilters
from ...utils.clock import now_iso
from ..database import Database
from ..filters import build_filter_clause


def serialize_embedding(embedding: list[float]) -> bytes:
    """Serialize an embedding to packed float32 bytes."""
    return struct.pack(f"{len(embedding)}f", *embedding)


def deserialize_embedding(blob: bytes) -> list[float]:
    """Inverse of serialize_embedding."""
    return list(struct.unpack(f"{len(blob) // 4}f", blob))


class DocumentRepository:
    """Repository for documents, their context index and FTS5 rows.

    Every write keeps three things in one transaction: the documents row, the
    document_contexts rows and the documents_fts row (rowid = document id).
    """

    def __init__(self, db: Database):
        """Initialize with database connection.

        Args:
            db: Database instance to use for operations.
        """
        self.db = db

    def upsert(self, draft: DocumentDraft) -> tuple[Document, bool]:
        """Insert a document, or update the one with the same source id.

        On conflict the title, content, GTD fields, metadata and updated_at
        are replaced and the document is flagged for re-embedding. created_at
        and is_active are left alone.

        Args:
            draft: Normalized document.

        Returns:
            Tuple of (Document, is_new).
        """
        now = now_iso()
        created = draft.created_at.isoformat()
        updated = draft.updated_at.isoformat()
        contexts_json = json.dumps(draft.contexts)
        metadata_json = json.dumps(draft.metadata, default=str)

        with self.db.transaction() as cursor:
            existing_id = None
            if draft.source_id is not None:
                cursor.execute(
                    "SELECT id FROM documents WHERE source_id = ?", (draft.source_id,)
                )
                row = cursor.fetchone()
                existing_id = row["id"] if row else None

            cursor.execute(
                """
                INSERT INTO documents
                (source_id, title, content, contexts, project, area, status,
                 source_type, metadata, needs_embedding, is_active, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, 1, 1, ?, ?)
                ON CONFLICT(source_id) DO UPDATE SET
                    title = excluded.title,
                    content = excluded.content,
                    contexts = excluded.contexts,
                    project = excluded.project,
                    area = excluded.area,
                    metadata = excluded.metadata,
                    updated_at = excluded.updated_at,
                    needs_embedding = 1
                """,
                (
                    draft.source_id,
                    draft.title,
                    draft.content,
                    contexts_json,
                    draft.project,
                    draft.area,
                    draft.status.value,
                    draft.source_type,
                    metadata_json,
                    created or now,
                    updated or now,
                ),
            )
            doc_id = existing_id if existing_id is not None else cursor.lastrowid
            self._sync_indexes(cursor, doc_id, draft.title, draft.content, draft.contexts)

        is_new = existing_id is None
        logger.debug(
            f"Document {'created' if is_new else 'updated'}: id={doc_id}, "
            f"source_id={(draft.source_id or '')[:12]}"
        )
        document = self.get(doc_id, include_inactive=True)
        assert document is not None
        return document, is_new

    def get(self, document_id: int, include_inactive: bool = False) -> Document | None:
        """Retrieve a document by id.

        Args:
            document_id: Document id.
            include_inactive: Also return soft-deleted documents.

        Returns:
            Document if found, None otherwise.
        """
        active_filter = "" if include_inactive else "AND is_active = 1"
        cursor = self.db.execute(
            f"SELECT * FROM documents WHERE id = ? {active_filter}", (document_id,)
        )
        row = cursor.fetchone()
        return self._row_to_document(row) if row else None

    def get_by_source_id(self, source_id: str) -> Document | None:
        """Retrieve a document by its external source id."""
        cursor = self.db.execute("SELECT * FROM documents WHERE source_id = ?", (source_id,))
        row = cursor.fetchone()
        return self._row_to_document(row) if row else None

    def get_many(self, document_ids: list[int]) -> dict[int, Document]:
        """Fetch several documents by id, keyed by id."""
        if not document_ids:
            return {}
        placeholders = ", ".join("?" for _ in document_ids)
        cursor = self.db.execute(
            f"SELECT * FROM documents WHERE id IN ({placeholders})", tuple(document_ids)
        )
        return {row["id"]: self._row_to_document(row) for row in cursor.fetchall()}

    def update(self, document_id: int, **fields: Any) -> Document:
        """Update selected fields of an active document.

        Accepted fields: title, content, contexts, project, area, status,
        metadata. Any change flags the document for re-embedding.

        Raises:
            DocumentNotFoundError: If the document does not exist or is inactive.
        """
        current = self.get(document_id)
        if current is None:
            raise DocumentNotFoundError(document_id)

        title = fields.get("title", current.title)
        content = fields.get("content", current.content)
        contexts = fields.get("contexts", current.contexts)
        status = fields.get("status", current.status)
        if isinstance(status, str):
            status = DocumentStatus(status)

        with self.db.transaction() as cursor:
            cursor.execute(
                """
                UPDATE documents
                SET title = ?, content = ?, contexts = ?, project = ?, area = ?,
                    status = ?, metadata = ?, updated_at = ?, needs_embedding = 1
                WHERE id = ?
                """,
                (
                    title,
                    content,
                    json.dumps(contexts),
                    fields.get("project", current.project),
                    fields.get("area", current.area),
                    status.value,
                    json.dumps(fields.get("metadata", current.metadata), default=str),
                    now_iso(),
                    document_id,
                ),
            )
            self._sync_indexes(cursor, document_id, title, content, contexts)

        logger.debug(f"Document updated: id={document_id}, fields={sorted(fields)}")
        updated = self.get(document_id)
        assert updated is not None
        return updated

    def set_embedding(
        self,
        document_id: int,
        embedding: list[float],
        *,
        title: str | None = None,
        content: str | None = None,
    ) -> bool:
        """Store the vector of a document and clear its needs_embedding flag.

        When ``title`` and ``content`` are given they must still match the
        stored text the vector was built from; otherwise nothing is written.

        Returns:
            True if the vector was stored.
        """
        sql = "UPDATE documents SET embedding = ?, needs_embedding = 0 WHERE id = ?"
        params: list = [serialize_embedding(embedding), document_id]
        if title is not None and content is not None:
            sql += " AND title = ? AND content = ?"
            params.extend([title, content])

        with self.db.transaction() as cursor:
            cursor.execute(sql, tuple(params))
            stored = cursor.rowcount > 0

        if not stored:
            logger.debug(f"Embedding for document {document_id} not stored: text changed")
        return stored

    def soft_delete(self, document_id: int) -> bool:
        """Mark a document inactive.

        Returns:
            True if an active document was deactivated, False if not found.
        """
        with self.db.transaction() as cursor:
            cursor.execute(
                "UPDATE documents SET is_active = 0, updated_at = ? WHERE id = ? AND is_active = 1",
                (now_iso(), document_id),
            )
            deleted = cursor.rowcount > 0

        logger.debug(f"Document soft delete: id={document_id}, deleted={deleted}")
        return deleted

    def list_active(self, filters: SearchFilters | None = None, limit: int = 100) -> list[Document]:
        """List active documents matching filters, most recently updated first."""
        clause, params = build_filter_clause(filters)
        cursor = self.db.execute(
            f"""
            SELECT d.* FROM documents d
            WHERE d.is_active = 1 {clause}
            ORDER BY d.updated_at DESC, d.id ASC
            LIMIT ?
            """,
            (*params, limit),
        )
        return [self._row_to_document(row) for row in cursor.fetchall()]

    def list_by_context(self, context: str, limit: int = 100) -> list[Document]:
        return self.list_active(SearchFilters(contexts=[context]), limit)

    def list_by_project(self, project: str, limit: int = 100) -> list[Document]:
        return self.list_active(SearchFilters(project=project), limit)

    def list_by_area(self, area: str, limit: int = 100) -> list[Document]:
        return self.list_active(SearchFilters(area=area), limit)

    def count_active(self) -> int:
        cursor = self.db.execute("SELECT COUNT(*) AS n FROM documents WHERE is_active = 1")
        return cursor.fetchone()["n"]

    def count_embedded(self) -> int:
        cursor = self.db.execute(
            "SELECT COUNT(*) AS n FROM documents WHERE is_active = 1 AND embedding IS NOT NULL"
        )
        return cursor.fetchone()["n"]

    def titles_matching(self, prefix: str, limit: int = 5) -> list[str]:
        """Titles of active documents containing ``prefix`` (case-insensitive)."""
        cursor = self.db.execute(
            """
            SELECT DISTINCT title FROM documents
            WHERE is_active = 1 AND title LIKE ? ESCAPE '\\'
            ORDER BY title
            LIMIT ?
            """,
            (f"%{_escape_like(prefix)}%", limit),
        )
        return [row["title"] for row in cursor.fetchall()]

    def top_contexts(self, limit: int = 10) -> list[tuple[str, int]]:
        """Most common contexts among active documents as (context, count)."""
        cursor = self.db.execute(
            """
            SELECT dc.context AS context, COUNT(*) AS n
            FROM document_contexts dc
            JOIN documents d ON d.id = dc.document_id
            WHERE d.is_active = 1
            GROUP BY dc.context
            ORDER BY n DESC, dc.context ASC
            LIMIT ?
            """,
            (limit,),
        )
        return [(row["context"], row["n"]) for row in cursor.fetchall()]

    def related(self, document_id: int, limit: int = 5) -> list[tuple[Document, int]]:
        """Active documents sharing contexts or project with a document.

        Relevance is the number of shared contexts plus 2 for the same
        project. Ties break on ascending id.

        Raises:
            DocumentNotFoundError: If the source document does not exist.
        """
        source = self.get(document_id)
        if source is None:
            raise DocumentNotFoundError(document_id)

        cursor = self.db.execute(
            """
            SELECT d.*,
                (SELECT COUNT(*) FROM document_contexts dc
                 WHERE dc.document_id = d.id
                   AND dc.context IN (SELECT context FROM document_contexts WHERE document_id = ?))
                + CASE WHEN d.project IS NOT NULL AND d.project = ? THEN 2 ELSE 0 END
                AS relevance
            FROM documents d
            WHERE d.id != ? AND d.is_active = 1
            ORDER BY relevance DESC, d.id ASC
            """,
            (document_id, source.project, document_id),
        )
        related: list[tuple[Document, int]] = []
        for row in cursor.fetchall():
            if row["relevance"] <= 0:
                break
            related.append((self._row_to_document(row), row["relevance"]))
            if len(related) >= limit:
                break
        return related

    @staticmethod
    def _sync_indexes(
        cursor: sqlite3.Cursor, document_id: int, title: str, content: str, contexts: list[str]
    ) -> None:
        cursor.execute("DELETE FROM document_contexts WHERE document_id = ?", (document_id,))
        cursor.executemany(
            "INSERT OR IGNORE INTO document_contexts (document_id, context) VALUES (?, ?)",
            [(document_id, context) for context in contexts],
        )
        cursor.execute("DELETE FROM documents_fts WHERE rowid = ?", (document_id,))
        cursor.execute(
            "INSERT INTO documents_fts (rowid, title, content) VALUES (?, ?, ?)",
            (document_id, title, content),
        )

    @staticmethod
    def _row_to_document(row: sqlite3.Row) -> Document:
        return Document(
            id=row["id"],
            source_id=row["source_id"],
            title=row["title"],
            content=row["content"],
            contexts=json.loads(row["contexts"]),
            project=row["project"],
            area=row["area"],
            status=DocumentStatus(row["status"]),
            source_type=row["source_type"],
            metadata=json.loads(row["metadata"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            is_active=bool(row["is_active"]),
            needs_embedding=bool(row["needs_embedding"]),
            embedding=deserialize_embedding(row["embedding"]) if row["embedding"] else None,
        )


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
