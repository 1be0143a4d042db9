"""Attachment records for gtdindex documents."""

import json
import sqlite3

from loguru import logger

from ...core.types import Attachment, AttachmentDraft
from ...utils.clock import now_iso
from ..database import Database


class AttachmentRepository:
    """Repository for attachment metadata.

    Only metadata is stored here; the bytes behind ``storage_reference`` live
    in blob storage.
    """

    def __init__(self, db: Database):
        self.db = db

    def add(self, document_id: int, draft: AttachmentDraft) -> tuple[Attachment, bool]:
        """Record an attachment, ignoring one already stored for the document.

        Args:
            document_id: Owning document.
            draft: Decoded attachment.

        Returns:
            Tuple of (Attachment, is_new).
        """
        with self.db.transaction() as cursor:
            cursor.execute(
                """
                INSERT OR IGNORE INTO attachments
                (document_id, filename, mime_type, byte_size, storage_reference,
                 extracted_text, metadata, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    document_id,
                    draft.filename,
                    draft.mime_type,
                    draft.byte_size,
                    draft.storage_reference,
                    draft.extracted_text,
                    json.dumps(draft.metadata),
                    now_iso(),
                ),
            )
            is_new = cursor.rowcount > 0

        cursor = self.db.execute(
            "SELECT * FROM attachments WHERE document_id = ? AND storage_reference = ?",
            (document_id, draft.storage_reference),
        )
        attachment = self._row_to_attachment(cursor.fetchone())
        if is_new:
            logger.debug(
                f"Attachment stored: document={document_id}, file={draft.filename!r}, "
                f"bytes={draft.byte_size}"
            )
        return attachment, is_new

    def list_for_document(self, document_id: int) -> list[Attachment]:
        cursor = self.db.execute(
            "SELECT * FROM attachments WHERE document_id = ? ORDER BY id", (document_id,)
        )
        return [self._row_to_attachment(row) for row in cursor.fetchall()]

    def count_by_document(self, document_ids: list[int]) -> dict[int, int]:
        """Attachment counts keyed by document id (missing ids have none)."""
        if not document_ids:
            return {}
        placeholders = ", ".join("?" for _ in document_ids)
        cursor = self.db.execute(
            f"""
            SELECT document_id, COUNT(*) AS n FROM attachments
            WHERE document_id IN ({placeholders})
            GROUP BY document_id
            """,
            tuple(document_ids),
        )
        return {row["document_id"]: row["n"] for row in cursor.fetchall()}

    def count(self) -> int:
        cursor = self.db.execute("SELECT COUNT(*) AS n FROM attachments")
        return cursor.fetchone()["n"]

    @staticmethod
    def _row_to_attachment(row: sqlite3.Row) -> Attachment:
        return Attachment(
            id=row["id"],
            document_id=row["document_id"],
            filename=row["filename"],
            mime_type=row["mime_type"],
            byte_size=row["byte_size"],
            storage_reference=row["storage_reference"],
            extracted_text=row["extracted_text"],
            metadata=json.loads(row["metadata"]),
            created_at=row["created_at"],
        )
