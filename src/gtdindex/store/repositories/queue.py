"""Embedding queue storage for gtdindex.

Entries are claimed with a lease so two processors never embed the same
document at once: a claim stamps ``claim_token``/``claimed_at`` with one
conditional UPDATE, and a lease older than ``lease_seconds`` is treated as
abandoned.
"""

import sqlite3
import uuid
from datetime import datetime, timedelta

from loguru import logger

from ...core.types import EmbeddingQueueEntry
from ...utils.clock import utc_now
from ..database import Database


def retry_delay(attempts: int, base_seconds: float, max_seconds: float) -> float:
    """Backoff before the next attempt after ``attempts`` failures.

    ``base * 2**(attempts - 1)`` capped at ``max_seconds``; zero before the
    first failure.
    """
    if attempts <= 0:
        return 0.0
    return min(base_seconds * (2 ** (attempts - 1)), max_seconds)


class EmbeddingQueueRepository:
    """Repository for the embedding queue."""

    def __init__(self, db: Database):
        self.db = db

    def enqueue(self, document_id: int, priority: int = 5) -> bool:
        """Queue a document unless it already has an unprocessed entry.

        Returns:
            True if a new entry was created.
        """
        with self.db.transaction() as cursor:
            cursor.execute(
                """
                INSERT OR IGNORE INTO embedding_queue (document_id, priority, created_at)
                VALUES (?, ?, ?)
                """,
                (document_id, priority, utc_now().isoformat()),
            )
            created = cursor.rowcount > 0

        if created:
            logger.debug(f"Queued document {document_id} for embedding (priority={priority})")
        return created

    def claim(
        self,
        batch_size: int,
        *,
        max_attempts: int | None = None,
        backoff_base_seconds: float = 0.0,
        backoff_max_seconds: float = 0.0,
        lease_seconds: float = 300.0,
        now: datetime | None = None,
    ) -> list[EmbeddingQueueEntry]:
        """Claim up to ``batch_size`` eligible entries.

        Eligible entries are unprocessed, belong to an active document, are
        not under a live lease, have attempts left and are past their retry
        backoff. Order: priority DESC, created_at ASC, id ASC.

        Returns:
            Claimed entries with the document title and content attached.
        """
        if batch_size <= 0:
            return []

        now = now or utc_now()
        lease_cutoff = (now - timedelta(seconds=lease_seconds)).isoformat()

        attempts_filter = ""
        params: list = [lease_cutoff]
        if max_attempts is not None:
            attempts_filter = "AND q.attempts < ?"
            params.append(max_attempts)

        cursor = self.db.execute(
            f"""
            SELECT q.id, q.attempts, q.last_attempt_at
            FROM embedding_queue q
            JOIN documents d ON d.id = q.document_id
            WHERE q.processed_at IS NULL
              AND d.is_active = 1
              AND (q.claim_token IS NULL OR q.claimed_at < ?)
              {attempts_filter}
            ORDER BY q.priority DESC, q.created_at ASC, q.id ASC
            """,
            tuple(params),
        )

        candidate_ids: list[int] = []
        for row in cursor.fetchall():
            if not self._past_backoff(row, now, backoff_base_seconds, backoff_max_seconds):
                continue
            candidate_ids.append(row["id"])
            if len(candidate_ids) >= batch_size:
                break

        if not candidate_ids:
            return []

        token = uuid.uuid4().hex
        placeholders = ", ".join("?" for _ in candidate_ids)
        with self.db.transaction() as cursor:
            cursor.execute(
                f"""
                UPDATE embedding_queue
                SET claim_token = ?, claimed_at = ?
                WHERE id IN ({placeholders})
                  AND processed_at IS NULL
                  AND (claim_token IS NULL OR claimed_at < ?)
                """,
                (token, now.isoformat(), *candidate_ids, lease_cutoff),
            )

        cursor = self.db.execute(
            """
            SELECT q.*, d.title AS title, d.content AS content
            FROM embedding_queue q
            JOIN documents d ON d.id = q.document_id
            WHERE q.claim_token = ?
            ORDER BY q.priority DESC, q.created_at ASC, q.id ASC
            """,
            (token,),
        )
        entries = [self._row_to_entry(row) for row in cursor.fetchall()]
        logger.debug(f"Claimed {len(entries)} queue entries (token={token[:8]})")
        return entries

    def mark_processed(self, entry_id: int) -> None:
        """Mark an entry done and release its claim."""
        now = utc_now().isoformat()
        with self.db.transaction() as cursor:
            cursor.execute(
                """
                UPDATE embedding_queue
                SET processed_at = ?, last_attempt_at = ?, last_error = NULL,
                    claim_token = NULL, claimed_at = NULL
                WHERE id = ?
                """,
                (now, now, entry_id),
            )

    def mark_failed(self, entry_id: int, error: str) -> None:
        """Record a failed attempt and release the claim; the entry stays pending."""
        with self.db.transaction() as cursor:
            cursor.execute(
                """
                UPDATE embedding_queue
                SET attempts = attempts + 1, last_error = ?, last_attempt_at = ?,
                    claim_token = NULL, claimed_at = NULL
                WHERE id = ?
                """,
                (error, utc_now().isoformat(), entry_id),
            )

    def requeue(self, entry_id: int) -> None:
        """Close a claimed entry whose document changed and queue the document again.

        The replacement keeps the priority and starts with no attempts.
        """
        now = utc_now().isoformat()
        with self.db.transaction() as cursor:
            cursor.execute(
                """
                UPDATE embedding_queue
                SET processed_at = ?, claim_token = NULL, claimed_at = NULL
                WHERE id = ?
                """,
                (now, entry_id),
            )
            cursor.execute(
                """
                INSERT OR IGNORE INTO embedding_queue (document_id, priority, created_at)
                SELECT document_id, priority, ? FROM embedding_queue WHERE id = ?
                """,
                (now, entry_id),
            )
        logger.debug(f"Queue entry {entry_id} superseded by a newer document version")

    def get(self, entry_id: int) -> EmbeddingQueueEntry | None:
        cursor = self.db.execute(
            """
            SELECT q.*, d.title AS title, d.content AS content
            FROM embedding_queue q
            JOIN documents d ON d.id = q.document_id
            WHERE q.id = ?
            """,
            (entry_id,),
        )
        row = cursor.fetchone()
        return self._row_to_entry(row) if row else None

    def entries_for_document(self, document_id: int) -> list[EmbeddingQueueEntry]:
        cursor = self.db.execute(
            """
            SELECT q.*, d.title AS title, d.content AS content
            FROM embedding_queue q
            JOIN documents d ON d.id = q.document_id
            WHERE q.document_id = ?
            ORDER BY q.id
            """,
            (document_id,),
        )
        return [self._row_to_entry(row) for row in cursor.fetchall()]

    def count_pending(self, max_attempts: int | None = None) -> int:
        """Unprocessed entries that still have attempts left."""
        if max_attempts is None:
            cursor = self.db.execute(
                "SELECT COUNT(*) AS n FROM embedding_queue WHERE processed_at IS NULL"
            )
        else:
            cursor = self.db.execute(
                """
                SELECT COUNT(*) AS n FROM embedding_queue
                WHERE processed_at IS NULL AND attempts < ?
                """,
                (max_attempts,),
            )
        return cursor.fetchone()["n"]

    def count_exhausted(self, max_attempts: int | None = None) -> int:
        """Unprocessed entries that ran out of attempts."""
        if max_attempts is None:
            return 0
        cursor = self.db.execute(
            """
            SELECT COUNT(*) AS n FROM embedding_queue
            WHERE processed_at IS NULL AND attempts >= ?
            """,
            (max_attempts,),
        )
        return cursor.fetchone()["n"]

    @staticmethod
    def _past_backoff(
        row: sqlite3.Row, now: datetime, base_seconds: float, max_seconds: float
    ) -> bool:
        if row["attempts"] <= 0 or not row["last_attempt_at"]:
            return True
        delay = retry_delay(row["attempts"], base_seconds, max_seconds)
        last_attempt = datetime.fromisoformat(row["last_attempt_at"])
        return now >= last_attempt + timedelta(seconds=delay)

    @staticmethod
    def _row_to_entry(row: sqlite3.Row) -> EmbeddingQueueEntry:
        return EmbeddingQueueEntry(
            id=row["id"],
            document_id=row["document_id"],
            priority=row["priority"],
            attempts=row["attempts"],
            last_error=row["last_error"],
            created_at=row["created_at"],
            last_attempt_at=row["last_attempt_at"],
            processed_at=row["processed_at"],
            title=row["title"] or "",
            content=row["content"] or "",
        )
