"""Migration job progress storage for gtdindex."""

import json
import sqlite3
from dataclasses import asdict

from loguru import logger

from ...core.exceptions import MigrationError
from ...core.types import ErrorLogEntry, MigrationJob, MigrationStatus
from ...utils.clock import now_iso
from ..database import Database


class MigrationJobRepository:
    """Repository for migration job rows.

    Counters only grow: checkpoints add deltas and append to the error log,
    they never overwrite.
    """

    def __init__(self, db: Database):
        self.db = db

    def start(self, job_id: str, status: MigrationStatus = MigrationStatus.RUNNING) -> MigrationJob:
        """Create a job row, or reset an existing one for a new run.

        Counters are zeroed and the error log cleared.
        """
        with self.db.transaction() as cursor:
            cursor.execute(
                """
                INSERT INTO migration_jobs
                (job_id, status, total_items, processed_items, failed_items, error_log,
                 started_at, completed_at, last_checkpoint_at)
                VALUES (?, ?, 0, 0, 0, '[]', ?, NULL, NULL)
                ON CONFLICT(job_id) DO UPDATE SET
                    status = excluded.status,
                    total_items = 0,
                    processed_items = 0,
                    failed_items = 0,
                    error_log = '[]',
                    started_at = excluded.started_at,
                    completed_at = NULL,
                    last_checkpoint_at = NULL
                """,
                (job_id, status.value, now_iso()),
            )

        logger.debug(f"Migration job {job_id} started ({status.value})")
        return self._require(job_id)

    def set_total(self, job_id: str, total_items: int) -> None:
        with self.db.transaction() as cursor:
            cursor.execute(
                "UPDATE migration_jobs SET total_items = ? WHERE job_id = ?",
                (total_items, job_id),
            )

    def checkpoint(
        self,
        job_id: str,
        processed: int,
        failed: int,
        errors: list[ErrorLogEntry] | None = None,
    ) -> MigrationJob:
        """Add one batch worth of progress to a job.

        Args:
            job_id: Job to update.
            processed: Notes successfully stored in the batch.
            failed: Notes that failed in the batch.
            errors: Error entries to append to the log.

        Returns:
            Updated job.
        """
        with self.db.transaction() as cursor:
            cursor.execute("SELECT error_log FROM migration_jobs WHERE job_id = ?", (job_id,))
            row = cursor.fetchone()
            if row is None:
                raise MigrationError(f"Migration job not found: {job_id}")

            error_log = json.loads(row["error_log"])
            error_log.extend(asdict(error) for error in errors or [])

            cursor.execute(
                """
                UPDATE migration_jobs
                SET processed_items = processed_items + ?,
                    failed_items = failed_items + ?,
                    error_log = ?,
                    last_checkpoint_at = ?
                WHERE job_id = ?
                """,
                (processed, failed, json.dumps(error_log), now_iso(), job_id),
            )

        return self._require(job_id)

    def complete(self, job_id: str) -> MigrationJob:
        with self.db.transaction() as cursor:
            cursor.execute(
                """
                UPDATE migration_jobs SET status = ?, completed_at = ?
                WHERE job_id = ?
                """,
                (MigrationStatus.COMPLETED.value, now_iso(), job_id),
            )
        return self._require(job_id)

    def fail(self, job_id: str, error: ErrorLogEntry) -> MigrationJob:
        """Mark a job failed and record the fatal error."""
        with self.db.transaction() as cursor:
            cursor.execute("SELECT error_log FROM migration_jobs WHERE job_id = ?", (job_id,))
            row = cursor.fetchone()
            if row is None:
                raise MigrationError(f"Migration job not found: {job_id}")

            error_log = json.loads(row["error_log"])
            error_log.append(asdict(error))
            cursor.execute(
                """
                UPDATE migration_jobs
                SET status = ?, error_log = ?, completed_at = ?
                WHERE job_id = ?
                """,
                (MigrationStatus.FAILED.value, json.dumps(error_log), now_iso(), job_id),
            )

        logger.debug(f"Migration job {job_id} failed: {error.message}")
        return self._require(job_id)

    def get(self, job_id: str) -> MigrationJob | None:
        cursor = self.db.execute("SELECT * FROM migration_jobs WHERE job_id = ?", (job_id,))
        row = cursor.fetchone()
        return self._row_to_job(row) if row else None

    def _require(self, job_id: str) -> MigrationJob:
        job = self.get(job_id)
        if job is None:
            raise MigrationError(f"Migration job not found: {job_id}")
        return job

    @staticmethod
    def _row_to_job(row: sqlite3.Row) -> MigrationJob:
        return MigrationJob(
            job_id=row["job_id"],
            status=MigrationStatus(row["status"]),
            total_items=row["total_items"],
            processed_items=row["processed_items"],
            failed_items=row["failed_items"],
            error_log=[ErrorLogEntry(**entry) for entry in json.loads(row["error_log"])],
            started_at=row["started_at"],
            completed_at=row["completed_at"],
            last_checkpoint_at=row["last_checkpoint_at"],
        )
