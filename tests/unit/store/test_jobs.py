"""Tests for MigrationJobRepository."""

import pytest

from gtdindex.core.exceptions import MigrationError
from gtdindex.core.types import ErrorLogEntry, MigrationStatus
from gtdindex.store.repositories import MigrationJobRepository


class TestMigrationJobRepository:
    """Tests for job lifecycle and checkpoints."""

    def test_start_creates_running_job(self, job_repo: MigrationJobRepository):
        job = job_repo.start("job-1")

        assert job.status == MigrationStatus.RUNNING
        assert (job.total_items, job.processed_items, job.failed_items) == (0, 0, 0)
        assert job.error_log == []
        assert job.started_at is not None

    def test_checkpoints_accumulate(self, job_repo: MigrationJobRepository):
        job_repo.start("job-1")
        job_repo.set_total("job-1", 20)

        job_repo.checkpoint("job-1", 9, 1, [ErrorLogEntry("note #4", "empty")])
        job = job_repo.checkpoint("job-1", 10, 0, [])

        assert job.total_items == 20
        assert job.processed_items == 19
        assert job.failed_items == 1
        assert job.error_log == [ErrorLogEntry("note #4", "empty")]
        assert job.last_checkpoint_at is not None

    def test_complete(self, job_repo: MigrationJobRepository):
        job_repo.start("job-1")
        job = job_repo.complete("job-1")

        assert job.status == MigrationStatus.COMPLETED
        assert job.status.is_terminal
        assert job.completed_at is not None

    def test_fail_records_error(self, job_repo: MigrationJobRepository):
        job_repo.start("job-1")
        job = job_repo.fail("job-1", ErrorLogEntry("export", "Invalid ENEX format"))

        assert job.status == MigrationStatus.FAILED
        assert job.error_log[-1].message == "Invalid ENEX format"
        assert job.completed_at is not None

    def test_restart_resets_counters(self, job_repo: MigrationJobRepository):
        job_repo.start("job-1")
        job_repo.checkpoint("job-1", 3, 2, [ErrorLogEntry("a", "b")])
        job_repo.complete("job-1")

        job = job_repo.start("job-1")

        assert job.status == MigrationStatus.RUNNING
        assert (job.processed_items, job.failed_items, job.error_log) == (0, 0, [])
        assert job.completed_at is None

    def test_missing_job(self, job_repo: MigrationJobRepository):
        assert job_repo.get("nope") is None
        with pytest.raises(MigrationError):
            job_repo.checkpoint("nope", 1, 0)
        with pytest.raises(MigrationError):
            job_repo.fail("nope", ErrorLogEntry("x", "y"))
