"""Tests for the migration pipeline."""

import hashlib

import pytest

from gtdindex.core.exceptions import MigrationError
from gtdindex.core.types import MigrationStatus
from gtdindex.ingest.attachments import storage_reference
from gtdindex.workflows.contracts import MigrationRequest
from gtdindex.workflows.pipelines import MigrationPipeline, batched
from tests.fakes import InMemoryBlobStore, make_export, make_note, make_resource


@pytest.fixture
def make_pipeline(document_repo, attachment_repo, queue_repo, job_repo):
    def _make(blob_store=None, batch_size=10) -> MigrationPipeline:
        return MigrationPipeline(
            document_repo=document_repo,
            attachment_repo=attachment_repo,
            queue_repo=queue_repo,
            job_repo=job_repo,
            blob_store=blob_store,
            batch_size=batch_size,
        )

    return _make


def ten_notes_with_empty_fourth() -> str:
    notes = [make_note(f"Note {i}", guid=f"guid-{i}") for i in range(1, 11)]
    notes[3] = "<note></note>"
    return make_export(*notes)


class TestBatched:
    def test_slices(self):
        assert [list(b) for b in batched([1, 2, 3, 4, 5], 2)] == [[1, 2], [3, 4], [5]]

    def test_rejects_non_positive_size(self):
        with pytest.raises(ValueError):
            list(batched([1], 0))


class TestMigrationPipeline:
    """Tests for MigrationPipeline.execute."""

    @pytest.mark.asyncio
    async def test_bad_note_does_not_stop_the_run(self, make_pipeline, document_repo, job_repo):
        result = await make_pipeline().execute(
            MigrationRequest(job_id="job-1", content=ten_notes_with_empty_fourth())
        )

        assert result.status == MigrationStatus.COMPLETED
        assert result.total_items == 10
        assert result.processed_items == 9
        assert result.failed_items == 1
        assert len(result.error_log) == 1
        assert result.error_log[0].item == "note #4"
        assert document_repo.count_active() == 9

        job = job_repo.get("job-1")
        assert job.status == MigrationStatus.COMPLETED
        assert job.completed_at is not None

    @pytest.mark.asyncio
    async def test_reimport_is_idempotent(self, make_pipeline, document_repo):
        export = make_export(make_note("A", guid="a"), make_note("B", guid="b"))
        pipeline = make_pipeline()

        await pipeline.execute(MigrationRequest(job_id="first", content=export))
        second = await pipeline.execute(MigrationRequest(job_id="second", content=export))

        assert second.processed_items == 2
        assert document_repo.count_active() == 2
        assert document_repo.get_by_source_id("a").title == "A"

    @pytest.mark.asyncio
    async def test_reimport_updates_changed_note(self, make_pipeline, document_repo):
        pipeline = make_pipeline()
        await pipeline.execute(MigrationRequest(content=make_export(make_note("Old", guid="a"))))
        await pipeline.execute(MigrationRequest(content=make_export(make_note("New", guid="a"))))

        assert document_repo.count_active() == 1
        assert document_repo.get_by_source_id("a").title == "New"

    @pytest.mark.asyncio
    async def test_empty_export_completes(self, make_pipeline):
        result = await make_pipeline().execute(MigrationRequest(content=make_export()))

        assert result.status == MigrationStatus.COMPLETED
        assert result.total_items == 0
        assert result.processed_items == 0

    @pytest.mark.asyncio
    async def test_malformed_export_fails_job(self, make_pipeline, job_repo, document_repo):
        result = await make_pipeline().execute(
            MigrationRequest(job_id="bad", content="<en-export><note>")
        )

        assert result.status == MigrationStatus.FAILED
        assert result.error_log[0].item == "export"
        assert job_repo.get("bad").status == MigrationStatus.FAILED
        assert document_repo.count_active() == 0

    @pytest.mark.asyncio
    async def test_missing_content_fails_job(self, make_pipeline):
        result = await make_pipeline().execute(MigrationRequest())
        assert result.status == MigrationStatus.FAILED

    @pytest.mark.asyncio
    async def test_reads_export_file(self, make_pipeline, tmp_path):
        path = tmp_path / "notes.enex"
        path.write_text(make_export(make_note("From file")), encoding="utf-8")

        result = await make_pipeline().execute(MigrationRequest(path=path))

        assert result.processed_items == 1

    @pytest.mark.asyncio
    async def test_progress_reported_per_batch(self, make_pipeline, job_repo):
        progress = []
        export = make_export(*(make_note(f"N{i}", guid=f"n{i}") for i in range(5)))

        await make_pipeline(batch_size=2).execute(
            MigrationRequest(
                job_id="progress",
                content=export,
                progress_callback=lambda done, total, item: progress.append((done, total)),
            )
        )

        assert progress == [(2, 5), (4, 5), (5, 5)]
        assert job_repo.get("progress").last_checkpoint_at is not None

    @pytest.mark.asyncio
    async def test_imported_documents_are_queued(self, make_pipeline, document_repo, queue_repo):
        await make_pipeline().execute(MigrationRequest(content=make_export(make_note("A", guid="a"))))

        document = document_repo.get_by_source_id("a")
        entries = queue_repo.entries_for_document(document.id)
        assert len(entries) == 1
        assert entries[0].priority == 5
        assert entries[0].is_pending

    @pytest.mark.asyncio
    async def test_attachments_stored(self, make_pipeline, document_repo, attachment_repo):
        blobs = InMemoryBlobStore()
        note = make_note(
            "Receipt",
            guid="r",
            resources=[
                make_resource(b"png-bytes", file_name="scan.png"),
                make_resource(b"", raw_payload="!!not base64!!"),
            ],
        )

        await make_pipeline(blob_store=blobs).execute(MigrationRequest(content=make_export(note)))

        document = document_repo.get_by_source_id("r")
        attachments = attachment_repo.list_for_document(document.id)
        assert [a.filename for a in attachments] == ["scan.png"]
        reference = storage_reference(hashlib.md5(b"png-bytes").hexdigest())
        assert attachments[0].storage_reference == reference
        assert blobs.blobs[reference] == b"png-bytes"

    @pytest.mark.asyncio
    async def test_blob_failure_does_not_fail_note(self, make_pipeline, document_repo, attachment_repo):
        reference = storage_reference(hashlib.md5(b"broken").hexdigest())
        blobs = InMemoryBlobStore(fail_on=reference)
        note = make_note(
            "Receipt",
            guid="r",
            resources=[make_resource(b"broken"), make_resource(b"fine", file_name="ok.png")],
        )

        result = await make_pipeline(blob_store=blobs).execute(MigrationRequest(content=make_export(note)))

        assert result.processed_items == 1
        assert result.failed_items == 0
        document = document_repo.get_by_source_id("r")
        assert [a.filename for a in attachment_repo.list_for_document(document.id)] == ["ok.png"]

    @pytest.mark.asyncio
    async def test_checkpoint_failure_aborts_and_fails_job(self, make_pipeline, job_repo, monkeypatch):
        def broken_checkpoint(*args, **kwargs):
            raise RuntimeError("database is locked")

        monkeypatch.setattr(job_repo, "checkpoint", broken_checkpoint)

        with pytest.raises(MigrationError, match="database is locked"):
            await make_pipeline().execute(
                MigrationRequest(job_id="abort", content=make_export(make_note("A")))
            )

        job = job_repo.get("abort")
        assert job.status == MigrationStatus.FAILED
        assert job.error_log[-1].item == "migration"
