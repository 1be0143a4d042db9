"""Migration pipeline for bulk ENEX imports.

This module implements the MigrationPipeline that orchestrates:
1. start job - Create or reset the job row (running, counters zeroed)
2. parse - Turn the export into note records (structural failure stops here)
3. migrate batches - Normalize, upsert, attach and enqueue each note
4. checkpoint - Fold per-note outcomes into the job after every batch
5. complete - Mark the job completed regardless of per-note failures

Design notes:
- Notes in a batch run concurrently under asyncio.gather; each task returns a
  NoteOutcome and never mutates shared counters
- Job counters are only written at batch boundaries, so they only ever grow
- Attachment problems are logged and never fail the note
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING, Iterator, Sequence

from loguru import logger

from gtdindex.core.exceptions import ExportFormatError, MigrationError
from gtdindex.core.instrumentation import traced_batch, traced_request
from gtdindex.core.types import ErrorLogEntry, NoteRecord
from gtdindex.ingest.attachments import AttachmentExtractor
from gtdindex.ingest.enex import ExportDocument, parse_export, parse_export_file
from gtdindex.ingest.normalizer import NoteNormalizer
from gtdindex.workflows.contracts import MigrationRequest, MigrationResult, NoteOutcome

if TYPE_CHECKING:
    from gtdindex.ingest.blobs import BlobStore
    from gtdindex.store.repositories import (
        AttachmentRepository,
        DocumentRepository,
        EmbeddingQueueRepository,
        MigrationJobRepository,
    )

DEFAULT_BATCH_SIZE = 10


def batched(items: Sequence[NoteRecord], size: int) -> Iterator[Sequence[NoteRecord]]:
    """Yield consecutive slices of at most ``size`` items."""
    if size <= 0:
        raise ValueError(f"batch size must be positive, got {size}")
    for start in range(0, len(items), size):
        yield items[start : start + size]


class MigrationPipeline:
    """Pipeline importing an export into the document store.

    Example:
        pipeline = MigrationPipeline(
            document_repo=docs,
            attachment_repo=attachments,
            queue_repo=queue,
            job_repo=jobs,
            blob_store=blobs,
        )

        result = await pipeline.execute(MigrationRequest(content=enex_xml))
        print(f"{result.processed_items}/{result.total_items} imported")
    """

    def __init__(
        self,
        document_repo: "DocumentRepository",
        attachment_repo: "AttachmentRepository",
        queue_repo: "EmbeddingQueueRepository",
        job_repo: "MigrationJobRepository",
        blob_store: "BlobStore | None" = None,
        normalizer: NoteNormalizer | None = None,
        extractor: AttachmentExtractor | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        embedding_priority: int = 5,
    ):
        """Initialize MigrationPipeline.

        Args:
            document_repo: Repository for document upserts.
            attachment_repo: Repository for attachment records.
            queue_repo: Embedding queue for new and updated documents.
            job_repo: Repository for job progress.
            blob_store: Optional storage for attachment bytes.
            normalizer: Note normalizer (default instance if None).
            extractor: Attachment extractor (default instance if None).
            batch_size: Notes per batch (and per checkpoint).
            embedding_priority: Queue priority for imported documents.
        """
        self._document_repo = document_repo
        self._attachment_repo = attachment_repo
        self._queue_repo = queue_repo
        self._job_repo = job_repo
        self._blob_store = blob_store
        self._normalizer = normalizer or NoteNormalizer()
        self._extractor = extractor or AttachmentExtractor()
        self._batch_size = batch_size
        self._embedding_priority = embedding_priority

    async def execute(self, request: MigrationRequest) -> MigrationResult:
        """Execute the migration pipeline.

        Args:
            request: Migration request with the export and job id.

        Returns:
            MigrationResult mirroring the final job row. A structurally
            invalid export yields status ``failed``; per-note failures still
            end ``completed``.

        Raises:
            MigrationError: If progress could not be recorded (the job is
                marked failed first when possible).
        """
        job_id = request.job_id
        batch_size = request.batch_size or self._batch_size
        context = request.context
        trace_info = f", trace_id={context.trace_id[:8]}" if context else ""
        logger.info(f"MigrationPipeline.execute: job={job_id}, batch_size={batch_size}{trace_info}")
        start_time = time.perf_counter()

        self._job_repo.start(job_id)

        with traced_request("migration", attributes={"migration.job_id": job_id}):
            try:
                export = self._load_export(request)
            except ExportFormatError as e:
                logger.warning(f"Migration {job_id} failed: {e}")
                job = self._job_repo.fail(job_id, ErrorLogEntry(item="export", message=str(e)))
                return MigrationResult.from_job(job, self._elapsed(start_time))

            total = len(export.notes)
            self._job_repo.set_total(job_id, total)
            logger.debug(f"Migration {job_id}: {total} notes in export")

            try:
                done = 0
                for number, batch in enumerate(batched(export.notes, batch_size), start=1):
                    with traced_batch(job_id, number, len(batch)) as counts:
                        outcomes = await asyncio.gather(*(self._migrate_note(note) for note in batch))
                        job = self._checkpoint(job_id, outcomes)
                        counts["processed"] = job.processed_items
                        counts["failed"] = job.failed_items
                    done += len(batch)
                    if request.progress_callback:
                        request.progress_callback(done, total, outcomes[-1].item)
                    logger.debug(
                        f"Migration {job_id} checkpoint: {job.processed_items} processed, "
                        f"{job.failed_items} failed of {total}"
                    )
            except Exception as e:
                logger.error(f"Migration {job_id} aborted: {e}")
                self._job_repo.fail(job_id, ErrorLogEntry(item="migration", message=str(e)))
                raise MigrationError(f"Migration {job_id} aborted: {e}") from e

            job = self._job_repo.complete(job_id)

        elapsed = self._elapsed(start_time)
        logger.info(
            f"MigrationPipeline complete: job={job_id}, total={job.total_items}, "
            f"processed={job.processed_items}, failed={job.failed_items}, {elapsed:.1f}ms"
        )
        return MigrationResult.from_job(job, elapsed)

    @staticmethod
    def _load_export(request: MigrationRequest) -> ExportDocument:
        if request.path is not None:
            return parse_export_file(request.path)
        if request.content is None:
            raise ExportFormatError("Invalid ENEX format: no export content given")
        return parse_export(request.content)

    def _checkpoint(self, job_id: str, outcomes: Sequence[NoteOutcome]):
        processed = sum(1 for outcome in outcomes if outcome.succeeded)
        errors = [
            ErrorLogEntry(item=outcome.item, message=outcome.error)
            for outcome in outcomes
            if outcome.error is not None
        ]
        return self._job_repo.checkpoint(job_id, processed, len(errors), errors)

    async def _migrate_note(self, note: NoteRecord) -> NoteOutcome:
        """Migrate one note; every failure becomes the outcome's error."""
        item = note.label if note is not None else "unknown note"
        try:
            draft = self._normalizer.normalize(note)
            document, is_new = self._document_repo.upsert(draft)
            attachments = await self._store_attachments(document.id, draft.resources)
            self._queue_repo.enqueue(document.id, self._embedding_priority)
        except Exception as e:
            logger.warning(f"Failed to migrate note {item!r}: {e}")
            return NoteOutcome(item=getattr(e, "item", item), error=str(e))

        return NoteOutcome(
            item=item,
            document_id=document.id,
            is_new=is_new,
            attachments=attachments,
        )

    async def _store_attachments(self, document_id: int, resources) -> int:
        stored = 0
        for resource in resources:
            draft = self._extractor.extract(resource, document_id)
            if draft is None:
                continue
            try:
                if self._blob_store is not None:
                    await self._blob_store.put(draft.storage_reference, draft.data)
                self._attachment_repo.add(document_id, draft)
                stored += 1
            except Exception as e:
                logger.debug(f"Attachment {draft.filename!r} of document {document_id} skipped: {e}")
        return stored

    @staticmethod
    def _elapsed(start_time: float) -> float:
        return (time.perf_counter() - start_time) * 1000
