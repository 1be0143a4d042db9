"""Migration service: background ENEX imports and embedding queue runs."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from ..core.config import EmbeddingQueueConfig, MigrationConfig
from ..core.types import MigrationJob
from ..workflows.contracts import (
    EmbedQueueResult,
    MigrationRequest,
    MigrationResult,
    ProgressCallback,
    new_job_id,
)
from ..workflows.pipelines import EmbeddingQueuePipeline, MigrationPipeline

if TYPE_CHECKING:
    from ..ingest.blobs import BlobStore
    from ..llm.embeddings import EmbeddingGenerator
    from ..store.repositories import (
        AttachmentRepository,
        DocumentRepository,
        EmbeddingQueueRepository,
        MigrationJobRepository,
    )
    from .container import ServiceContainer


class MigrationService:
    """Service for export imports and embedding generation.

    Migrations run as background asyncio tasks; callers get the job id back
    immediately and poll ``get_status`` (or ``wait``) for the outcome.

    Example:

        async with ServiceContainer(config) as services:
            job_id = await services.migration.start_migration(enex_xml)
            job = services.migration.get_status(job_id)
            print(f"{job.status.value}: {job.processed_items}/{job.total_items}")

            await services.migration.wait(job_id)
            result = await services.migration.process_embedding_queue(batch_size=20)
    """

    def __init__(
        self,
        document_repo: "DocumentRepository",
        attachment_repo: "AttachmentRepository",
        queue_repo: "EmbeddingQueueRepository",
        job_repo: "MigrationJobRepository",
        embedding_generator: "EmbeddingGenerator | None" = None,
        blob_store: "BlobStore | None" = None,
        migration_config: MigrationConfig | None = None,
        queue_config: EmbeddingQueueConfig | None = None,
    ):
        """Initialize MigrationService.

        Args:
            document_repo: Repository for documents.
            attachment_repo: Repository for attachment records.
            queue_repo: Embedding queue.
            job_repo: Repository for migration jobs.
            embedding_generator: Generator for queue runs (None skips them).
            blob_store: Optional storage for attachment bytes.
            migration_config: Batch size and embedding priority.
            queue_config: Embedding queue retry settings.
        """
        self._job_repo = job_repo
        self._migration_config = migration_config or MigrationConfig()
        self._tasks: dict[str, asyncio.Task[MigrationResult]] = {}

        self._migration_pipeline = MigrationPipeline(
            document_repo=document_repo,
            attachment_repo=attachment_repo,
            queue_repo=queue_repo,
            job_repo=job_repo,
            blob_store=blob_store,
            batch_size=self._migration_config.batch_size,
            embedding_priority=self._migration_config.default_priority,
        )
        self._embedding_pipeline = EmbeddingQueuePipeline(
            queue_repo=queue_repo,
            document_repo=document_repo,
            embedding_generator=embedding_generator,
            config=queue_config,
        )

    @classmethod
    def from_container(cls, container: "ServiceContainer") -> "MigrationService":
        """Build the service from a container's shared resources."""
        return cls(
            document_repo=container.document_repo,
            attachment_repo=container.attachment_repo,
            queue_repo=container.queue_repo,
            job_repo=container.job_repo,
            embedding_generator=container.get_embedding_generator(),
            blob_store=container.blob_store,
            migration_config=container.config.migration,
            queue_config=container.config.embedding_queue,
        )

    async def start_migration(
        self,
        content: str | bytes,
        job_id: str | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> str:
        """Schedule the import of raw export XML.

        The job row exists (status ``running``) before this returns, so
        ``get_status`` never reports a freshly started job as missing.

        Args:
            content: Export XML.
            job_id: Job id to use (generated if None).
            progress_callback: Called after each batch checkpoint.

        Returns:
            The job id.
        """
        request = MigrationRequest(
            job_id=job_id or new_job_id(),
            content=content,
            progress_callback=progress_callback,
        )
        return self._schedule(request)

    async def start_migration_file(
        self,
        path: Path | str,
        job_id: str | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> str:
        """Schedule the import of an export file.

        Returns:
            The job id.
        """
        request = MigrationRequest(
            job_id=job_id or new_job_id(),
            path=Path(path),
            progress_callback=progress_callback,
        )
        return self._schedule(request)

    async def migrate(self, content: str | bytes, job_id: str | None = None) -> MigrationResult:
        """Run an import in the foreground and return its result."""
        request = MigrationRequest(job_id=job_id or new_job_id(), content=content)
        return await self._migration_pipeline.execute(request)

    def get_status(self, job_id: str) -> MigrationJob | None:
        """Get the current state of a job.

        Returns:
            MigrationJob, or None if no job has this id.
        """
        return self._job_repo.get(job_id)

    async def wait(self, job_id: str) -> MigrationJob | None:
        """Wait for a background migration to finish.

        Returns the final job state; a job that is not running in this
        process is returned as stored.
        """
        task = self._tasks.get(job_id)
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)
        return self.get_status(job_id)

    def running_jobs(self) -> list[str]:
        """Ids of migrations still running in this process."""
        return [job_id for job_id, task in self._tasks.items() if not task.done()]

    async def drain(self) -> None:
        """Wait for every running migration task."""
        pending = [task for task in self._tasks.values() if not task.done()]
        if pending:
            logger.debug(f"Waiting for {len(pending)} running migration(s)")
            await asyncio.gather(*pending, return_exceptions=True)

    async def process_embedding_queue(self, batch_size: int | None = None) -> EmbedQueueResult:
        """Process one batch of the embedding queue.

        Returns:
            EmbedQueueResult; status "skipped" without an embedding provider.
        """
        return await self._embedding_pipeline.execute(batch_size=batch_size)

    def _schedule(self, request: MigrationRequest) -> str:
        job_id = request.job_id
        self._job_repo.start(job_id)
        task = asyncio.create_task(
            self._migration_pipeline.execute(request), name=f"gtdindex-{job_id}"
        )
        task.add_done_callback(lambda t: self._on_done(job_id, t))
        self._tasks[job_id] = task
        logger.info(f"Migration scheduled: job={job_id}")
        return job_id

    def _on_done(self, job_id: str, task: asyncio.Task) -> None:
        self._tasks.pop(job_id, None)
        if task.cancelled():
            logger.warning(f"Migration {job_id} cancelled")
        elif task.exception() is not None:
            logger.error(f"Migration {job_id} ended with error: {task.exception()}")
