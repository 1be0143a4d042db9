"""Workflow pipelines for ENEX migration and embedding generation.

Example:
    from gtdindex.workflows import MigrationPipeline, MigrationRequest

    pipeline = MigrationPipeline(document_repo, attachment_repo, queue_repo, job_repo)
    result = await pipeline.execute(MigrationRequest(content=enex_xml))
"""

from gtdindex.workflows.contracts import (
    EmbedQueueResult,
    MigrationRequest,
    MigrationResult,
    NoteOutcome,
    ProgressCallback,
    WorkflowContext,
    new_job_id,
)
from gtdindex.workflows.pipelines.embedding import EmbeddingQueuePipeline
from gtdindex.workflows.pipelines.migration import MigrationPipeline

__all__ = [
    "EmbedQueueResult",
    "EmbeddingQueuePipeline",
    "MigrationPipeline",
    "MigrationRequest",
    "MigrationResult",
    "NoteOutcome",
    "ProgressCallback",
    "WorkflowContext",
    "new_job_id",
]
