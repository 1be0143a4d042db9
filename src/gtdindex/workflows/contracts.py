"""Workflow contracts and data types.

Dataclasses used as inputs and outputs of the migration and embedding queue
pipelines. Per-note work returns a NoteOutcome instead of touching shared
counters; the pipeline folds outcomes at batch boundaries.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

from gtdindex.core.types import ErrorLogEntry, MigrationJob, MigrationStatus

__all__ = [
    "WorkflowContext",
    "ProgressCallback",
    "MigrationRequest",
    "NoteOutcome",
    "MigrationResult",
    "EmbedQueueResult",
    "new_job_id",
]


def new_job_id() -> str:
    """Generate a migration job id."""
    return f"migration_{uuid.uuid4().hex}"


# =============================================================================
# Workflow Context
# =============================================================================


@dataclass
class WorkflowContext:
    """Context passed through workflow execution for tracing and coordination.

    Attributes:
        trace_id: Unique identifier for this workflow execution.
        span_id: Current span within the trace (updated per node).
        metadata: Arbitrary metadata for extension.
    """

    trace_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    span_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    metadata: dict[str, Any] = field(default_factory=dict)

    def child_span(self) -> "WorkflowContext":
        """Create a child context with new span_id but same trace_id."""
        return WorkflowContext(
            trace_id=self.trace_id,
            span_id=str(uuid.uuid4()),
            metadata=self.metadata.copy(),
        )


ProgressCallback = Callable[[int, int, str], None]
"""Callback for reporting progress: (processed, total, current_item)."""


# =============================================================================
# Migration Contracts
# =============================================================================


@dataclass
class MigrationRequest:
    """Request to import one export.

    Exactly one of ``content`` and ``path`` should be set.

    Attributes:
        job_id: Job to create (or reset) and report progress on.
        content: Raw export XML.
        path: Export file to read instead of ``content``.
        batch_size: Override of the configured batch size.
        context: Optional workflow context for tracing.
        progress_callback: Called after each batch checkpoint.
    """

    job_id: str = field(default_factory=new_job_id)
    content: str | bytes | None = None
    path: Path | None = None
    batch_size: int | None = None
    context: WorkflowContext | None = None
    progress_callback: ProgressCallback | None = None


@dataclass
class NoteOutcome:
    """Result of migrating a single note.

    Attributes:
        item: Note label (title or position).
        document_id: Stored document id, None on failure.
        is_new: Whether the document was created rather than updated.
        attachments: Attachments recorded for the note.
        error: Failure message, None on success.
    """

    item: str
    document_id: int | None = None
    is_new: bool = False
    attachments: int = 0
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass
class MigrationResult:
    """Final state of a migration run."""

    job_id: str
    status: MigrationStatus
    total_items: int
    processed_items: int
    failed_items: int
    error_log: list[ErrorLogEntry] = field(default_factory=list)
    elapsed_ms: float = 0.0

    @classmethod
    def from_job(cls, job: MigrationJob, elapsed_ms: float = 0.0) -> "MigrationResult":
        return cls(
            job_id=job.job_id,
            status=job.status,
            total_items=job.total_items,
            processed_items=job.processed_items,
            failed_items=job.failed_items,
            error_log=list(job.error_log),
            elapsed_ms=elapsed_ms,
        )


# =============================================================================
# Embedding Queue Contracts
# =============================================================================


@dataclass
class EmbedQueueResult:
    """Outcome of one embedding queue batch.

    Attributes:
        status: "ok", or "skipped" when no embedding provider is configured.
        processed: Entries embedded and marked processed.
        failed: Entries whose attempt failed (left in the queue).
        requeued: Entries whose document text changed while embedding; the
            document was queued again instead of storing a stale vector.
        errors: Failure messages, one per failed entry.
    """

    status: str = "ok"
    processed: int = 0
    failed: int = 0
    requeued: int = 0
    errors: list[str] = field(default_factory=list)

    @classmethod
    def skipped(cls) -> "EmbedQueueResult":
        return cls(status="skipped")
