"""Embedding queue pipeline for vector generation.

This module implements the EmbeddingQueuePipeline that orchestrates:
1. claim - Lease up to N eligible queue entries (priority DESC, oldest first)
2. embed - Build the title + content input and call the generator
3. store - Save the vector on the document and mark the entry processed

Failures increment the entry's attempt counter and keep it queued; the retry
policy (attempt cap and backoff) is applied when claiming.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from loguru import logger

from gtdindex.core.config import EmbeddingQueueConfig
from gtdindex.core.instrumentation import traced_request
from gtdindex.workflows.contracts import EmbedQueueResult, WorkflowContext

if TYPE_CHECKING:
    from gtdindex.core.types import EmbeddingQueueEntry
    from gtdindex.llm.embeddings import EmbeddingGenerator
    from gtdindex.store.repositories import DocumentRepository, EmbeddingQueueRepository


class EmbeddingQueuePipeline:
    """Drains the embedding queue one batch at a time.

    Example:
        pipeline = EmbeddingQueuePipeline(
            queue_repo=queue,
            document_repo=docs,
            embedding_generator=generator,
        )

        result = await pipeline.execute(batch_size=10)
        print(f"{result.status}: processed={result.processed}, failed={result.failed}")
    """

    def __init__(
        self,
        queue_repo: "EmbeddingQueueRepository",
        document_repo: "DocumentRepository",
        embedding_generator: "EmbeddingGenerator | None",
        config: EmbeddingQueueConfig | None = None,
    ):
        """Initialize EmbeddingQueuePipeline.

        Args:
            queue_repo: Queue to claim entries from.
            document_repo: Repository the vectors are stored on.
            embedding_generator: Generator, or None when no provider is
                configured (every run is then skipped).
            config: Retry, lease and truncation settings.
        """
        self._queue_repo = queue_repo
        self._document_repo = document_repo
        self._embedding_generator = embedding_generator
        self._config = config or EmbeddingQueueConfig()

    async def execute(
        self,
        batch_size: int | None = None,
        context: WorkflowContext | None = None,
    ) -> EmbedQueueResult:
        """Process up to ``batch_size`` queue entries.

        Args:
            batch_size: Entries to claim (configured default if None).
            context: Optional workflow context for tracing.

        Returns:
            EmbedQueueResult; status "skipped" without an embedding provider.
        """
        if self._embedding_generator is None:
            logger.info("Embedding queue skipped: no embedding provider configured")
            return EmbedQueueResult.skipped()

        batch_size = batch_size or self._config.batch_size
        trace_info = f", trace_id={context.trace_id[:8]}" if context else ""
        logger.info(f"EmbeddingQueuePipeline.execute: batch_size={batch_size}{trace_info}")
        start_time = time.perf_counter()

        with traced_request("embed_queue", attributes={"queue.batch_size": batch_size}):
            entries = self._queue_repo.claim(
                batch_size,
                max_attempts=self._config.max_attempts,
                backoff_base_seconds=self._config.backoff_base_seconds,
                backoff_max_seconds=self._config.backoff_max_seconds,
                lease_seconds=self._config.lease_seconds,
            )

            result = EmbedQueueResult(status="ok")
            for entry in entries:
                outcome, error = await self._process(entry)
                if outcome == "processed":
                    result.processed += 1
                elif outcome == "requeued":
                    result.requeued += 1
                else:
                    result.failed += 1
                    result.errors.append(error)

        elapsed = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"EmbeddingQueuePipeline complete: claimed={len(entries)}, "
            f"processed={result.processed}, failed={result.failed}, "
            f"requeued={result.requeued}, {elapsed:.1f}ms"
        )
        return result

    async def _process(self, entry: "EmbeddingQueueEntry") -> tuple[str, str | None]:
        """Embed one entry.

        Returns:
            ("processed", None), ("requeued", None) when the document text
            changed after the claim, or ("failed", message).
        """
        try:
            vector = await self._embedding_generator.embed_document(entry.title, entry.content)
            stored = self._document_repo.set_embedding(
                entry.document_id, vector, title=entry.title, content=entry.content
            )
            if not stored:
                self._queue_repo.requeue(entry.id)
                return "requeued", None
            self._queue_repo.mark_processed(entry.id)
        except Exception as e:
            message = str(e) or type(e).__name__
            logger.warning(
                f"Embedding failed for document {entry.document_id} "
                f"(attempt {entry.attempts + 1}): {message}"
            )
            self._queue_repo.mark_failed(entry.id, message)
            return "failed", message

        logger.debug(f"Embedded document {entry.document_id} (queue entry {entry.id})")
        return "processed", None
