"""Workflow pipeline implementations.

This subpackage contains the concrete pipeline orchestrators:
- MigrationPipeline: ENEX import with batched checkpoints
- EmbeddingQueuePipeline: Drain the embedding queue

Each pipeline is a class that orchestrates the work while delegating
storage and embedding to injected repositories and generators.
"""

from gtdindex.workflows.pipelines.embedding import EmbeddingQueuePipeline
from gtdindex.workflows.pipelines.migration import MigrationPipeline, batched

__all__ = [
    "EmbeddingQueuePipeline",
    "MigrationPipeline",
    "batched",
]
