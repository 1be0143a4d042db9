"""Test fakes for testing without real infrastructure.

This module provides in-memory implementations of:
- Embedding providers (deterministic vectors, scripted failures)
- Blob storage (attachment bytes kept in a dict)
- ENEX export builders

Example:
    from tests.fakes import FakeEmbeddingProvider, InMemoryBlobStore, make_export, make_note

    provider = FakeEmbeddingProvider(dimension=8)
    xml = make_export(make_note("Weekly review", guid="n1", tags=["@computer"]))
"""

from .blobs import InMemoryBlobStore
from .documents import make_draft
from .enex import make_export, make_note, make_resource
from .providers import FailingEmbeddingProvider, FakeEmbeddingProvider, bag_of_words_vector

__all__ = [
    "FailingEmbeddingProvider",
    "FakeEmbeddingProvider",
    "InMemoryBlobStore",
    "bag_of_words_vector",
    "make_draft",
    "make_export",
    "make_note",
    "make_resource",
]
