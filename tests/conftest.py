"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from gtdindex.llm.embeddings import EmbeddingGenerator
from gtdindex.store.database import Database
from gtdindex.store.repositories import (
    AttachmentRepository,
    DocumentRepository,
    EmbeddingQueueRepository,
    MigrationJobRepository,
    SearchHistoryRepository,
)
from gtdindex.store.search import LexicalSearchRepository, VectorSearchRepository
from tests.fakes import FakeEmbeddingProvider


@pytest.fixture
def test_db_path(tmp_path: Path) -> Path:
    """Provide a temporary database path for tests."""
    return tmp_path / "test.db"


@pytest.fixture
def db(test_db_path: Path) -> Database:
    """Provide a connected database instance."""
    database = Database(test_db_path)
    database.connect()
    yield database
    database.close()


@pytest.fixture
def document_repo(db: Database) -> DocumentRepository:
    return DocumentRepository(db)


@pytest.fixture
def attachment_repo(db: Database) -> AttachmentRepository:
    return AttachmentRepository(db)


@pytest.fixture
def queue_repo(db: Database) -> EmbeddingQueueRepository:
    return EmbeddingQueueRepository(db)


@pytest.fixture
def job_repo(db: Database) -> MigrationJobRepository:
    return MigrationJobRepository(db)


@pytest.fixture
def history_repo(db: Database) -> SearchHistoryRepository:
    return SearchHistoryRepository(db)


@pytest.fixture
def lexical_repo(db: Database) -> LexicalSearchRepository:
    return LexicalSearchRepository(db)


@pytest.fixture
def vector_repo(db: Database) -> VectorSearchRepository:
    return VectorSearchRepository(db)


@pytest.fixture
def fake_provider() -> FakeEmbeddingProvider:
    """Provide a deterministic 8-dimensional embedding provider."""
    return FakeEmbeddingProvider(dimension=8)


@pytest.fixture
def embedding_generator(fake_provider: FakeEmbeddingProvider) -> EmbeddingGenerator:
    return EmbeddingGenerator(fake_provider)
