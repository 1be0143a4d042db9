"""Service container for dependency injection and lifecycle management."""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from ..core.config import Config
from ..core.instrumentation import configure_tracing, shutdown_tracing
from ..ingest.blobs import FsspecBlobStore
from ..llm import create_embedding_provider
from ..llm.embeddings import EmbeddingGenerator
from ..store.database import Database
from ..store.repositories import (
    AttachmentRepository,
    DocumentRepository,
    EmbeddingQueueRepository,
    MigrationJobRepository,
    SearchHistoryRepository,
)
from ..store.search import LexicalSearchRepository, VectorSearchRepository

if TYPE_CHECKING:
    from ..llm.base import EmbeddingProvider
    from .documents import DocumentService
    from .migration import MigrationService
    from .search import SearchService
    from .status import StatusService


class ServiceContainer:
    """Manages service lifecycle and shared resources.

    The ServiceContainer is the main entry point for using gtdindex services.
    It owns the database connection, the optional embedding provider and the
    attachment blob store, and hands out services sharing them.

    Services and repositories are created lazily on first access. The
    embedding provider is resolved once; when no credential is configured it
    stays None and the services degrade instead of failing.

    Usage as context manager (recommended):

        async with ServiceContainer(Config.from_env()) as services:
            job_id = await services.migration.start_migration(enex_xml)
            await services.migration.wait(job_id)
            await services.migration.process_embedding_queue()
            results = await services.search.search("weekly review")

    Usage with manual lifecycle:

        services = ServiceContainer(config)
        services.connect()
        try:
            # use services
        finally:
            await services.close()

    Attributes:
        config: Application configuration.
        db: Database instance (connected after connect() or __aenter__).
    """

    def __init__(self, config: Config):
        """Initialize container with configuration.

        Args:
            config: Application configuration.
        """
        self.config = config
        self.db = Database(config.db_path)
        self._connected = False

        self._embedding_provider: EmbeddingProvider | None = None
        self._embedding_generator: EmbeddingGenerator | None = None
        self._provider_resolved = False
        self._blob_store: FsspecBlobStore | None = None

        # Lazy-initialized services
        self._documents: DocumentService | None = None
        self._migration: MigrationService | None = None
        self._search: SearchService | None = None
        self._status: StatusService | None = None

        # Lazy-initialized repositories (shared across services)
        self._document_repo: DocumentRepository | None = None
        self._attachment_repo: AttachmentRepository | None = None
        self._queue_repo: EmbeddingQueueRepository | None = None
        self._job_repo: MigrationJobRepository | None = None
        self._history_repo: SearchHistoryRepository | None = None
        self._lexical_repo: LexicalSearchRepository | None = None
        self._vector_repo: VectorSearchRepository | None = None

    def connect(self) -> None:
        """Connect to database.

        Must be called before accessing services unless using
        the async context manager.
        """
        if not self._connected:
            self.db.connect()
            self._connected = True
            if self.config.tracing.enabled:
                configure_tracing(self.config.tracing)
            logger.debug("ServiceContainer connected to database")

    async def close(self) -> None:
        """Wait for running migrations, then release all resources."""
        if self._migration is not None:
            await self._migration.drain()

        if self._embedding_provider is not None:
            await self._embedding_provider.close()
            self._embedding_provider = None
            self._embedding_generator = None
            self._provider_resolved = False
            logger.debug("Embedding provider closed")

        if self._connected:
            self.db.close()
            self._connected = False
            if self.config.tracing.enabled:
                shutdown_tracing()
            logger.debug("ServiceContainer closed")

    async def __aenter__(self) -> "ServiceContainer":
        """Async context manager entry."""
        self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    # --- Repository accessors (shared across services) ---

    @property
    def document_repo(self) -> DocumentRepository:
        """Get or create DocumentRepository."""
        if self._document_repo is None:
            self._document_repo = DocumentRepository(self.db)
        return self._document_repo

    @property
    def attachment_repo(self) -> AttachmentRepository:
        """Get or create AttachmentRepository."""
        if self._attachment_repo is None:
            self._attachment_repo = AttachmentRepository(self.db)
        return self._attachment_repo

    @property
    def queue_repo(self) -> EmbeddingQueueRepository:
        """Get or create EmbeddingQueueRepository."""
        if self._queue_repo is None:
            self._queue_repo = EmbeddingQueueRepository(self.db)
        return self._queue_repo

    @property
    def job_repo(self) -> MigrationJobRepository:
        """Get or create MigrationJobRepository."""
        if self._job_repo is None:
            self._job_repo = MigrationJobRepository(self.db)
        return self._job_repo

    @property
    def history_repo(self) -> SearchHistoryRepository:
        """Get or create SearchHistoryRepository."""
        if self._history_repo is None:
            self._history_repo = SearchHistoryRepository(self.db)
        return self._history_repo

    @property
    def lexical_repo(self) -> LexicalSearchRepository:
        """Get or create LexicalSearchRepository."""
        if self._lexical_repo is None:
            self._lexical_repo = LexicalSearchRepository(
                self.db, snippet_tokens=self.config.search.snippet_tokens
            )
        return self._lexical_repo

    @property
    def vector_repo(self) -> VectorSearchRepository:
        """Get or create VectorSearchRepository."""
        if self._vector_repo is None:
            self._vector_repo = VectorSearchRepository(self.db)
        return self._vector_repo

    @property
    def blob_store(self) -> FsspecBlobStore | None:
        """Attachment byte storage, None when no blob_dir is configured."""
        if self._blob_store is None and self.config.blob_dir is not None:
            self._blob_store = FsspecBlobStore(self.config.blob_dir)
        return self._blob_store

    # --- Embedding component accessors ---

    def get_embedding_provider(self) -> "EmbeddingProvider | None":
        """Get or create the embedding provider.

        Returns:
            Configured provider, or None when no credential is set.
        """
        if not self._provider_resolved:
            self._embedding_provider = create_embedding_provider(self.config)
            self._provider_resolved = True
            if self._embedding_provider is not None:
                logger.debug(f"Embedding provider created: {self.config.embedding_provider}")
        return self._embedding_provider

    def get_embedding_generator(self) -> EmbeddingGenerator | None:
        """Get or create EmbeddingGenerator.

        Returns:
            Generator bound to the provider, or None without a provider.
        """
        if self._embedding_generator is None:
            provider = self.get_embedding_provider()
            if provider is None:
                return None
            self._embedding_generator = EmbeddingGenerator(
                provider,
                dimension=self.config.embedding_dimension,
                max_input_chars=self.config.embedding_queue.max_input_chars,
            )
        return self._embedding_generator

    @property
    def embedding_configured(self) -> bool:
        """Whether semantic features are available."""
        return self.get_embedding_provider() is not None

    # --- Service accessors ---

    @property
    def documents(self) -> "DocumentService":
        """Get DocumentService instance."""
        if self._documents is None:
            from .documents import DocumentService

            self._documents = DocumentService.from_container(self)
        return self._documents

    @property
    def migration(self) -> "MigrationService":
        """Get MigrationService instance.

        Returns:
            MigrationService for imports and embedding queue runs.
        """
        if self._migration is None:
            from .migration import MigrationService

            self._migration = MigrationService.from_container(self)
        return self._migration

    @property
    def search(self) -> "SearchService":
        """Get SearchService instance.

        Returns:
            SearchService for search, suggestions and related documents.
        """
        if self._search is None:
            from .search import SearchService

            self._search = SearchService.from_container(self)
        return self._search

    @property
    def status(self) -> "StatusService":
        """Get StatusService instance."""
        if self._status is None:
            from .status import StatusService

            self._status = StatusService.from_container(self)
        return self._status
