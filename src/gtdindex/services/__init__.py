"""Service layer for gtdindex.

Services share one ServiceContainer (database connection, repositories,
embedding provider) and expose the operations callers use:

- MigrationService: background ENEX imports, job status, embedding queue runs
- SearchService: hybrid search, suggestions, related documents
- DocumentService: hand-created documents
- StatusService: index statistics
"""

from .container import ServiceContainer
from .documents import DocumentService
from .migration import MigrationService
from .search import SearchService
from .status import StatusService

__all__ = [
    "DocumentService",
    "MigrationService",
    "SearchService",
    "ServiceContainer",
    "StatusService",
]
