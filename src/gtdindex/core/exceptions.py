"""Custom exceptions for gtdindex."""


class GTDIndexError(Exception):
    """Base exception for all gtdindex errors."""

    pass


class DatabaseError(GTDIndexError):
    """Database operation failed."""

    pass


class IngestError(GTDIndexError):
    """Ingestion of an export failed."""

    pass


class ExportFormatError(IngestError):
    """The export cannot be interpreted at all (missing or malformed root)."""

    pass


class NoteStructureError(IngestError):
    """A single note record is absent or empty."""

    def __init__(self, item: str, message: str = "Note record is empty"):
        """Initialize exception with the offending item label.

        Args:
            item: Label identifying the note (title or position).
            message: Human readable reason.
        """
        self.item = item
        super().__init__(message)


class DocumentError(GTDIndexError):
    """Document operation failed."""

    pass


class DocumentNotFoundError(DocumentError):
    """Document does not exist."""

    def __init__(self, document_id: int):
        self.document_id = document_id
        super().__init__(f"Document not found: {document_id}")


class LLMError(GTDIndexError):
    """LLM provider operation failed."""

    pass


class EmbeddingError(LLMError):
    """Embedding generation failed."""

    pass


class EmbeddingNotConfiguredError(EmbeddingError):
    """No embedding provider credential is configured."""

    pass


class SearchError(GTDIndexError):
    """Search operation failed."""

    pass


class MigrationError(GTDIndexError):
    """Migration job operation failed."""

    pass
