"""SQLite database connection manager for gtdindex."""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from loguru import logger

from ..core.exceptions import DatabaseError, GTDIndexError
from .schema import get_schema

MEMORY = ":memory:"


class Database:
    """SQLite connection owning the document store schema.

    One connection per instance, used from the event loop thread. Writes go
    through ``transaction()`` so each repository operation commits atomically;
    readers use ``execute()``. File databases run in WAL mode so a long
    migration does not block status queries from another process.

    The FTS5 extension is required: connecting to a SQLite build without it
    fails with DatabaseError instead of breaking on the first search.
    """

    def __init__(self, path: Path | str):
        """Initialize database with path.

        Args:
            path: Path to the SQLite database file, or ``:memory:``.
        """
        self.path = Path(path) if str(path) != MEMORY else MEMORY
        self._connection: sqlite3.Connection | None = None

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    @property
    def is_memory(self) -> bool:
        return self.path == MEMORY

    def connect(self) -> None:
        """Open the connection, set pragmas and create missing tables.

        Raises:
            DatabaseError: If the file cannot be opened, FTS5 is missing or
                the schema cannot be created.
        """
        if self._connection is not None:
            return
        try:
            if not self.is_memory:
                self.path.parent.mkdir(parents=True, exist_ok=True)
            connection = sqlite3.connect(str(self.path))
            connection.row_factory = sqlite3.Row
            connection.execute("PRAGMA foreign_keys = ON")
            connection.execute("PRAGMA busy_timeout = 5000")
            if not self.is_memory:
                connection.execute("PRAGMA journal_mode = WAL")
        except (sqlite3.Error, OSError) as e:
            raise DatabaseError(f"Failed to open database {self.path}: {e}") from e

        self._connection = connection
        if not self._has_fts5():
            self.close()
            raise DatabaseError("SQLite build lacks the FTS5 extension")
        self._init_schema()
        logger.debug(f"Database connected: {self.path}")

    def close(self) -> None:
        """Close database connection."""
        if self._connection is None:
            return
        try:
            self._connection.close()
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to close database: {e}") from e
        finally:
            self._connection = None

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Cursor]:
        """Run the enclosed statements as one committed unit.

        gtdindex errors raised inside the block roll back and propagate
        unchanged; anything else rolls back and becomes DatabaseError.

        Yields:
            A cursor for executing SQL statements.
        """
        connection = self._require_connection()
        cursor = connection.cursor()
        try:
            yield cursor
            connection.commit()
        except GTDIndexError:
            connection.rollback()
            raise
        except Exception as e:
            connection.rollback()
            raise DatabaseError(f"Transaction failed: {e}") from e
        finally:
            cursor.close()

    def execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        """Execute a read query outside a transaction.

        Raises:
            DatabaseError: If not connected or the statement fails.
        """
        connection = self._require_connection()
        try:
            return connection.execute(sql, params)
        except sqlite3.Error as e:
            raise DatabaseError(f"Query execution failed: {e}") from e

    def executescript(self, sql: str) -> None:
        connection = self._require_connection()
        try:
            connection.executescript(sql)
        except sqlite3.Error as e:
            raise DatabaseError(f"Script execution failed: {e}") from e

    def size_bytes(self) -> int:
        """On-disk size including the write-ahead log (0 for in-memory databases)."""
        if self.is_memory:
            return 0
        files = (self.path, self.path.with_name(self.path.name + "-wal"))
        return sum(f.stat().st_size for f in files if f.exists())

    def _require_connection(self) -> sqlite3.Connection:
        if self._connection is None:
            raise DatabaseError("Database not connected")
        return self._connection

    def _has_fts5(self) -> bool:
        try:
            self._connection.execute("CREATE VIRTUAL TABLE temp._fts5_probe USING fts5(x)")
            self._connection.execute("DROP TABLE temp._fts5_probe")
        except sqlite3.OperationalError:
            return False
        return True

    def _init_schema(self) -> None:
        try:
            self.executescript(get_schema())
        except DatabaseError as e:
            raise DatabaseError(f"Failed to initialize schema: {e}") from e
