"""Search history storage for gtdindex."""

import json

from ...utils.clock import iso_ago, now_iso
from ..database import Database

SUGGESTION_WINDOW_SECONDS = 30 * 24 * 3600


class SearchHistoryRepository:
    """Records executed searches for suggestions and status reporting."""

    def __init__(self, db: Database):
        self.db = db

    def record(self, query: str, filters: dict, result_count: int) -> None:
        with self.db.transaction() as cursor:
            cursor.execute(
                """
                INSERT INTO search_history (query, filters, result_count, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (query, json.dumps(filters), result_count, now_iso()),
            )

    def recent_queries(self, prefix: str, limit: int = 5) -> list[str]:
        """Distinct recent queries starting with ``prefix`` (last 30 days), newest first."""
        cursor = self.db.execute(
            """
            SELECT query, MAX(created_at) AS last_used FROM search_history
            WHERE lower(query) LIKE lower(?) || '%' AND created_at >= ?
            GROUP BY query
            ORDER BY last_used DESC
            LIMIT ?
            """,
            (prefix, iso_ago(SUGGESTION_WINDOW_SECONDS), limit),
        )
        return [row["query"] for row in cursor.fetchall()]

    def count_since(self, seconds: float) -> int:
        cursor = self.db.execute(
            "SELECT COUNT(*) AS n FROM search_history WHERE created_at >= ?",
            (iso_ago(seconds),),
        )
        return cursor.fetchone()["n"]
