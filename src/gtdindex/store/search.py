"""Lexical and vector candidate retrieval for gtdindex.

Classes:
    SearchRepository: Abstract base class defining the search interface
    LexicalSearchRepository: Full-text search using SQLite FTS5 with BM25 scoring
    VectorSearchRepository: Cosine similarity over stored document embeddings

Both return candidates for the hybrid ranker:

    from gtdindex.store.search import LexicalSearchRepository, VectorSearchRepository

    lexical = LexicalSearchRepository(db)
    vector = VectorSearchRepository(db)

    text_hits = lexical.search("weekly review", limit=20)
    vec_hits = vector.search(query_embedding, limit=20)

See Also:
    - `gtdindex.search.pipeline.HybridSearchPipeline`: Merges both candidate sets
"""

import re
from abc import ABC, abstractmethod
from typing import Generic, TypeVar

import numpy as np
from loguru import logger

from ..core.types import SearchFilters, SearchResult, SearchSource
from .database import Database
from .filters import build_filter_clause

QueryT = TypeVar("QueryT")

_QUERY_TOKEN = re.compile(r'(-?)"([^"]*)"|(\S+)')


class SearchRepository(ABC, Generic[QueryT]):
    """Abstract base class for candidate retrieval.

    - `LexicalSearchRepository` accepts string queries for BM25 search
    - `VectorSearchRepository` accepts embedding vectors for similarity search
    """

    @abstractmethod
    def search(
        self,
        query: QueryT,
        limit: int = 10,
        filters: SearchFilters | None = None,
    ) -> list[SearchResult]:
        """Execute search and return candidates, best first.

        Args:
            query: Query in the format expected by the implementation.
            limit: Maximum number of candidates to return.
            filters: Optional context/area/project filters.
        """
        pass


class LexicalSearchRepository(SearchRepository[str]):
    """Full-text search using SQLite FTS5 with BM25 scoring.

    Features:
        - BM25 relevance scoring with Porter stemming
        - Score normalization so the best hit scores 1.0
        - Plain-text snippets around the best matching region
        - Web-search style queries: "exact phrase", -excluded, OR

    Example:
        >>> repo = LexicalSearchRepository(db)
        >>> results = repo.search('"weekly review" -draft', limit=10)
        >>> for r in results:
        ...     print(f"{r.title}: {r.score:.3f}")
    """

    def __init__(self, db: Database, snippet_tokens: int = 30):
        """Initialize with database connection.

        Args:
            db: Database instance to use for operations.
            snippet_tokens: Maximum tokens in generated snippets.
        """
        self.db = db
        self.snippet_tokens = snippet_tokens

    def search(
        self,
        query: str,
        limit: int = 10,
        filters: SearchFilters | None = None,
    ) -> list[SearchResult]:
        """Perform BM25 full-text search over active documents.

        Args:
            query: Search query string.
            limit: Maximum number of results to return.
            filters: Optional context/area/project filters.

        Returns:
            SearchResult list with source=SearchSource.FTS, sorted by
            relevance (highest first), ties by ascending document id.
        """
        fts_query = self._prepare_fts_query(query)
        if fts_query is None or limit <= 0:
            return []

        clause, params = build_filter_clause(filters)
        sql = f"""
            SELECT
                d.id,
                d.title,
                d.content,
                bm25(documents_fts) AS fts_rank,
                snippet(documents_fts, -1, '', '', '...', ?) AS snippet
            FROM documents_fts
            JOIN documents d ON d.id = documents_fts.rowid
            WHERE documents_fts MATCH ? AND d.is_active = 1 {clause}
            ORDER BY fts_rank ASC, d.id ASC
            LIMIT ?
        """
        cursor = self.db.execute(sql, (self.snippet_tokens, fts_query, *params, limit))
        rows = cursor.fetchall()
        if not rows:
            return []

        # FTS5 bm25() is negative; larger magnitude means a better match
        best = max(abs(row["fts_rank"] or 0.0) for row in rows)

        results = []
        for row in rows:
            raw_score = abs(row["fts_rank"] or 0.0)
            score = raw_score / best if best > 0 else 1.0
            results.append(
                SearchResult(
                    document_id=row["id"],
                    title=row["title"],
                    score=score,
                    source=SearchSource.FTS,
                    snippet=row["snippet"] or None,
                    content=row["content"],
                )
            )

        logger.debug(f"FTS: {len(results)} candidates for {fts_query!r}")
        return results

    @staticmethod
    def _prepare_fts_query(query: str) -> str | None:
        """Translate a web-search style query into an FTS5 expression.

        Bare words and "quoted phrases" are required (implicit AND), ``OR``
        between two terms makes them alternatives and ``-term`` excludes.
        Every term is quoted so FTS5 operators and punctuation in user input
        are never interpreted.

        Returns:
            FTS5 MATCH expression, or None if the query has no positive term.
        """
        positive: list[str] = []
        negative: list[str] = []
        pending_or = False

        for negated, phrase, word in _QUERY_TOKEN.findall(query or ""):
            if word == "OR":
                pending_or = bool(positive)
                continue

            if phrase:
                text, excluded = phrase.strip(), bool(negated)
            elif word.startswith("-") and len(word) > 1:
                text, excluded = word[1:], True
            else:
                text, excluded = word, False

            if not text:
                continue
            term = '"' + text.replace('"', '""') + '"'

            if excluded:
                negative.append(term)
            elif pending_or:
                positive.append(f"OR {term}")
            else:
                positive.append(term)
            pending_or = False

        if not positive:
            return None

        expression = " ".join(positive)
        if negative:
            expression = f"({expression})" + "".join(f" NOT {term}" for term in negative)
        return expression


class VectorSearchRepository(SearchRepository[list[float]]):
    """Cosine similarity search over document embeddings.

    Embeddings are packed float32 blobs on the documents table. Candidate
    vectors are loaded for active documents matching the filters and scored
    with numpy; vectors whose dimension differs from the query are skipped.

    Example:
        >>> repo = VectorSearchRepository(db)
        >>> results = repo.search(query_vector, limit=10)
    """

    def __init__(self, db: Database):
        self.db = db

    def search(
        self,
        query: list[float],
        limit: int = 10,
        filters: SearchFilters | None = None,
    ) -> list[SearchResult]:
        """Rank embedded documents by cosine similarity to ``query``.

        Returns:
            SearchResult list with source=SearchSource.VECTOR, sorted by
            similarity (highest first), ties by ascending document id.
        """
        if not query or limit <= 0:
            return []

        query_vec = np.asarray(query, dtype=np.float32)
        query_norm = float(np.linalg.norm(query_vec))
        if query_norm == 0.0:
            return []

        clause, params = build_filter_clause(filters)
        cursor = self.db.execute(
            f"""
            SELECT d.id, d.title, d.content, d.embedding
            FROM documents d
            WHERE d.is_active = 1 AND d.embedding IS NOT NULL {clause}
            """,
            tuple(params),
        )

        ids: list[int] = []
        rows_by_id = {}
        vectors = []
        expected_bytes = query_vec.size * 4
        for row in cursor.fetchall():
            if len(row["embedding"]) != expected_bytes:
                continue
            ids.append(row["id"])
            rows_by_id[row["id"]] = row
            vectors.append(np.frombuffer(row["embedding"], dtype=np.float32))

        if not vectors:
            return []

        matrix = np.vstack(vectors)
        norms = np.linalg.norm(matrix, axis=1)
        norms[norms == 0] = np.inf
        similarities = (matrix @ query_vec) / (norms * query_norm)

        ranked = sorted(zip(ids, similarities.tolist()), key=lambda item: (-item[1], item[0]))
        results = [
            SearchResult(
                document_id=doc_id,
                title=rows_by_id[doc_id]["title"],
                score=float(score),
                source=SearchSource.VECTOR,
                content=rows_by_id[doc_id]["content"],
            )
            for doc_id, score in ranked[:limit]
        ]

        logger.debug(f"Vector: {len(results)} candidates from {len(ids)} embedded documents")
        return results
