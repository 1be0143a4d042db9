"""Hybrid search pipeline for gtdindex.

Combines two candidate sets into one ranked list:
- FTS5 BM25 full-text search (normalized so the best hit is 1.0)
- Vector semantic search (cosine similarity of document embeddings)

The sets are merged with a full outer join and blended with a linear weight
(`gtdindex.search.fusion.weighted_fusion`). Without an embedding generator,
or when query embedding fails, the pipeline degrades to lexical ranking.

Typical usage:

    from gtdindex.search.pipeline import HybridSearchPipeline
    from gtdindex.store.search import LexicalSearchRepository, VectorSearchRepository

    pipeline = HybridSearchPipeline(
        LexicalSearchRepository(db),
        VectorSearchRepository(db),
        DocumentRepository(db),
        embedding_generator=generator,
    )
    results = await pipeline.search("weekly review", contexts=["@computer"], limit=10)

See Also:
    - `gtdindex.search.fusion`: Score blending
    - `gtdindex.search.text`: Snippet fallback and highlighting
"""

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from loguru import logger

from ..core.exceptions import EmbeddingError, EmbeddingNotConfiguredError
from ..core.instrumentation import traced_request
from ..core.types import RankedResult, SearchFilters, SearchResult, SearchType
from ..store.repositories.attachments import AttachmentRepository
from ..store.repositories.documents import DocumentRepository
from ..store.search import LexicalSearchRepository, VectorSearchRepository
from .fusion import weighted_fusion
from .text import fallback_snippet, highlight_terms

if TYPE_CHECKING:
    from ..llm.embeddings import EmbeddingGenerator


@dataclass
class SearchPipelineConfig:
    """Configuration for the hybrid search pipeline.

    Attributes:
        default_limit: Result limit when the caller passes none (default: 50).
        vector_weight: Default weight of the vector score (default: 0.6).
        candidate_multiplier: Each candidate set holds limit * this (default: 2).
        snippet_fallback_chars: Snippet length when FTS gave none (default: 200).
    """

    default_limit: int = 50
    vector_weight: float = 0.6
    candidate_multiplier: int = 2
    snippet_fallback_chars: int = 200


class HybridSearchPipeline:
    """Orchestrates lexical and vector retrieval and blends their scores.

    Steps:
    1. Lexical candidates (active documents, filters, limit * 2)
    2. Vector candidates for the embedded query (same filters, limit * 2)
    3. Full outer merge, combined = w * vector + (1 - w) * text
    4. Sort by combined score, then ascending document id; truncate
    5. Attach document fields, attachment counts, snippet and highlight

    Example:
        >>> results = await pipeline.search("tax return", area="finance", limit=5)
        >>> for r in results:
        ...     print(f"{r.title}: {r.score:.3f} (text={r.text_score:.2f}, vec={r.vector_score:.2f})")
    """

    def __init__(
        self,
        lexical_repo: LexicalSearchRepository,
        vector_repo: VectorSearchRepository,
        document_repo: DocumentRepository,
        attachment_repo: AttachmentRepository | None = None,
        embedding_generator: "EmbeddingGenerator | None" = None,
        config: SearchPipelineConfig | None = None,
    ):
        """Initialize the pipeline.

        Args:
            lexical_repo: Full-text candidate retrieval.
            vector_repo: Vector candidate retrieval.
            document_repo: Used to enrich results with document fields.
            attachment_repo: Optional, supplies attachments_count.
            embedding_generator: Optional query embedder. None means
                lexical-only ranking.
            config: Optional SearchPipelineConfig (uses defaults if None).
        """
        self.lexical_repo = lexical_repo
        self.vector_repo = vector_repo
        self.document_repo = document_repo
        self.attachment_repo = attachment_repo
        self.embedding_generator = embedding_generator
        self.config = config or SearchPipelineConfig()

    async def search(
        self,
        query: str,
        *,
        search_type: SearchType | str = SearchType.HYBRID,
        contexts: list[str] | None = None,
        area: str | None = None,
        project: str | None = None,
        limit: int | None = None,
        vector_weight: float | None = None,
    ) -> list[RankedResult]:
        """Execute a search.

        Args:
            query: Search query string.
            search_type: "hybrid" (default), "text" or "vector".
            contexts: Match documents sharing at least one of these contexts.
            area: Exact area filter.
            project: Exact project filter.
            limit: Maximum results to return.
            vector_weight: Weight of the vector score in [0, 1].

        Returns:
            RankedResult list sorted by combined score.

        Raises:
            ValueError: If vector_weight is outside [0, 1].
            EmbeddingNotConfiguredError: If vector search is requested without
                an embedding generator.
            EmbeddingError: If vector search is requested and the query
                cannot be embedded.
        """
        search_type = SearchType(search_type)
        weight = self.config.vector_weight if vector_weight is None else vector_weight
        if not 0.0 <= weight <= 1.0:
            raise ValueError(f"vector_weight must be within [0, 1], got {weight}")
        limit = self.config.default_limit if limit is None else limit

        if search_type == SearchType.VECTOR and self.embedding_generator is None:
            raise EmbeddingNotConfiguredError(
                "Vector search requested but no embedding provider is configured"
            )

        if not query or not query.strip() or limit <= 0:
            return []

        filters = SearchFilters(contexts=contexts or None, area=area, project=project)
        candidate_limit = limit * self.config.candidate_multiplier
        start_time = time.perf_counter()

        with traced_request(
            "search",
            attributes={"search.type": search_type.value, "search.limit": limit},
        ):
            text_results: list[SearchResult] = []
            if search_type != SearchType.VECTOR:
                text_results = self.lexical_repo.search(query, candidate_limit, filters)

            vector_results: list[SearchResult] = []
            vector_used = False
            if search_type != SearchType.TEXT and self.embedding_generator is not None:
                try:
                    query_vector = await self.embedding_generator.embed_query(query)
                    vector_results = self.vector_repo.search(query_vector, candidate_limit, filters)
                    vector_used = True
                except EmbeddingError as e:
                    if search_type == SearchType.VECTOR:
                        raise
                    logger.warning(f"Query embedding failed, using lexical ranking only: {e}")

            if search_type == SearchType.TEXT or not vector_used:
                effective_weight = 0.0
            elif search_type == SearchType.VECTOR:
                effective_weight = 1.0
            else:
                effective_weight = weight

            ranked = weighted_fusion(text_results, vector_results, effective_weight)[:limit]
            self._enrich(ranked, query)

        elapsed = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"Search {search_type.value} {query[:50]!r}: {len(ranked)} results "
            f"(fts={len(text_results)}, vec={len(vector_results)}, w={effective_weight}) "
            f"in {elapsed:.1f}ms"
        )
        return ranked

    def _enrich(self, ranked: list[RankedResult], query: str) -> None:
        ids = [result.document_id for result in ranked]
        documents = self.document_repo.get_many(ids)
        attachment_counts = self.attachment_repo.count_by_document(ids) if self.attachment_repo else {}

        for result in ranked:
            document = documents.get(result.document_id)
            if document is not None:
                result.contexts = document.contexts
                result.project = document.project
                result.area = document.area
                result.metadata = document.metadata
                if not result.snippet:
                    result.snippet = fallback_snippet(
                        document.content, self.config.snippet_fallback_chars
                    )
            result.attachments_count = attachment_counts.get(result.document_id, 0)
            result.highlight = highlight_terms(result.snippet, query)
