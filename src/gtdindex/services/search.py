"""Search service for document retrieval operations."""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from ..core.config import SearchConfig
from ..core.types import RankedResult, RelatedDocument, SearchFilters, SearchType, Suggestion
from ..search.pipeline import HybridSearchPipeline, SearchPipelineConfig

if TYPE_CHECKING:
    from ..llm.embeddings import EmbeddingGenerator
    from ..store.repositories import (
        AttachmentRepository,
        DocumentRepository,
        SearchHistoryRepository,
    )
    from ..store.search import LexicalSearchRepository, VectorSearchRepository
    from .container import ServiceContainer

SUGGESTION_LIMIT = 5
TOP_CONTEXTS = 10


class SearchService:
    """Service for document search operations.

    This service provides a unified interface for:
    - Hybrid search (FTS5 BM25 blended with vector similarity)
    - Search-as-you-type suggestions
    - Related documents by shared contexts and project

    Example:

        async with ServiceContainer(config) as services:
            results = await services.search.search(
                "quarterly taxes",
                contexts=["@computer"],
                area="finance",
                limit=10,
            )
            suggestions = services.search.suggestions("tax")
            related = services.search.related_documents(results[0].document_id)
    """

    def __init__(
        self,
        lexical_repo: "LexicalSearchRepository",
        vector_repo: "VectorSearchRepository",
        document_repo: "DocumentRepository",
        history_repo: "SearchHistoryRepository",
        attachment_repo: "AttachmentRepository | None" = None,
        embedding_generator: "EmbeddingGenerator | None" = None,
        config: SearchConfig | None = None,
    ):
        """Initialize SearchService.

        Args:
            lexical_repo: Full-text candidate retrieval.
            vector_repo: Vector candidate retrieval.
            document_repo: Document lookups for enrichment and suggestions.
            history_repo: Search history storage.
            attachment_repo: Supplies attachment counts.
            embedding_generator: Query embedder (None means lexical only).
            config: Search defaults.
        """
        config = config or SearchConfig()
        self._document_repo = document_repo
        self._history_repo = history_repo
        self._pipeline = HybridSearchPipeline(
            lexical_repo,
            vector_repo,
            document_repo,
            attachment_repo=attachment_repo,
            embedding_generator=embedding_generator,
            config=SearchPipelineConfig(
                default_limit=config.default_limit,
                vector_weight=config.vector_weight,
                snippet_fallback_chars=config.snippet_fallback_chars,
            ),
        )

    @classmethod
    def from_container(cls, container: "ServiceContainer") -> "SearchService":
        """Build the service from a container's shared resources."""
        return cls(
            lexical_repo=container.lexical_repo,
            vector_repo=container.vector_repo,
            document_repo=container.document_repo,
            history_repo=container.history_repo,
            attachment_repo=container.attachment_repo,
            embedding_generator=container.get_embedding_generator(),
            config=container.config.search,
        )

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
        """Run a search and record it in the search history.

        See `HybridSearchPipeline.search` for arguments and errors.
        """
        results = await self._pipeline.search(
            query,
            search_type=search_type,
            contexts=contexts,
            area=area,
            project=project,
            limit=limit,
            vector_weight=vector_weight,
        )

        if query and query.strip():
            filters = SearchFilters(contexts=contexts or None, area=area, project=project)
            self._history_repo.record(query.strip(), filters.as_dict(), len(results))
        return results

    def suggestions(self, prefix: str) -> list[Suggestion]:
        """Suggestions for a partially typed query.

        Recent searches come first, then matching titles, then matching
        contexts from the most common ones.

        Args:
            prefix: What the user has typed so far.

        Returns:
            Suggestion list (empty for a blank prefix).
        """
        prefix = prefix.strip()
        if not prefix:
            return []

        suggestions = [
            Suggestion(type="recent", value=query)
            for query in self._history_repo.recent_queries(prefix, SUGGESTION_LIMIT)
        ]
        suggestions.extend(
            Suggestion(type="document", value=title)
            for title in self._document_repo.titles_matching(prefix, SUGGESTION_LIMIT)
        )
        lowered = prefix.lower()
        suggestions.extend(
            Suggestion(type="context", value=context)
            for context, _count in self._document_repo.top_contexts(TOP_CONTEXTS)
            if lowered in context.lower()
        )

        logger.debug(f"Suggestions for {prefix!r}: {len(suggestions)}")
        return suggestions

    def related_documents(self, document_id: int, limit: int = 5) -> list[RelatedDocument]:
        """Documents related by shared contexts (+1 each) and project (+2).

        Raises:
            DocumentNotFoundError: If the document does not exist.
        """
        return [
            RelatedDocument(document_id=document.id, title=document.title, relevance=relevance)
            for document, relevance in self._document_repo.related(document_id, limit)
        ]
