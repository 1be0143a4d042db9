"""Tests for SearchService."""

import pytest

from gtdindex.core.exceptions import DocumentNotFoundError
from gtdindex.services import SearchService
from tests.fakes import make_draft


@pytest.fixture
def service(lexical_repo, vector_repo, document_repo, history_repo, attachment_repo) -> SearchService:
    return SearchService(lexical_repo, vector_repo, document_repo, history_repo, attachment_repo)


@pytest.fixture
def documents(document_repo) -> dict[str, int]:
    drafts = {
        "launch": make_draft(source_id="l", title="Plan launch", contexts=["@computer", "@office"], project="apollo"),
        "slides": make_draft(source_id="s", title="Launch slides", contexts=["@computer"], project="apollo"),
        "call": make_draft(source_id="c", title="Call printer", contexts=["@phone", "@office"]),
        "garden": make_draft(source_id="g", title="Garden", contexts=["@home"]),
    }
    return {key: document_repo.upsert(draft)[0].id for key, draft in drafts.items()}


class TestSearch:
    """Tests for search and history recording."""

    @pytest.mark.asyncio
    async def test_search_is_recorded(self, service, documents, history_repo):
        results = await service.search("launch", contexts=["@computer"])

        assert {r.document_id for r in results} == {documents["launch"], documents["slides"]}
        assert history_repo.count_since(60) == 1
        assert history_repo.recent_queries("lau") == ["launch"]

    @pytest.mark.asyncio
    async def test_blank_query_not_recorded(self, service, documents, history_repo):
        assert await service.search("   ") == []
        assert history_repo.count_since(60) == 0


class TestSuggestions:
    """Tests for search-as-you-type suggestions."""

    @pytest.mark.asyncio
    async def test_recent_then_titles_then_contexts(self, service, documents):
        await service.search("launch party")

        suggestions = service.suggestions("la")

        assert [(s.type, s.value) for s in suggestions] == [
            ("recent", "launch party"),
            ("document", "Launch slides"),
            ("document", "Plan launch"),
        ]

    def test_context_suggestions(self, service, documents):
        suggestions = service.suggestions("@o")

        assert [(s.type, s.value) for s in suggestions] == [("context", "@office")]

    def test_blank_prefix(self, service, documents):
        assert service.suggestions("  ") == []


class TestRelatedDocuments:
    """Tests for related documents."""

    def test_relevance_from_contexts_and_project(self, service, documents):
        related = service.related_documents(documents["launch"])

        assert [(r.document_id, r.relevance) for r in related] == [
            (documents["slides"], 3),
            (documents["call"], 1),
        ]

    def test_unrelated_documents_excluded(self, service, documents):
        assert service.related_documents(documents["garden"]) == []

    def test_limit(self, service, documents):
        assert len(service.related_documents(documents["launch"], limit=1)) == 1

    def test_missing_document(self, service, documents):
        with pytest.raises(DocumentNotFoundError):
            service.related_documents(9999)
