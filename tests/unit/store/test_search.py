"""Tests for lexical and vector candidate retrieval."""

import pytest

from gtdindex.core.types import SearchFilters, SearchSource
from gtdindex.store.repositories import DocumentRepository
from gtdindex.store.search import LexicalSearchRepository, VectorSearchRepository
from tests.fakes import make_draft


@pytest.fixture
def corpus(document_repo: DocumentRepository) -> dict[str, int]:
    drafts = {
        "taxes": make_draft(
            source_id="t",
            title="File taxes",
            content="Collect receipts for the tax return and file taxes online",
            contexts=["@computer"],
            area="finance",
        ),
        "garden": make_draft(
            source_id="g",
            title="Garden",
            content="Plant tomatoes and water the garden",
            contexts=["@home"],
        ),
        "receipts": make_draft(
            source_id="r",
            title="Scan receipts",
            content="Scan receipts from the shoebox",
            contexts=["@home", "@computer"],
            project="paperless",
        ),
    }
    return {key: document_repo.upsert(draft)[0].id for key, draft in drafts.items()}


class TestPrepareFtsQuery:
    """Tests for query translation."""

    @pytest.mark.parametrize(
        "query,expected",
        [
            ("taxes", '"taxes"'),
            ("file taxes", '"file" "taxes"'),
            ('"tax return" online', '"tax return" "online"'),
            ("taxes -garden", '("taxes") NOT "garden"'),
            ("taxes OR garden", '"taxes" OR "garden"'),
            ('say "hi', '"say" """hi"'),
            ("-garden", None),
            ("   ", None),
            ("OR", None),
        ],
    )
    def test_translation(self, query, expected):
        assert LexicalSearchRepository._prepare_fts_query(query) == expected


class TestLexicalSearch:
    """Tests for LexicalSearchRepository.search."""

    def test_best_hit_scores_one(self, lexical_repo: LexicalSearchRepository, corpus):
        results = lexical_repo.search("receipts")

        assert {r.document_id for r in results} == {corpus["taxes"], corpus["receipts"]}
        assert results[0].score == pytest.approx(1.0)
        assert all(0.0 < r.score <= 1.0 for r in results)
        assert all(r.source == SearchSource.FTS for r in results)

    def test_snippet_is_plain_text(self, lexical_repo: LexicalSearchRepository, corpus):
        [result] = lexical_repo.search("tomatoes")

        assert result.document_id == corpus["garden"]
        assert "tomatoes" in result.snippet
        assert "<" not in result.snippet

    def test_stemming(self, lexical_repo: LexicalSearchRepository, corpus):
        assert [r.document_id for r in lexical_repo.search("watering")] == [corpus["garden"]]

    def test_exclusion(self, lexical_repo: LexicalSearchRepository, corpus):
        results = lexical_repo.search("receipts -shoebox")
        assert [r.document_id for r in results] == [corpus["taxes"]]

    def test_filters(self, lexical_repo: LexicalSearchRepository, corpus):
        by_context = lexical_repo.search("receipts", filters=SearchFilters(contexts=["@home"]))
        by_area = lexical_repo.search("receipts", filters=SearchFilters(area="finance"))
        by_project = lexical_repo.search("receipts", filters=SearchFilters(project="nope"))

        assert [r.document_id for r in by_context] == [corpus["receipts"]]
        assert [r.document_id for r in by_area] == [corpus["taxes"]]
        assert by_project == []

    def test_inactive_documents_hidden(self, lexical_repo, document_repo, corpus):
        document_repo.soft_delete(corpus["garden"])
        assert lexical_repo.search("garden") == []

    def test_punctuation_is_safe(self, lexical_repo: LexicalSearchRepository, corpus):
        assert lexical_repo.search('taxes" AND (NEAR') == []

    def test_limit(self, lexical_repo: LexicalSearchRepository, corpus):
        assert len(lexical_repo.search("receipts", limit=1)) == 1
        assert lexical_repo.search("receipts", limit=0) == []


class TestVectorSearch:
    """Tests for VectorSearchRepository.search."""

    def test_cosine_ranking(self, vector_repo: VectorSearchRepository, document_repo, corpus):
        document_repo.set_embedding(corpus["taxes"], [1.0, 0.0, 0.0])
        document_repo.set_embedding(corpus["garden"], [0.0, 1.0, 0.0])
        document_repo.set_embedding(corpus["receipts"], [1.0, 1.0, 0.0])

        results = vector_repo.search([1.0, 0.0, 0.0])

        assert [r.document_id for r in results] == [
            corpus["taxes"],
            corpus["receipts"],
            corpus["garden"],
        ]
        assert results[0].score == pytest.approx(1.0)
        assert results[1].score == pytest.approx(0.70710678)
        assert results[2].score == pytest.approx(0.0)
        assert all(r.source == SearchSource.VECTOR for r in results)

    def test_ties_break_on_id(self, vector_repo, document_repo, corpus):
        for doc_id in corpus.values():
            document_repo.set_embedding(doc_id, [0.5, 0.5])

        results = vector_repo.search([1.0, 1.0])
        assert [r.document_id for r in results] == sorted(corpus.values())

    def test_unembedded_and_wrong_dimension_skipped(self, vector_repo, document_repo, corpus):
        document_repo.set_embedding(corpus["taxes"], [1.0, 0.0])
        document_repo.set_embedding(corpus["garden"], [1.0, 0.0, 0.0])

        assert [r.document_id for r in vector_repo.search([1.0, 0.0])] == [corpus["taxes"]]

    def test_filters_apply(self, vector_repo, document_repo, corpus):
        document_repo.set_embedding(corpus["taxes"], [1.0, 0.0])
        document_repo.set_embedding(corpus["receipts"], [1.0, 0.0])

        results = vector_repo.search([1.0, 0.0], filters=SearchFilters(contexts=["@home"]))
        assert [r.document_id for r in results] == [corpus["receipts"]]

    def test_degenerate_queries(self, vector_repo, corpus):
        assert vector_repo.search([]) == []
        assert vector_repo.search([0.0, 0.0]) == []
        assert vector_repo.search([1.0, 0.0]) == []
