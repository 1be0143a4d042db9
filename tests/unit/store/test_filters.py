"""Tests for shared SQL filter fragments."""

from gtdindex.core.types import SearchFilters
from gtdindex.store.filters import build_filter_clause


class TestBuildFilterClause:
    """Tests for build_filter_clause."""

    def test_no_filters(self):
        assert build_filter_clause(None) == ("", [])
        assert build_filter_clause(SearchFilters()) == ("", [])

    def test_all_filters(self):
        clause, params = build_filter_clause(
            SearchFilters(contexts=["@home", "@phone"], area="home", project="move"), alias="x"
        )

        assert clause.startswith(" AND ")
        assert "x.id" in clause
        assert "dc.context IN (?, ?)" in clause
        assert "x.area = ?" in clause
        assert "x.project = ?" in clause
        assert params == ["@home", "@phone", "home", "move"]
