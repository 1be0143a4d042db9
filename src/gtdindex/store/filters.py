"""SQL fragments for the GTD filters shared by listing and search queries."""

from ..core.types import SearchFilters


def build_filter_clause(filters: SearchFilters | None, alias: str = "d") -> tuple[str, list]:
    """Build an AND-joined WHERE fragment for the given filters.

    Context filtering is "shares at least one context" and goes through the
    document_contexts inverted index. Area and project are exact matches.

    Args:
        filters: Filters to apply, or None.
        alias: Alias of the documents table in the enclosing query.

    Returns:
        Tuple of (sql fragment starting with " AND" or empty, parameters).
    """
    if filters is None:
        return "", []

    clauses: list[str] = []
    params: list = []

    if filters.contexts:
        placeholders = ", ".join("?" for _ in filters.contexts)
        clauses.append(
            f"EXISTS (SELECT 1 FROM document_contexts dc "
            f"WHERE dc.document_id = {alias}.id AND dc.context IN ({placeholders}))"
        )
        params.extend(filters.contexts)
    if filters.area:
        clauses.append(f"{alias}.area = ?")
        params.append(filters.area)
    if filters.project:
        clauses.append(f"{alias}.project = ?")
        params.append(filters.project)

    if not clauses:
        return "", []
    return " AND " + " AND ".join(clauses), params
