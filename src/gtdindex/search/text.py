"""Snippet and highlight helpers for search results."""

import re

HIGHLIGHT_MIN_TERM_LENGTH = 3
_TERM = re.compile(r"[\w']+", re.UNICODE)


def query_terms(query: str, min_length: int = HIGHLIGHT_MIN_TERM_LENGTH) -> list[str]:
    """Distinct query words worth highlighting, longest first.

    Excluded terms (``-word``) and the ``OR`` operator are not highlighted.
    """
    terms: list[str] = []
    for raw in query.split():
        if raw.startswith("-") or raw == "OR":
            continue
        for word in _TERM.findall(raw):
            if len(word) >= min_length and word.lower() not in (t.lower() for t in terms):
                terms.append(word)
    return sorted(terms, key=len, reverse=True)


def highlight_terms(text: str, query: str) -> str:
    """Wrap occurrences of query terms in ``<mark>`` (case-insensitive)."""
    terms = query_terms(query)
    if not text or not terms:
        return text
    pattern = re.compile("(" + "|".join(re.escape(term) for term in terms) + ")", re.IGNORECASE)
    return pattern.sub(r"<mark>\1</mark>", text)


def fallback_snippet(content: str | None, max_chars: int = 200) -> str:
    """First ``max_chars`` characters of the content."""
    return (content or "")[:max_chars]
