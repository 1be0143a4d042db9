"""Weighted score fusion of lexical and vector candidate sets."""

from dataclasses import dataclass, field

from loguru import logger

from ..core.types import RankedResult, SearchResult, SearchSource


@dataclass
class _DocProvenance:
    """Internal tracking of where a document's scores came from."""

    doc: SearchResult
    text_score: float = 0.0
    vector_score: float = 0.0
    sources: set[str] = field(default_factory=set)


def weighted_fusion(
    text_results: list[SearchResult],
    vector_results: list[SearchResult],
    vector_weight: float,
) -> list[RankedResult]:
    """Merge two candidate sets with a full outer join on document id.

    combined = vector_weight * vector_score + (1 - vector_weight) * text_score

    A document found by only one method contributes 0 for the other score.
    The result is sorted by combined score descending, ties broken by
    ascending document id so output is deterministic.

    Args:
        text_results: Lexical candidates (scores in [0, 1]).
        vector_results: Vector candidates (cosine similarity).
        vector_weight: Weight of the vector score, in [0, 1].

    Returns:
        RankedResult list (without snippets) in final order.

    Raises:
        ValueError: If vector_weight is outside [0, 1].
    """
    if not 0.0 <= vector_weight <= 1.0:
        raise ValueError(f"vector_weight must be within [0, 1], got {vector_weight}")

    provenance: dict[int, _DocProvenance] = {}

    for result in [*text_results, *vector_results]:
        prov = provenance.setdefault(result.document_id, _DocProvenance(doc=result))
        if result.source == SearchSource.FTS:
            prov.sources.add("fts")
            prov.text_score = max(prov.text_score, result.score)
            # Lexical hits carry the snippet
            prov.doc = result
        else:
            prov.sources.add("vec")
            prov.vector_score = max(prov.vector_score, result.score)

    text_weight = 1.0 - vector_weight
    combined = {
        doc_id: vector_weight * prov.vector_score + text_weight * prov.text_score
        for doc_id, prov in provenance.items()
    }
    ordered = sorted(combined, key=lambda doc_id: (-combined[doc_id], doc_id))

    ranked = []
    for doc_id in ordered:
        prov = provenance[doc_id]
        ranked.append(
            RankedResult(
                document_id=doc_id,
                title=prov.doc.title,
                score=combined[doc_id],
                text_score=prov.text_score,
                vector_score=prov.vector_score,
                snippet=prov.doc.snippet or "",
                sources_count=len(prov.sources),
            )
        )
        logger.debug(
            f"Fusion: {prov.doc.title[:40]!r} | score={combined[doc_id]:.4f} | "
            f"sources={'+'.join(sorted(prov.sources))} | "
            f"text={prov.text_score:.3f} | vec={prov.vector_score:.3f}"
        )

    return ranked
