"""Hybrid lexical and semantic search for gtdindex."""

from .fusion import weighted_fusion
from .pipeline import HybridSearchPipeline, SearchPipelineConfig
from .text import fallback_snippet, highlight_terms, query_terms

__all__ = [
    "HybridSearchPipeline",
    "SearchPipelineConfig",
    "fallback_snippet",
    "highlight_terms",
    "query_terms",
    "weighted_fusion",
]
