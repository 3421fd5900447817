"""Semantic, full-text and hybrid retrieval."""

from .engine import RetrievalEngine, ScoredResult, SearchMode, fulltext_score, merge_results
from .highlight import highlight_terms
from .services import SearchService

__all__ = [
    "RetrievalEngine",
    "ScoredResult",
    "SearchMode",
    "SearchService",
    "fulltext_score",
    "highlight_terms",
    "merge_results",
]
