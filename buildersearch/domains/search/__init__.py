"""
Search Domain - Keyword search and ranking over schema-less records.

This domain handles:
- Query tokenization and fuzzy subsequence matching
- Structured filtering (equality, membership, ranges)
- Weighted relevance scoring and stable sorting
- Exact-parameter response caching with running statistics
- Facets and an advisory inverted index
"""

from .cache import QueryCache
from .contracts import RecordStore, SearchEngine
from .engine import SearchRankingEngine
from .facets import generate_facets
from .filters import apply_filters
from .index import build_inverted_index
from .models import (
    AdvancedSearchParams,
    AdvancedSearchResponse,
    EngineStats,
    FacetValue,
    Record,
    SearchParams,
    SearchResponse,
    SearchStats,
    SortBy,
)
from .ranking import rank, sort_results
from .scoring import matched_terms, score_relevance
from .text import fuzzy_match, tokenize

__all__ = [
    "SearchEngine",
    "RecordStore",
    "SearchRankingEngine",
    "QueryCache",
    "Record",
    "SortBy",
    "SearchParams",
    "AdvancedSearchParams",
    "SearchResponse",
    "AdvancedSearchResponse",
    "SearchStats",
    "EngineStats",
    "FacetValue",
    "tokenize",
    "fuzzy_match",
    "apply_filters",
    "score_relevance",
    "matched_terms",
    "sort_results",
    "rank",
    "generate_facets",
    "build_inverted_index",
]
