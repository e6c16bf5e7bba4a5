"""
Search module for knowledge base retrieval.

Provides embedding generation, cosine similarity, FTS5 keyword search,
and the hybrid engine that merges semantic and keyword results.
"""

from .models import SearchMode, SearchOptions, SearchResult, SearchStats, PassOutcome
from .similarity import cosine_similarity
from .query_parser import QueryParser
from .embedding_service import EmbeddingService
from .keyword_engine import KeywordEngine
from .semantic_engine import SemanticEngine
from .hybrid_engine import HybridEngine

__all__ = [
    "SearchMode",
    "SearchOptions",
    "SearchResult",
    "SearchStats",
    "PassOutcome",
    "cosine_similarity",
    "QueryParser",
    "EmbeddingService",
    "KeywordEngine",
    "SemanticEngine",
    "HybridEngine"
]
