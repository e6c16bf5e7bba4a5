"""
Hybrid search engine combining keyword and semantic search.

Provides one search interface with three modes. Hybrid mode runs both
passes with half the requested limit (rounded up), lists semantic hits
first, drops keyword hits already returned by the semantic pass, and
truncates to the limit. A failing pass contributes no results and is
recorded in the returned statistics.
"""

import math
import time
from typing import List, Tuple

from ..core import get_config, get_logger, SearchConfig, ValidationError
from .keyword_engine import KeywordEngine
from .models import PassOutcome, SearchMode, SearchOptions, SearchResult, SearchStats
from .semantic_engine import SemanticEngine

logger = get_logger(__name__)


class HybridEngine:
    """
    Unified search engine supporting keyword, semantic, and hybrid modes.

    Only input validation errors are raised. Provider and storage
    failures degrade to fewer results.
    """

    def __init__(
        self,
        keyword_engine: KeywordEngine,
        semantic_engine: SemanticEngine,
        config: SearchConfig = None
    ):
        """
        Initialize the hybrid search engine.

        Args:
            keyword_engine: Full-text pass.
            semantic_engine: Embedding similarity pass.
            config: Search defaults. Defaults to the global config.
        """
        self.keyword_engine = keyword_engine
        self.semantic_engine = semantic_engine
        self.config = config or get_config().search

    def default_options(self) -> SearchOptions:
        """Search options populated from configuration."""
        return SearchOptions(
            limit=self.config.default_limit,
            threshold=self.config.default_threshold,
            mode=self.config.default_mode
        )

    def search(self, query: str, options: SearchOptions = None) -> List[SearchResult]:
        """
        Search the knowledge base.

        Args:
            query: Search query text.
            options: Limit, threshold, mode and tenant scope.

        Returns:
            At most options.limit results.

        Raises:
            ValidationError: If the query is empty.
        """
        results, _ = self.search_with_stats(query, options)
        return results

    def search_with_stats(
        self,
        query: str,
        options: SearchOptions = None
    ) -> Tuple[List[SearchResult], SearchStats]:
        """
        Search the knowledge base and report how each pass went.

        Args:
            query: Search query text.
            options: Limit, threshold, mode and tenant scope.

        Returns:
            Tuple of (results, SearchStats).

        Raises:
            ValidationError: If the query is empty.
        """
        if not query or not query.strip():
            raise ValidationError("Search query must not be empty", field="query")

        options = options or self.default_options()
        query = query.strip()

        start_time = time.time()
        stats = SearchStats(query=query, mode=options.mode)

        if options.mode == SearchMode.SEMANTIC:
            outcome = self._run_semantic(query, options.limit, options, stats)
            results = outcome.results

        elif options.mode == SearchMode.KEYWORD:
            outcome = self._run_keyword(query, options.limit, options, stats)
            results = outcome.results

        else:
            results = self._search_hybrid(query, options, stats)

        stats.total_results = len(results)
        stats.execution_time_ms = round((time.time() - start_time) * 1000, 2)

        logger.debug(
            f"Search ({options.mode.value}) '{query}': {len(results)} results "
            f"in {stats.execution_time_ms:.1f}ms"
        )

        return results, stats

    def _run_semantic(
        self,
        query: str,
        limit: int,
        options: SearchOptions,
        stats: SearchStats
    ) -> PassOutcome:
        outcome = self.semantic_engine.search(
            query,
            limit=limit,
            threshold=options.threshold,
            company_id=options.company_id
        )
        stats.semantic_count = len(outcome.results)
        if not outcome.ok:
            stats.errors.append(f"Semantic search error: {outcome.error}")
        return outcome

    def _run_keyword(
        self,
        query: str,
        limit: int,
        options: SearchOptions,
        stats: SearchStats
    ) -> PassOutcome:
        outcome = self.keyword_engine.search(
            query,
            limit=limit,
            company_id=options.company_id
        )
        stats.keyword_count = len(outcome.results)
        if not outcome.ok:
            stats.errors.append(f"Keyword search error: {outcome.error}")
        return outcome

    def _search_hybrid(
        self,
        query: str,
        options: SearchOptions,
        stats: SearchStats
    ) -> List[SearchResult]:
        """Run both passes and merge them, semantic hits first."""
        pass_limit = math.ceil(options.limit / 2)

        semantic = self._run_semantic(query, pass_limit, options, stats)
        keyword = self._run_keyword(query, pass_limit, options, stats)

        merged = []
        seen = set()

        for result in semantic.results + keyword.results:
            if result.id in seen:
                stats.overlap_count += 1
                continue
            seen.add(result.id)
            merged.append(result)

        return merged[:options.limit]

    def get_available_modes(self) -> List[str]:
        """
        Get list of available search modes.

        Returns:
            List of mode names.
        """
        return [mode.value for mode in SearchMode]
