"""
Tests for the hybrid search engine module.

Tests the unified search interface in keyword, semantic and hybrid
modes, including result merging and degradation. Uses mocked passes.
"""

import pytest
from unittest.mock import MagicMock

from knowledge_assistant.core.exceptions import ValidationError
from knowledge_assistant.search.hybrid_engine import HybridEngine
from knowledge_assistant.search.models import (
    PassOutcome,
    SearchMode,
    SearchOptions,
    SearchResult,
)


def _result(item_id: str, score: float, source: str) -> SearchResult:
    return SearchResult(id=item_id, title=item_id, type="document", score=score, source=source)


@pytest.fixture
def keyword_engine() -> MagicMock:
    engine = MagicMock()
    engine.search.return_value = PassOutcome(results=[
        _result("B", 0.8, "keyword"),
        _result("C", 0.8, "keyword"),
    ])
    return engine


@pytest.fixture
def semantic_engine() -> MagicMock:
    engine = MagicMock()
    engine.search.return_value = PassOutcome(results=[
        _result("A", 0.95, "semantic"),
        _result("B", 0.92, "semantic"),
    ])
    return engine


@pytest.fixture
def engine(keyword_engine, semantic_engine, search_config) -> HybridEngine:
    return HybridEngine(keyword_engine, semantic_engine, search_config)


class TestHybridMode:
    """Tests for merging in hybrid mode."""

    def test_merge_dedupes_keeping_semantic(self, engine):
        """Test that a shared hit keeps its semantic score and position."""
        results = engine.search("billing", SearchOptions(limit=4, mode="hybrid"))

        assert [r.id for r in results] == ["A", "B", "C"]
        assert results[1].score == 0.92
        assert results[1].source == "semantic"

    def test_each_pass_gets_half_the_limit(self, engine, keyword_engine, semantic_engine):
        engine.search("billing", SearchOptions(limit=5, threshold=0.6, mode="hybrid", company_id=3))

        semantic_engine.search.assert_called_once_with("billing", limit=3, threshold=0.6, company_id=3)
        keyword_engine.search.assert_called_once_with("billing", limit=3, company_id=3)

    def test_truncated_to_limit(self, engine):
        results = engine.search("billing", SearchOptions(limit=2, mode="hybrid"))

        assert [r.id for r in results] == ["A", "B"]

    def test_stats(self, engine):
        results, stats = engine.search_with_stats("billing", SearchOptions(limit=4))

        assert stats.mode is SearchMode.HYBRID
        assert stats.semantic_count == 2
        assert stats.keyword_count == 2
        assert stats.overlap_count == 1
        assert stats.total_results == len(results) == 3
        assert stats.errors == []
        assert stats.execution_time_ms >= 0

    def test_semantic_failure_degrades_to_keyword(self, engine, semantic_engine):
        semantic_engine.search.return_value = PassOutcome(error="query embedding unavailable")

        results, stats = engine.search_with_stats("billing", SearchOptions(limit=4))

        assert [r.id for r in results] == ["B", "C"]
        assert stats.errors == ["Semantic search error: query embedding unavailable"]

    def test_both_passes_fail(self, engine, semantic_engine, keyword_engine):
        semantic_engine.search.return_value = PassOutcome(error="down")
        keyword_engine.search.return_value = PassOutcome(error="locked")

        results, stats = engine.search_with_stats("billing", SearchOptions(limit=4))

        assert results == []
        assert len(stats.errors) == 2


class TestSingleModes:

    def test_semantic_only(self, engine, keyword_engine, semantic_engine):
        results = engine.search("billing", SearchOptions(limit=4, mode="semantic", threshold=0.9))

        assert [r.id for r in results] == ["A", "B"]
        semantic_engine.search.assert_called_once_with("billing", limit=4, threshold=0.9, company_id=None)
        keyword_engine.search.assert_not_called()

    def test_keyword_only(self, engine, keyword_engine, semantic_engine):
        results = engine.search("billing", SearchOptions(limit=4, mode="keyword"))

        assert [r.id for r in results] == ["B", "C"]
        keyword_engine.search.assert_called_once_with("billing", limit=4, company_id=None)
        semantic_engine.search.assert_not_called()


class TestQueryValidation:

    @pytest.mark.parametrize("query", ["", "   ", None])
    def test_empty_query_rejected(self, engine, keyword_engine, semantic_engine, query):
        """Test that no pass runs for an empty query."""
        with pytest.raises(ValidationError) as exc_info:
            engine.search(query)

        assert exc_info.value.field == "query"
        keyword_engine.search.assert_not_called()
        semantic_engine.search.assert_not_called()

    def test_query_is_stripped(self, engine, keyword_engine):
        engine.search("  billing  ", SearchOptions(mode="keyword"))

        assert keyword_engine.search.call_args.args[0] == "billing"


class TestDefaults:

    def test_default_options_from_config(self, engine, semantic_engine, keyword_engine):
        engine.search("billing")

        semantic_engine.search.assert_called_once_with("billing", limit=3, threshold=0.7, company_id=None)

    def test_available_modes(self, engine):
        assert engine.get_available_modes() == ["semantic", "keyword", "hybrid"]
