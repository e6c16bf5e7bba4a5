"""
Tests for the FTS5 keyword engine.

SAFETY NOTE: All tests use the `db` fixture which creates the database
in a tempfile.mkdtemp() directory that is removed after the test.
"""

import sqlite3

import pytest
from unittest.mock import MagicMock

from knowledge_assistant.core.exceptions import DatabaseError
from knowledge_assistant.search.keyword_engine import KeywordEngine


@pytest.fixture
def engine(knowledge_repo, search_config) -> KeywordEngine:
    knowledge_repo.insert(
        title="Resetting your password", type="document", created_by=1, company_id=1,
        content="Open account settings and choose reset password."
    )
    knowledge_repo.insert(
        title="Invoices", type="document", created_by=1, company_id=1,
        description="Billing help", content="Download invoices from the billing page."
    )
    knowledge_repo.insert(
        title="Invoices", type="document", created_by=1, company_id=2,
        content="Another tenant's invoice guide."
    )
    return KeywordEngine(knowledge_repo, search_config)


class TestKeywordEngine:
    """Tests for KeywordEngine.search."""

    def test_finds_matching_items(self, engine):
        outcome = engine.search("password", limit=5)

        assert outcome.ok
        assert [r.title for r in outcome.results] == ["Resetting your password"]

    def test_results_carry_fixed_score(self, engine):
        outcome = engine.search("invoices", limit=5)

        assert len(outcome.results) == 2
        assert all(r.score == 0.8 for r in outcome.results)
        assert all(r.source == "keyword" for r in outcome.results)

    def test_company_scope(self, engine):
        outcome = engine.search("invoices", limit=5, company_id=1)

        assert len(outcome.results) == 1
        assert outcome.results[0].description == "Billing help"

    def test_limit(self, engine):
        assert len(engine.search("invoices", limit=1).results) == 1

    def test_no_match(self, engine):
        outcome = engine.search("kubernetes", limit=5)

        assert outcome.ok
        assert outcome.results == []

    def test_query_without_terms(self, engine):
        """Test that punctuation-only queries do not hit the database."""
        outcome = engine.search("?!*", limit=5)

        assert outcome.ok
        assert outcome.results == []

    def test_syntax_characters_do_not_raise(self, engine):
        outcome = engine.search('reset "password AND (', limit=5)

        assert outcome.ok

    def test_configured_score(self, knowledge_repo, search_config):
        knowledge_repo.insert(title="Exports", type="document", created_by=1, content="csv export")
        search_config.keyword_score = 0.5
        engine = KeywordEngine(knowledge_repo, search_config)

        assert engine.search("export", limit=5).results[0].score == 0.5


class TestKeywordEngineErrors:

    @pytest.mark.parametrize("error", [
        sqlite3.OperationalError("database is locked"),
        DatabaseError("connection failed"),
    ])
    def test_storage_error_reported(self, search_config, error):
        repository = MagicMock()
        repository.keyword_search.side_effect = error
        engine = KeywordEngine(repository, search_config)

        outcome = engine.search("invoices", limit=5)

        assert outcome.results == []
        assert not outcome.ok
        assert "keyword search failed" in outcome.error
