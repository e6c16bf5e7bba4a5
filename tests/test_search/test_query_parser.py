"""
Tests for the FTS5 query parser.

Tests query sanitization, operator handling, and term extraction.
"""

from knowledge_assistant.search.query_parser import QueryParser


class TestQueryParserBasics:
    """Tests for plain term handling."""

    def test_simple_words(self):
        """Test parsing simple words."""
        parser = QueryParser()

        result = parser.parse("reset password")

        assert result == "reset password"

    def test_removes_special_characters(self):
        """Test that FTS5 syntax characters are removed."""
        parser = QueryParser()

        result = parser.parse("title:secret* (billing) -refund +x ^y")

        assert result == "title secret billing refund x y"

    def test_normalizes_whitespace(self):
        parser = QueryParser()

        assert parser.parse("   multiple    spaces   here   ") == "multiple spaces here"

    def test_empty_string_returns_empty(self):
        """Test that empty input returns empty string."""
        parser = QueryParser()

        assert parser.parse("") == ""
        assert parser.parse("   ") == ""
        assert parser.parse("*** ???") == ""

    def test_preserves_non_ascii_characters(self):
        parser = QueryParser()

        assert parser.parse("café crème") == "café crème"


class TestQueryParserOperators:
    """Tests for web search style operators."""

    def test_or_between_terms_kept(self):
        parser = QueryParser()

        assert parser.parse("invoices OR receipts") == "invoices OR receipts"

    def test_dangling_or_removed(self):
        """Test that OR at either end is dropped."""
        parser = QueryParser()

        assert parser.parse("OR invoices OR") == "invoices"

    def test_repeated_or_collapsed(self):
        parser = QueryParser()

        assert parser.parse("a OR OR b") == "a OR b"

    def test_other_keywords_lowercased(self):
        """Test that AND, NOT and NEAR are searched as plain words."""
        parser = QueryParser()

        result = parser.parse("NOT working AND broken NEAR login")

        assert result == "not working and broken near login"

    def test_lowercase_or_is_a_term(self):
        parser = QueryParser()

        assert parser.parse("this or that") == "this or that"


class TestQueryParserPhrases:

    def test_quoted_phrase_kept(self):
        parser = QueryParser()

        assert parser.parse('"two factor" authentication') == '"two factor" authentication'

    def test_phrase_content_sanitized(self):
        parser = QueryParser()

        assert parser.parse('"sign-in OR page"') == '"sign in or page"'

    def test_unbalanced_quote_dropped(self):
        parser = QueryParser()

        assert parser.parse('unbalanced "quote') == "unbalanced quote"

    def test_empty_phrase_dropped(self):
        parser = QueryParser()

        assert parser.parse('"" export') == "export"


class TestExtractTerms:
    """Tests for term extraction used in highlighting."""

    def test_extracts_lowercase_terms(self):
        parser = QueryParser()

        terms = parser.extract_terms('"Reset Password" OR login')

        assert terms == ["reset", "password", "login"]

    def test_deduplicates_in_order(self):
        parser = QueryParser()

        assert parser.extract_terms("billing invoice Billing") == ["billing", "invoice"]
