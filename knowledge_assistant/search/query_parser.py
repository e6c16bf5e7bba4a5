"""
Query parser for FTS5 full-text search.

Turns free-form user input into a safe FTS5 MATCH expression with web
search semantics: terms are combined with implicit AND, "quoted text"
is matched as a phrase, and OR between two terms is kept as an operator.
Everything else that FTS5 would treat as syntax is stripped.
"""

import re
import string
from typing import List

from ..core import get_logger

logger = get_logger(__name__)


# FTS5 barewords may only contain these ASCII characters; any other
# ASCII character is syntax and gets replaced by a space
BAREWORD_ASCII = set(string.ascii_letters + string.digits + "_")

# Barewords FTS5 parses as operators
FTS5_KEYWORDS = {"AND", "OR", "NOT", "NEAR"}

_PHRASE_PATTERN = re.compile(r'"([^"]*)"')


def _is_term_char(char: str) -> bool:
    return char in BAREWORD_ASCII or ord(char) > 127


class QueryParser:
    """
    Parses and sanitizes search queries for FTS5.

    The output never contains unbalanced quotes, column filters or
    prefix markers, so it can be passed to MATCH without raising a
    syntax error.
    """

    def parse(self, query: str) -> str:
        """
        Parse a user query.

        Args:
            query: Raw user input.

        Returns:
            Sanitized MATCH expression, or "" if nothing searchable remains.
        """
        if not query or not query.strip():
            return ""

        tokens = []
        position = 0

        for match in _PHRASE_PATTERN.finditer(query):
            tokens.extend(self._split_terms(query[position:match.start()]))
            phrase_terms = self._split_terms(match.group(1), keep_or=False)
            if phrase_terms:
                tokens.append('"' + " ".join(phrase_terms) + '"')
            position = match.end()

        tokens.extend(self._split_terms(query[position:]))

        return " ".join(self._place_operators(tokens))

    def _split_terms(self, text: str, keep_or: bool = True) -> List[str]:
        """Strip special characters and neutralize operator keywords."""
        cleaned = "".join(
            char if _is_term_char(char) else " "
            for char in text
        )

        terms = []
        for term in cleaned.split():
            if term == "OR" and keep_or:
                terms.append(term)
            elif term.upper() in FTS5_KEYWORDS:
                terms.append(term.lower())
            else:
                terms.append(term)

        return terms

    def _place_operators(self, tokens: List[str]) -> List[str]:
        """Keep OR only where it joins two terms."""
        result = []

        for token in tokens:
            if token == "OR":
                if result and result[-1] != "OR":
                    result.append(token)
                continue
            result.append(token)

        while result and result[-1] == "OR":
            result.pop()

        return result

    def extract_terms(self, query: str) -> List[str]:
        """
        Extract individual search terms from a query.

        Useful for highlighting matches in results.

        Args:
            query: Parsed or raw query string.

        Returns:
            List of distinct lowercase terms.
        """
        cleaned = re.sub(r'\b(OR|AND|NOT|NEAR)\b', ' ', query)
        cleaned = "".join(
            char if _is_term_char(char) else " "
            for char in cleaned
        )

        terms = [t.strip().lower() for t in cleaned.split() if t.strip()]

        return list(dict.fromkeys(terms))


if __name__ == "__main__":
    parser = QueryParser()

    test_queries = [
        "reset password",
        "billing (invoices) OR receipts",
        '"two factor" authentication',
        "NOT a query OR",
        "   multiple   spaces   "
    ]

    for q in test_queries:
        result = parser.parse(q)
        print(f"  '{q}' -> '{result}'")

    print("\n=== Term Extraction ===")
    query = '"reset password" OR login'
    print(f"  '{query}' -> {parser.extract_terms(query)}")
