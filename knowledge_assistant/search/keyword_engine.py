"""
Keyword search engine using SQLite FTS5.

Matches the query against item title, description and content. Hits come
back in FTS5 BM25 rank order and all carry the same fixed score, since
raw BM25 values are not comparable with cosine similarities.
"""

import sqlite3
import time

from ..core import get_config, get_logger, DatabaseError, SearchConfig
from ..database import KnowledgeRepository
from .models import PassOutcome, SearchResult
from .query_parser import QueryParser

logger = get_logger(__name__)

SOURCE = "keyword"


class KeywordEngine:
    """
    Full-text search over knowledge items.

    Storage and query errors are reported through PassOutcome.error
    instead of being raised.
    """

    def __init__(self, repository: KnowledgeRepository, config: SearchConfig = None):
        """
        Initialize the keyword engine.

        Args:
            repository: Knowledge item store.
            config: Search settings. Defaults to the global config.
        """
        self.repository = repository
        self.config = config or get_config().search
        self.parser = QueryParser()

    def search(self, query: str, limit: int, company_id: int = None) -> PassOutcome:
        """
        Execute a keyword search.

        Args:
            query: Raw user query.
            limit: Maximum hits.
            company_id: Restrict to one tenant.

        Returns:
            PassOutcome with hits in rank order.
        """
        start_time = time.time()

        match_expression = self.parser.parse(query)
        if not match_expression:
            logger.debug(f"Query '{query}' has no searchable terms")
            return PassOutcome()

        try:
            records = self.repository.keyword_search(
                match_expression,
                limit=limit,
                company_id=company_id
            )
        except (sqlite3.Error, DatabaseError) as e:
            logger.warning(f"Keyword search failed for '{query}': {e}")
            return PassOutcome(error=f"keyword search failed: {e}")

        results = [
            SearchResult(
                id=record.id,
                title=record.title,
                type=record.type,
                score=self.config.keyword_score,
                source=SOURCE,
                description=record.description,
                content=record.content,
                metadata=record.metadata
            )
            for record in records
        ]

        execution_time = (time.time() - start_time) * 1000
        logger.debug(
            f"Keyword search '{query}': {len(results)} results in {execution_time:.1f}ms"
        )

        return PassOutcome(results=results)
