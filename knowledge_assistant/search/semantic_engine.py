"""
Semantic search engine using vector similarity.

Embeds the query, then scans every stored item embedding and scores it
with cosine similarity. There is no vector index: the scan re-reads the
embeddings on every call, which keeps results consistent with the latest
writes at the cost of linear time in the number of embedded items.
"""

import sqlite3
import time

from ..core import get_config, get_logger, DatabaseError
from ..database import KnowledgeRepository
from .embedding_service import EmbeddingService
from .models import PassOutcome, SearchResult
from .similarity import cosine_similarity

logger = get_logger(__name__)

SOURCE = "semantic"


class SemanticEngine:
    """
    Semantic search engine using vector embeddings.

    Combines EmbeddingService and KnowledgeRepository to perform
    meaning-based search across stored knowledge items.
    """

    def __init__(
        self,
        repository: KnowledgeRepository,
        embedding_service: EmbeddingService,
        dimensions: int = None
    ):
        """
        Initialize the semantic search engine.

        Args:
            repository: Knowledge item store.
            embedding_service: Used to embed the query.
            dimensions: Expected embedding length. Stored vectors of any
                other length are skipped. Defaults to the configured value.
        """
        self.repository = repository
        self.embedding_service = embedding_service
        self.dimensions = dimensions or get_config().embedding.dimensions

    def search(
        self,
        query: str,
        limit: int,
        threshold: float,
        company_id: int = None
    ) -> PassOutcome:
        """
        Perform semantic search for a query.

        Args:
            query: Search query text.
            limit: Maximum number of results.
            threshold: Minimum cosine similarity to keep a hit.
            company_id: Restrict to one tenant.

        Returns:
            PassOutcome with hits sorted by descending similarity.
        """
        start_time = time.time()

        embed_start = time.time()
        query_embedding = self.embedding_service.generate_embedding(query)
        embedding_time = (time.time() - embed_start) * 1000

        if query_embedding is None:
            logger.warning(f"No embedding for query '{query}', semantic pass skipped")
            return PassOutcome(error="query embedding unavailable")

        scan_start = time.time()
        try:
            items = self.repository.get_embedded_items(company_id)
        except (sqlite3.Error, DatabaseError) as e:
            logger.warning(f"Semantic scan failed for '{query}': {e}")
            return PassOutcome(error=f"semantic scan failed: {e}")

        scored = []
        skipped = 0
        for item in items:
            if len(item.embedding) != self.dimensions:
                skipped += 1
                continue

            similarity = cosine_similarity(query_embedding, item.embedding)
            if similarity < threshold:
                continue

            scored.append((similarity, item))

        if skipped:
            logger.warning(
                f"Skipped {skipped} items whose embeddings are not {self.dimensions}-dimensional"
            )

        scored.sort(key=lambda pair: pair[0], reverse=True)

        results = [
            SearchResult(
                id=item.id,
                title=item.title,
                type=item.type,
                score=similarity,
                source=SOURCE,
                description=item.description,
                content=item.content,
                metadata=item.metadata
            )
            for similarity, item in scored[:limit]
        ]

        scan_time = (time.time() - scan_start) * 1000
        total_time = (time.time() - start_time) * 1000

        logger.debug(
            f"Semantic search '{query}': {len(results)} of {len(items)} items in {total_time:.1f}ms "
            f"(embed: {embedding_time:.1f}ms, scan: {scan_time:.1f}ms)"
        )

        return PassOutcome(results=results)

