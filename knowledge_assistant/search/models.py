"""
Data models for search functionality.

Defines the search options, the immutable result type shared by all
search passes, and the statistics returned alongside hybrid results.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..core import ValidationError


class SearchMode(Enum):
    """Search mode selection."""
    SEMANTIC = "semantic"
    KEYWORD = "keyword"
    HYBRID = "hybrid"

    @classmethod
    def parse(cls, value) -> "SearchMode":
        """
        Accept a SearchMode or its string value.

        Raises:
            ValidationError: If value names no known mode.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValidationError(f"Unknown search mode: {value}", field="mode")


@dataclass
class SearchOptions:
    """
    Options for a knowledge search.

    Attributes:
        limit: Maximum number of results to return.
        threshold: Minimum cosine similarity for semantic hits.
        mode: Which passes to run.
        company_id: Restrict results to one tenant.
    """
    limit: int = 5
    threshold: float = 0.7
    mode: SearchMode = SearchMode.HYBRID
    company_id: Optional[int] = None

    def __post_init__(self):
        self.mode = SearchMode.parse(self.mode)
        if self.limit < 1:
            raise ValidationError("limit must be at least 1", field="limit")


@dataclass(frozen=True)
class SearchResult:
    """
    A single knowledge search hit.

    Attributes:
        id: Item UUID.
        title: Item title.
        type: Item type.
        score: Cosine similarity for semantic hits, a fixed value for
            keyword hits. Higher is better.
        source: "semantic" or "keyword".
        description: Item description.
        content: Item content.
        metadata: Item metadata.
    """
    id: str
    title: str
    type: str
    score: float
    source: str
    description: Optional[str] = None
    content: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def snippet(self, length: int = 200) -> str:
        """Short text excerpt for display."""
        text = self.content or self.description or ""
        text = " ".join(text.split())
        if len(text) <= length:
            return text
        return text[:length].rsplit(" ", 1)[0] + "..."


@dataclass
class PassOutcome:
    """
    Result of one search pass.

    A failed pass carries an error message and no results.
    """
    results: List[SearchResult] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class SearchStats:
    """
    Statistics about a search execution.

    Attributes:
        query: The original query text.
        mode: Mode the search ran in.
        total_results: Results returned after merging.
        semantic_count: Hits from the semantic pass.
        keyword_count: Hits from the keyword pass.
        overlap_count: Keyword hits dropped as duplicates.
        execution_time_ms: Total wall time in milliseconds.
        errors: Messages from passes that failed.
    """
    query: str
    mode: SearchMode
    total_results: int = 0
    semantic_count: int = 0
    keyword_count: int = 0
    overlap_count: int = 0
    execution_time_ms: float = 0.0
    errors: List[str] = field(default_factory=list)


if __name__ == "__main__":
    options = SearchOptions(limit=4, mode="hybrid")
    print(f"Options: {options}")

    result = SearchResult(
        id="b3c1e1a4-0000-4000-8000-000000000001",
        title="Getting started",
        type="document",
        score=0.92,
        source="semantic",
        content="Create your first project from the dashboard, then invite your team."
    )
    print(f"\nResult: {result.title} ({result.source}, {result.score:.2f})")
    print(f"Snippet: {result.snippet(40)}")
