"""
Knowledge base service.

Coordinates the item repository, the embedding service and the search
engine. Item content is embedded synchronously on create and whenever it
changes, so a stored embedding always reflects the stored content.
"""

from dataclasses import asdict
from typing import Any, Dict, List, Optional, Tuple

from ..core import get_logger, NotFoundError, ValidationError
from ..database import KnowledgeRepository
from ..database.knowledge_repository import UPDATABLE_FIELDS
from ..search import EmbeddingService, HybridEngine, SearchOptions, SearchResult, SearchStats
from .models import BaseItem, KnowledgeItem, ITEM_TYPES, field_names, item_class

logger = get_logger(__name__)

DEFAULT_COMPANY_ID = 1


class KnowledgeBaseService:
    """
    CRUD and search over knowledge items.

    Items are addressed by UUID. Missing items raise NotFoundError on
    update and delete; get_item returns None.
    """

    def __init__(
        self,
        repository: KnowledgeRepository,
        embedding_service: EmbeddingService,
        search_engine: HybridEngine
    ):
        self.repository = repository
        self.embedding_service = embedding_service
        self.search_engine = search_engine

    def create_item(self, item: BaseItem) -> str:
        """
        Store a new item, embedding its content when the type calls for it.

        An embedding failure does not block creation; the item is stored
        without an embedding and stays reachable by keyword search.

        Args:
            item: A validated item variant (see build_item).

        Returns:
            The new item's UUID.
        """
        values = asdict(item)
        if values.get("company_id") is None:
            values["company_id"] = DEFAULT_COMPANY_ID

        embedding = None
        text = item.embeddable_text
        if text:
            embedding = self.embedding_service.generate_embedding(text)
            if embedding is None:
                logger.warning(f"Storing '{item.title}' without an embedding")

        item_id = self.repository.insert(type=item.type, embedding=embedding, **values)

        logger.info(f"Created {item.type} item '{item.title}' ({item_id})")
        return item_id

    def get_item(self, item_id: str) -> Optional[KnowledgeItem]:
        """Fetch an item with its content, or None."""
        return self.repository.get(item_id)

    def list_items(
        self,
        parent_id: str = None,
        company_id: int = None,
        type: str = None,
        limit: int = 50,
        offset: int = 0,
        root_only: bool = False
    ) -> Tuple[List[KnowledgeItem], int]:
        """
        List items newest first. Content is not included.

        Args:
            parent_id: Only children of this folder; unknown ids match nothing.
            company_id: Tenant scope.
            type: Only items of this type.
            limit: Page size.
            offset: Rows to skip.
            root_only: Only items without a parent.

        Returns:
            Tuple of (items, total matching count).
        """
        if type is not None:
            item_class(type)
        if limit < 1:
            raise ValidationError("limit must be at least 1", field="limit")
        if offset < 0:
            raise ValidationError("offset must not be negative", field="offset")

        return self.repository.list(
            parent_id=parent_id,
            root_only=root_only,
            company_id=company_id,
            type=type,
            limit=limit,
            offset=offset
        )

    def update_item(self, item_id: str, **updates: Any) -> bool:
        """
        Update selected fields of an item.

        Supplying content regenerates the embedding. If that fails the old
        embedding is dropped rather than left describing stale content.

        Args:
            item_id: Item UUID.
            **updates: New values for title, description, content,
                file_url, file_size, file_type or metadata.

        Returns:
            True once the update is stored.

        Raises:
            ValidationError: On unknown fields or values the item type rejects.
            NotFoundError: If the item does not exist.
        """
        unknown = set(updates) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(
                f"Cannot update fields: {sorted(unknown)}",
                field=sorted(unknown)[0]
            )

        record = self.repository.get(item_id)
        if record is None:
            raise NotFoundError(
                f"Knowledge item not found: {item_id}",
                resource="knowledge_item",
                resource_id=item_id
            )

        self._validate_update(record, updates)

        embedding = None
        clear_embedding = False
        if "content" in updates:
            content = updates["content"]
            if content and content.strip():
                embedding = self.embedding_service.generate_embedding(content)
            if embedding is None:
                logger.warning(f"Content of {item_id} changed without a new embedding")
                clear_embedding = True

        updated = self.repository.update(
            item_id,
            updates,
            embedding=embedding,
            clear_embedding=clear_embedding
        )
        if not updated:
            raise NotFoundError(
                f"Knowledge item not found: {item_id}",
                resource="knowledge_item",
                resource_id=item_id
            )

        logger.info(f"Updated item {item_id}: {sorted(updates)}")
        return True

    def _validate_update(self, record: KnowledgeItem, updates: Dict[str, Any]) -> None:
        """Rebuild the item's variant with the new values to check them."""
        cls = ITEM_TYPES.get(record.type)
        if cls is None:
            return

        names = field_names(cls)
        foreign = set(updates) - names
        if foreign:
            raise ValidationError(
                f"{record.type} items do not have fields: {sorted(foreign)}",
                field=sorted(foreign)[0]
            )

        values = {name: getattr(record, name) for name in names}
        values.update(updates)
        cls(**values)

    def delete_item(self, item_id: str) -> bool:
        """
        Delete an item.

        Raises:
            NotFoundError: If the item does not exist.
        """
        if not self.repository.delete(item_id):
            raise NotFoundError(
                f"Knowledge item not found: {item_id}",
                resource="knowledge_item",
                resource_id=item_id
            )
        logger.info(f"Deleted item {item_id}")
        return True

    def search(self, query: str, options: SearchOptions = None) -> List[SearchResult]:
        """Search the knowledge base (see HybridEngine.search)."""
        return self.search_engine.search(query, options)

    def search_with_stats(
        self,
        query: str,
        options: SearchOptions = None
    ) -> Tuple[List[SearchResult], SearchStats]:
        """Search and return the per-pass statistics alongside the results."""
        return self.search_engine.search_with_stats(query, options)
