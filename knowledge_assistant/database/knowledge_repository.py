"""
Knowledge item repository for CRUD, keyword search and embedding reads.

Callers address items by UUID. Parent links are stored as internal
integer ids and translated back to UUIDs on the way out.
Embeddings are stored as little-endian float32 BLOBs.
"""

import json
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..core import get_logger
from .connection import DatabaseManager

logger = get_logger(__name__)

EMBEDDING_DTYPE = np.dtype("<f4")

# Columns a caller may change through update()
UPDATABLE_FIELDS = (
    "title",
    "description",
    "content",
    "file_url",
    "file_size",
    "file_type",
    "metadata",
)

_SELECT_ITEM = """
    SELECT
        k.uuid, p.uuid AS parent_uuid, k.company_id, k.title, k.description,
        k.type, {content} AS content, k.file_url, k.file_size, k.file_type,
        k.metadata, k.created_by, k.embedding IS NOT NULL AS has_embedding,
        k.processed_at, k.created_at, k.updated_at
    FROM knowledge_items k
    LEFT JOIN knowledge_items p ON k.parent_id = p.id
"""


@dataclass
class KnowledgeRecord:
    """A stored knowledge item as seen from outside the storage layer."""
    id: str
    title: str
    type: str
    created_by: int
    parent_id: Optional[str] = None
    company_id: Optional[int] = None
    description: Optional[str] = None
    content: Optional[str] = None
    file_url: Optional[str] = None
    file_size: Optional[int] = None
    file_type: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    has_embedding: bool = False
    processed_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class EmbeddedItem:
    """An item with its stored embedding, read for similarity scoring."""
    id: str
    title: str
    type: str
    description: Optional[str]
    content: Optional[str]
    metadata: Dict[str, Any]
    embedding: np.ndarray


class KnowledgeRepository:
    """
    Repository for the knowledge_items table.

    Provides inserts and updates keyed by UUID, paginated listing,
    FTS5 keyword matching, and a full read of embedded items.
    """

    def __init__(self, db: DatabaseManager):
        """
        Initialize the repository.

        Args:
            db: Database manager shared by the application.
        """
        self.db = db

    def resolve_internal_id(self, item_id: str) -> Optional[int]:
        """
        Map an external UUID to the internal row id.

        Args:
            item_id: Item UUID.

        Returns:
            Row id, or None if no such item.
        """
        with self.db.connection() as conn:
            row = conn.execute(
                "SELECT id FROM knowledge_items WHERE uuid = ?",
                (item_id,)
            ).fetchone()
            return row["id"] if row else None

    def insert(
        self,
        title: str,
        type: str,
        created_by: int,
        parent_id: str = None,
        company_id: int = None,
        description: str = None,
        content: str = None,
        file_url: str = None,
        file_size: int = None,
        file_type: str = None,
        metadata: Dict[str, Any] = None,
        embedding: Sequence[float] = None
    ) -> str:
        """
        Insert a knowledge item.

        An unknown parent UUID is stored as no parent.

        Args:
            title: Item title.
            type: Item type discriminator.
            created_by: Creating user's id.
            parent_id: Parent folder UUID.
            company_id: Tenant scope.
            description: Optional description.
            content: Document text.
            file_url: Location of file-like items.
            file_size: Size in bytes.
            file_type: MIME type.
            metadata: Free-form metadata.
            embedding: Precomputed content embedding.

        Returns:
            The new item's UUID.
        """
        parent_internal_id = None
        if parent_id:
            parent_internal_id = self.resolve_internal_id(parent_id)
            if parent_internal_id is None:
                logger.warning(f"Parent {parent_id} not found, storing item at root")

        item_uuid = str(uuid.uuid4())
        embedding_blob = self.to_blob(embedding) if embedding is not None else None

        with self.db.cursor() as cur:
            cur.execute("""
                INSERT INTO knowledge_items
                (uuid, parent_id, company_id, title, description, type, content,
                 file_url, file_size, file_type, metadata, embedding, processed_at,
                 created_by)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?,
                        CASE WHEN ? IS NULL THEN NULL ELSE CURRENT_TIMESTAMP END, ?)
            """, (
                item_uuid,
                parent_internal_id,
                company_id,
                title,
                description,
                type,
                content,
                file_url,
                file_size,
                file_type,
                json.dumps(metadata or {}),
                embedding_blob,
                embedding_blob,
                created_by
            ))

        logger.debug(f"Inserted {type} item {item_uuid}")
        return item_uuid

    def get(self, item_id: str) -> Optional[KnowledgeRecord]:
        """
        Fetch an item by UUID.

        Args:
            item_id: Item UUID.

        Returns:
            KnowledgeRecord or None.
        """
        sql = _SELECT_ITEM.format(content="k.content") + " WHERE k.uuid = ?"

        with self.db.connection() as conn:
            row = conn.execute(sql, (item_id,)).fetchone()

        return self._row_to_record(row) if row else None

    def list(
        self,
        parent_id: str = None,
        root_only: bool = False,
        company_id: int = None,
        type: str = None,
        limit: int = 50,
        offset: int = 0
    ) -> Tuple[List[KnowledgeRecord], int]:
        """
        List items newest first, without their content.

        Args:
            parent_id: Only children of this folder UUID.
            root_only: Only items without a parent (ignored with parent_id).
            company_id: Tenant scope.
            type: Only items of this type.
            limit: Page size.
            offset: Rows to skip.

        Returns:
            Tuple of (page of records, total matching count).
        """
        conditions = []
        params: List[Any] = []

        if parent_id:
            parent_internal_id = self.resolve_internal_id(parent_id)
            if parent_internal_id is None:
                return [], 0
            conditions.append("k.parent_id = ?")
            params.append(parent_internal_id)
        elif root_only:
            conditions.append("k.parent_id IS NULL")

        if company_id is not None:
            conditions.append("k.company_id = ?")
            params.append(company_id)

        if type:
            conditions.append("k.type = ?")
            params.append(type)

        where = f" WHERE {' AND '.join(conditions)}" if conditions else ""

        with self.db.connection() as conn:
            total = conn.execute(
                f"SELECT COUNT(*) as count FROM knowledge_items k{where}",
                params
            ).fetchone()["count"]

            rows = conn.execute(
                _SELECT_ITEM.format(content="NULL") + where
                + " ORDER BY k.created_at DESC, k.id DESC LIMIT ? OFFSET ?",
                params + [limit, offset]
            ).fetchall()

        return [self._row_to_record(row) for row in rows], total

    def update(
        self,
        item_id: str,
        updates: Dict[str, Any],
        embedding: Sequence[float] = None,
        clear_embedding: bool = False
    ) -> bool:
        """
        Update selected fields of an item.

        Args:
            item_id: Item UUID.
            updates: Mapping of column name to new value (see UPDATABLE_FIELDS).
            embedding: New embedding; stamps processed_at when given.
            clear_embedding: Drop any stored embedding (ignored if embedding given).

        Returns:
            True if a row was updated, False if the item does not exist.

        Raises:
            ValueError: If updates names a column that cannot be changed.
        """
        unknown = set(updates) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")

        assignments = ["updated_at = CURRENT_TIMESTAMP"]
        params: List[Any] = []

        for column in UPDATABLE_FIELDS:
            if column not in updates:
                continue
            value = updates[column]
            if column == "metadata":
                value = json.dumps(value or {})
            assignments.append(f"{column} = ?")
            params.append(value)

        if embedding is not None:
            assignments.append("embedding = ?")
            assignments.append("processed_at = CURRENT_TIMESTAMP")
            params.append(self.to_blob(embedding))
        elif clear_embedding:
            assignments.append("embedding = NULL")
            assignments.append("processed_at = NULL")

        params.append(item_id)

        with self.db.cursor() as cur:
            cur.execute(
                f"UPDATE knowledge_items SET {', '.join(assignments)} WHERE uuid = ?",
                params
            )
            return cur.rowcount > 0

    def delete(self, item_id: str) -> bool:
        """
        Delete an item by UUID.

        Children keep existing and become root items.

        Returns:
            True if a row was deleted.
        """
        with self.db.cursor() as cur:
            cur.execute("DELETE FROM knowledge_items WHERE uuid = ?", (item_id,))
            deleted = cur.rowcount > 0

        if deleted:
            logger.debug(f"Deleted knowledge item {item_id}")

        return deleted

    def keyword_search(
        self,
        match_expression: str,
        limit: int,
        company_id: int = None
    ) -> List[KnowledgeRecord]:
        """
        Full-text match over title, description and content.

        Args:
            match_expression: Sanitized FTS5 MATCH expression.
            limit: Maximum rows.
            company_id: Tenant scope.

        Returns:
            Matching records in FTS5 rank order.
        """
        sql = """
            SELECT
                k.uuid, NULL AS parent_uuid, k.company_id, k.title, k.description,
                k.type, k.content, k.file_url, k.file_size, k.file_type,
                k.metadata, k.created_by, k.embedding IS NOT NULL AS has_embedding,
                k.processed_at, k.created_at, k.updated_at
            FROM knowledge_items_fts
            JOIN knowledge_items k ON knowledge_items_fts.rowid = k.id
            WHERE knowledge_items_fts MATCH ?
        """
        params: List[Any] = [match_expression]

        if company_id is not None:
            sql += " AND k.company_id = ?"
            params.append(company_id)

        sql += " ORDER BY bm25(knowledge_items_fts) LIMIT ?"
        params.append(limit)

        with self.db.connection() as conn:
            rows = conn.execute(sql, params).fetchall()

        return [self._row_to_record(row) for row in rows]

    def get_embedded_items(self, company_id: int = None) -> List[EmbeddedItem]:
        """
        Read every item that has an embedding.

        Args:
            company_id: Tenant scope.

        Returns:
            List of EmbeddedItem in storage order. Rows whose BLOB cannot
            be decoded are logged and skipped.
        """
        sql = """
            SELECT uuid, title, type, description, content, metadata, embedding
            FROM knowledge_items
            WHERE embedding IS NOT NULL
        """
        params: List[Any] = []
        if company_id is not None:
            sql += " AND company_id = ?"
            params.append(company_id)

        with self.db.connection() as conn:
            rows = conn.execute(sql, params).fetchall()

        items = []
        for row in rows:
            try:
                embedding = self.from_blob(row["embedding"])
            except (ValueError, TypeError) as e:
                logger.warning(f"Skipping item {row['uuid']} with unreadable embedding: {e}")
                continue

            items.append(EmbeddedItem(
                id=row["uuid"],
                title=row["title"],
                type=row["type"],
                description=row["description"],
                content=row["content"],
                metadata=self._load_metadata(row["metadata"]),
                embedding=embedding
            ))

        return items

    def count(self, company_id: int = None) -> int:
        """Count stored items, optionally within one tenant."""
        with self.db.connection() as conn:
            if company_id is None:
                row = conn.execute("SELECT COUNT(*) as count FROM knowledge_items").fetchone()
            else:
                row = conn.execute(
                    "SELECT COUNT(*) as count FROM knowledge_items WHERE company_id = ?",
                    (company_id,)
                ).fetchone()
            return row["count"]

    @staticmethod
    def to_blob(embedding: Sequence[float]) -> bytes:
        """Pack an embedding as little-endian float32 bytes."""
        return np.asarray(embedding, dtype=EMBEDDING_DTYPE).tobytes()

    @staticmethod
    def from_blob(blob: bytes) -> np.ndarray:
        """Unpack an embedding BLOB into a float64 array."""
        return np.frombuffer(blob, dtype=EMBEDDING_DTYPE).astype(np.float64)

    @staticmethod
    def _load_metadata(raw: Optional[str]) -> Dict[str, Any]:
        if not raw:
            return {}
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable item metadata")
            return {}

    @classmethod
    def _row_to_record(cls, row) -> KnowledgeRecord:
        """Convert a database row to a KnowledgeRecord."""
        return KnowledgeRecord(
            id=row["uuid"],
            parent_id=row["parent_uuid"],
            company_id=row["company_id"],
            title=row["title"],
            description=row["description"],
            type=row["type"],
            content=row["content"],
            file_url=row["file_url"],
            file_size=row["file_size"],
            file_type=row["file_type"],
            metadata=cls._load_metadata(row["metadata"]),
            created_by=row["created_by"],
            has_embedding=bool(row["has_embedding"]),
            processed_at=row["processed_at"],
            created_at=row["created_at"],
            updated_at=row["updated_at"]
        )
