"""
Conversation repository.

Conversations are soft-deleted: delete_conversation() stamps deleted_at
and every read ignores rows where it is set.
"""

import uuid
from dataclasses import dataclass
from typing import List, Optional

from ..core import get_logger
from .connection import DatabaseManager

logger = get_logger(__name__)

DEFAULT_TITLE = "New Conversation"

_SELECT_CONVERSATION = """
    SELECT uuid, creator_id, company_id, title, message_count,
           created_at, updated_at, deleted_at
    FROM conversations
"""


@dataclass
class Conversation:
    """A chat conversation thread."""
    user_id: int
    id: Optional[str] = None
    company_id: Optional[int] = None
    title: str = DEFAULT_TITLE
    message_count: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    deleted_at: Optional[str] = None


class ConversationRepository:
    """Repository for the conversations table."""

    def __init__(self, db: DatabaseManager):
        self.db = db

    def resolve_internal_id(self, conversation_id: str) -> Optional[int]:
        """Map a conversation UUID to its row id, ignoring deleted rows."""
        with self.db.connection() as conn:
            row = conn.execute(
                "SELECT id FROM conversations WHERE uuid = ? AND deleted_at IS NULL",
                (conversation_id,)
            ).fetchone()
            return row["id"] if row else None

    def save_conversation(self, conversation: Conversation) -> Conversation:
        """
        Insert a new conversation or update an existing one.

        A conversation whose id matches a stored row has its title and
        message_count overwritten; otherwise a row is inserted, keeping
        the given id if there is one.

        Args:
            conversation: Conversation to persist.

        Returns:
            The stored conversation as read back from the database.
        """
        if conversation.id and self.resolve_internal_id(conversation.id) is not None:
            self.update_conversation(
                conversation.id,
                title=conversation.title,
                message_count=conversation.message_count
            )
            return self.get_conversation(conversation.id)

        conversation_id = conversation.id or str(uuid.uuid4())

        with self.db.cursor() as cur:
            cur.execute("""
                INSERT INTO conversations (uuid, company_id, creator_id, title, message_count)
                VALUES (?, ?, ?, ?, ?)
            """, (
                conversation_id,
                conversation.company_id,
                conversation.user_id,
                conversation.title or DEFAULT_TITLE,
                conversation.message_count
            ))

        logger.debug(f"Created conversation {conversation_id}")
        return self.get_conversation(conversation_id)

    def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
        """
        Fetch a live conversation by UUID.

        Returns:
            Conversation, or None if missing or soft-deleted.
        """
        with self.db.connection() as conn:
            row = conn.execute(
                _SELECT_CONVERSATION + " WHERE uuid = ? AND deleted_at IS NULL",
                (conversation_id,)
            ).fetchone()

        return self._row_to_conversation(row) if row else None

    def update_conversation(
        self,
        conversation_id: str,
        title: str = None,
        message_count: int = None
    ) -> bool:
        """
        Update title and/or message count.

        Args:
            conversation_id: Conversation UUID.
            title: New title, unchanged if None.
            message_count: New message count, unchanged if None.

        Returns:
            True if a live conversation was updated.
        """
        assignments = ["updated_at = CURRENT_TIMESTAMP"]
        params = []

        if title is not None:
            assignments.append("title = ?")
            params.append(title)
        if message_count is not None:
            assignments.append("message_count = ?")
            params.append(message_count)

        params.append(conversation_id)

        with self.db.cursor() as cur:
            cur.execute(
                f"UPDATE conversations SET {', '.join(assignments)} "
                "WHERE uuid = ? AND deleted_at IS NULL",
                params
            )
            return cur.rowcount > 0

    def increment_message_count(self, conversation_id: str, amount: int = 1) -> bool:
        """Add to the stored message count in a single UPDATE."""
        with self.db.cursor() as cur:
            cur.execute("""
                UPDATE conversations
                SET message_count = message_count + ?, updated_at = CURRENT_TIMESTAMP
                WHERE uuid = ? AND deleted_at IS NULL
            """, (amount, conversation_id))
            return cur.rowcount > 0

    def delete_conversation(self, conversation_id: str) -> bool:
        """
        Soft-delete a conversation.

        Returns:
            True if a live conversation was marked deleted.
        """
        with self.db.cursor() as cur:
            cur.execute("""
                UPDATE conversations
                SET deleted_at = CURRENT_TIMESTAMP, updated_at = CURRENT_TIMESTAMP
                WHERE uuid = ? AND deleted_at IS NULL
            """, (conversation_id,))
            deleted = cur.rowcount > 0

        if deleted:
            logger.info(f"Deleted conversation {conversation_id}")

        return deleted

    def get_user_conversations(
        self,
        user_id: int,
        company_id: int = None
    ) -> List[Conversation]:
        """
        List a user's live conversations, most recently updated first.

        Args:
            user_id: Creator's user id.
            company_id: Optional tenant scope.
        """
        sql = _SELECT_CONVERSATION + " WHERE creator_id = ? AND deleted_at IS NULL"
        params = [user_id]

        if company_id is not None:
            sql += " AND company_id = ?"
            params.append(company_id)

        sql += " ORDER BY updated_at DESC, id DESC"

        with self.db.connection() as conn:
            rows = conn.execute(sql, params).fetchall()

        return [self._row_to_conversation(row) for row in rows]

    @staticmethod
    def _row_to_conversation(row) -> Conversation:
        return Conversation(
            id=row["uuid"],
            user_id=row["creator_id"],
            company_id=row["company_id"],
            title=row["title"],
            message_count=row["message_count"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            deleted_at=row["deleted_at"]
        )
