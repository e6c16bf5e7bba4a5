"""
Message repository.

Messages belong to a conversation and may point at the message they
answer. Tool calls and tool results share the JSON metadata column.
"""

import json
import uuid
from dataclasses import dataclass
from typing import Any, List, Optional

from ..core import get_logger, NotFoundError, ValidationError
from .connection import DatabaseManager
from .conversation_repository import ConversationRepository

logger = get_logger(__name__)

MESSAGE_ROLES = ("user", "assistant", "system")
MESSAGE_STATUSES = ("generating", "completed", "stopped", "failed")

_SELECT_MESSAGE = """
    SELECT m.uuid, c.uuid AS conversation_uuid, p.uuid AS parent_uuid,
           m.type, m.content, m.status, m.metadata, m.created_at, m.updated_at
    FROM messages m
    JOIN conversations c ON m.conversation_id = c.id
    LEFT JOIN messages p ON m.parent_message_id = p.id
"""


@dataclass
class StoredMessage:
    """A single message in a conversation."""
    conversation_id: str
    role: str
    content: str
    id: Optional[str] = None
    parent_message_id: Optional[str] = None
    status: str = "completed"
    tool_calls: Optional[Any] = None
    tool_results: Optional[Any] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class MessageRepository:
    """Repository for the messages table."""

    def __init__(self, db: DatabaseManager, conversations: ConversationRepository = None):
        """
        Initialize the repository.

        Args:
            db: Database manager shared by the application.
            conversations: Used to resolve conversation UUIDs.
        """
        self.db = db
        self.conversations = conversations or ConversationRepository(db)

    def _resolve_message_id(self, message_id: str) -> Optional[int]:
        with self.db.connection() as conn:
            row = conn.execute(
                "SELECT id FROM messages WHERE uuid = ?", (message_id,)
            ).fetchone()
            return row["id"] if row else None

    def save_message(self, message: StoredMessage) -> StoredMessage:
        """
        Insert a new message or update an existing one.

        Updating changes content, status and tool metadata only.

        Args:
            message: Message to persist.

        Returns:
            The stored message as read back from the database.

        Raises:
            ValidationError: On an unknown role or status.
            NotFoundError: If the conversation does not exist.
        """
        if message.role not in MESSAGE_ROLES:
            raise ValidationError(f"Invalid message role: {message.role}", field="role")
        if message.status not in MESSAGE_STATUSES:
            raise ValidationError(f"Invalid message status: {message.status}", field="status")

        metadata = json.dumps({
            "tool_calls": message.tool_calls,
            "tool_results": message.tool_results
        })

        if message.id and self._resolve_message_id(message.id) is not None:
            with self.db.cursor() as cur:
                cur.execute("""
                    UPDATE messages
                    SET content = ?, status = ?, metadata = ?, updated_at = CURRENT_TIMESTAMP
                    WHERE uuid = ?
                """, (message.content, message.status, metadata, message.id))
            return self.get_message_by_id(message.id)

        conversation_internal_id = self.conversations.resolve_internal_id(message.conversation_id)
        if conversation_internal_id is None:
            raise NotFoundError(
                f"Conversation not found: {message.conversation_id}",
                resource="conversation",
                resource_id=message.conversation_id
            )

        parent_internal_id = None
        if message.parent_message_id:
            parent_internal_id = self._resolve_message_id(message.parent_message_id)

        message_id = message.id or str(uuid.uuid4())

        with self.db.cursor() as cur:
            cur.execute("""
                INSERT INTO messages
                (uuid, conversation_id, parent_message_id, type, content, status, metadata)
                VALUES (?, ?, ?, ?, ?, ?, ?)
            """, (
                message_id,
                conversation_internal_id,
                parent_internal_id,
                message.role,
                message.content,
                message.status,
                metadata
            ))

        return self.get_message_by_id(message_id)

    def get_messages(
        self,
        conversation_id: str,
        limit: int = 50,
        offset: int = 0
    ) -> List[StoredMessage]:
        """
        Get a conversation's messages, oldest first.

        Args:
            conversation_id: Conversation UUID.
            limit: Maximum messages.
            offset: Messages to skip.

        Returns:
            List of StoredMessage, empty for unknown conversations.
        """
        with self.db.connection() as conn:
            rows = conn.execute(
                _SELECT_MESSAGE
                + " WHERE c.uuid = ? AND c.deleted_at IS NULL"
                + " ORDER BY m.created_at ASC, m.id ASC LIMIT ? OFFSET ?",
                (conversation_id, limit, offset)
            ).fetchall()

        return [self._row_to_message(row) for row in rows]

    def get_recent_messages(self, conversation_id: str, limit: int = 10) -> List[StoredMessage]:
        """
        Get the latest messages of a conversation, returned oldest first.

        Args:
            conversation_id: Conversation UUID.
            limit: Number of most recent messages.
        """
        with self.db.connection() as conn:
            rows = conn.execute(
                _SELECT_MESSAGE
                + " WHERE c.uuid = ? AND c.deleted_at IS NULL"
                + " ORDER BY m.created_at DESC, m.id DESC LIMIT ?",
                (conversation_id, limit)
            ).fetchall()

        return [self._row_to_message(row) for row in reversed(rows)]

    def get_message_by_id(self, message_id: str) -> Optional[StoredMessage]:
        """Fetch one message by UUID."""
        with self.db.connection() as conn:
            row = conn.execute(
                _SELECT_MESSAGE + " WHERE m.uuid = ?", (message_id,)
            ).fetchone()

        return self._row_to_message(row) if row else None

    def delete_message(self, message_id: str) -> bool:
        """
        Delete a message and its feedback.

        Returns:
            True if a row was deleted.
        """
        with self.db.cursor() as cur:
            cur.execute("DELETE FROM messages WHERE uuid = ?", (message_id,))
            return cur.rowcount > 0

    @staticmethod
    def _row_to_message(row) -> StoredMessage:
        metadata = json.loads(row["metadata"] or "{}")
        return StoredMessage(
            id=row["uuid"],
            conversation_id=row["conversation_uuid"],
            parent_message_id=row["parent_uuid"],
            role=row["type"],
            content=row["content"],
            status=row["status"],
            tool_calls=metadata.get("tool_calls"),
            tool_results=metadata.get("tool_results"),
            created_at=row["created_at"],
            updated_at=row["updated_at"]
        )
