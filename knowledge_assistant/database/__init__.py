"""
Database module for SQLite persistence with FTS5 full-text search.

Provides connection management, schema definitions, and repositories for
knowledge items, conversations, messages and feedback. Embeddings are
stored alongside knowledge items for semantic search.
"""

from .connection import DatabaseManager
from .schema import init_schema, reset_schema, get_statistics
from .knowledge_repository import KnowledgeRepository, KnowledgeRecord, EmbeddedItem
from .conversation_repository import ConversationRepository, Conversation
from .message_repository import MessageRepository, StoredMessage
from .feedback_repository import FeedbackRepository, Feedback

__all__ = [
    "DatabaseManager",
    "init_schema",
    "reset_schema",
    "get_statistics",
    "KnowledgeRepository",
    "KnowledgeRecord",
    "EmbeddedItem",
    "ConversationRepository",
    "Conversation",
    "MessageRepository",
    "StoredMessage",
    "FeedbackRepository",
    "Feedback"
]
