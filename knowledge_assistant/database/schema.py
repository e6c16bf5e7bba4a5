"""
Database schema definitions for the Knowledge Assistant.

Defines the conversation, message, feedback and knowledge item tables,
the FTS5 virtual table used for keyword search, and the triggers that
keep it synchronized with knowledge_items.

Every table carries an integer primary key for joins and a UUID string
that is the only identifier exposed outside the storage layer.
"""

import sqlite3

from ..core import get_config, get_logger, DatabaseError
from .connection import DatabaseManager

logger = get_logger(__name__)


CONVERSATIONS_TABLE = """
CREATE TABLE IF NOT EXISTS conversations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uuid TEXT NOT NULL UNIQUE,
    company_id INTEGER,
    creator_id INTEGER NOT NULL,
    title TEXT NOT NULL,
    message_count INTEGER NOT NULL DEFAULT 0,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    deleted_at TIMESTAMP
)
"""

MESSAGES_TABLE = """
CREATE TABLE IF NOT EXISTS messages (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uuid TEXT NOT NULL UNIQUE,
    conversation_id INTEGER NOT NULL,
    parent_message_id INTEGER,
    type TEXT NOT NULL,
    content TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'completed',
    metadata TEXT NOT NULL DEFAULT '{}',
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP,
    FOREIGN KEY (conversation_id) REFERENCES conversations(id) ON DELETE CASCADE,
    FOREIGN KEY (parent_message_id) REFERENCES messages(id) ON DELETE SET NULL
)
"""

FEEDBACK_TABLE = """
CREATE TABLE IF NOT EXISTS message_feedback (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uuid TEXT NOT NULL UNIQUE,
    message_id INTEGER NOT NULL,
    user_id INTEGER NOT NULL,
    rating TEXT NOT NULL,
    category TEXT,
    comment TEXT,
    suggested_improvement TEXT,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP,
    FOREIGN KEY (message_id) REFERENCES messages(id) ON DELETE CASCADE
)
"""

KNOWLEDGE_ITEMS_TABLE = """
CREATE TABLE IF NOT EXISTS knowledge_items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uuid TEXT NOT NULL UNIQUE,
    parent_id INTEGER,
    company_id INTEGER,
    title TEXT NOT NULL,
    description TEXT,
    type TEXT NOT NULL,
    content TEXT,
    file_url TEXT,
    file_size INTEGER,
    file_type TEXT,
    metadata TEXT NOT NULL DEFAULT '{}',
    embedding BLOB,
    processed_at TIMESTAMP,
    created_by INTEGER NOT NULL,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (parent_id) REFERENCES knowledge_items(id) ON DELETE SET NULL
)
"""

INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_conversations_creator ON conversations(creator_id)",
    "CREATE INDEX IF NOT EXISTS idx_conversations_company ON conversations(company_id)",
    "CREATE INDEX IF NOT EXISTS idx_conversations_updated ON conversations(updated_at DESC)",
    "CREATE INDEX IF NOT EXISTS idx_messages_conversation ON messages(conversation_id)",
    "CREATE INDEX IF NOT EXISTS idx_messages_parent ON messages(parent_message_id)",
    "CREATE INDEX IF NOT EXISTS idx_feedback_message ON message_feedback(message_id)",
    "CREATE INDEX IF NOT EXISTS idx_feedback_user ON message_feedback(user_id)",
    "CREATE INDEX IF NOT EXISTS idx_knowledge_company ON knowledge_items(company_id)",
    "CREATE INDEX IF NOT EXISTS idx_knowledge_parent ON knowledge_items(parent_id)",
    "CREATE INDEX IF NOT EXISTS idx_knowledge_type ON knowledge_items(type)",
    "CREATE INDEX IF NOT EXISTS idx_knowledge_created ON knowledge_items(created_at DESC)",
]


def _get_fts_table_sql(tokenizer: str) -> str:
    """Generate FTS5 table creation SQL with the configured tokenizer."""
    return f"""
    CREATE VIRTUAL TABLE IF NOT EXISTS knowledge_items_fts USING fts5(
        title,
        description,
        content,
        content='knowledge_items',
        content_rowid='id',
        tokenize='{tokenizer}'
    )
    """


FTS_TRIGGERS = [
    """
    CREATE TRIGGER IF NOT EXISTS knowledge_items_ai AFTER INSERT ON knowledge_items BEGIN
        INSERT INTO knowledge_items_fts(rowid, title, description, content)
        VALUES (new.id, new.title, new.description, new.content);
    END
    """,
    """
    CREATE TRIGGER IF NOT EXISTS knowledge_items_ad AFTER DELETE ON knowledge_items BEGIN
        INSERT INTO knowledge_items_fts(knowledge_items_fts, rowid, title, description, content)
        VALUES ('delete', old.id, old.title, old.description, old.content);
    END
    """,
    """
    CREATE TRIGGER IF NOT EXISTS knowledge_items_au
    AFTER UPDATE OF title, description, content ON knowledge_items BEGIN
        INSERT INTO knowledge_items_fts(knowledge_items_fts, rowid, title, description, content)
        VALUES ('delete', old.id, old.title, old.description, old.content);
        INSERT INTO knowledge_items_fts(rowid, title, description, content)
        VALUES (new.id, new.title, new.description, new.content);
    END
    """
]

TABLE_NAMES = ["message_feedback", "messages", "conversations", "knowledge_items"]
TRIGGER_NAMES = ["knowledge_items_ai", "knowledge_items_ad", "knowledge_items_au"]


def init_schema(db: DatabaseManager, tokenizer: str = None) -> None:
    """
    Initialize database schema if not exists.

    Args:
        db: Database manager to create the schema in.
        tokenizer: FTS5 tokenizer spec (default from config).
    """
    if tokenizer is None:
        tokenizer = get_config().search.tokenizer

    logger.info(f"Initializing database schema at {db.db_path}")

    with db.cursor() as cur:
        cur.execute(CONVERSATIONS_TABLE)
        cur.execute(MESSAGES_TABLE)
        cur.execute(FEEDBACK_TABLE)
        cur.execute(KNOWLEDGE_ITEMS_TABLE)

        for index_sql in INDEXES:
            cur.execute(index_sql)

        try:
            cur.execute(_get_fts_table_sql(tokenizer))
        except sqlite3.OperationalError as e:
            if "already exists" not in str(e):
                raise DatabaseError(f"Failed to create FTS table: {e}")

        for trigger_sql in FTS_TRIGGERS:
            try:
                cur.execute(trigger_sql)
            except sqlite3.OperationalError as e:
                if "already exists" not in str(e):
                    raise DatabaseError(f"Failed to create trigger: {e}")

    logger.info("Schema initialization complete")


def reset_schema(db: DatabaseManager, tokenizer: str = None) -> None:
    """
    Drop and recreate all tables.

    Warning: This deletes all stored conversations and knowledge items.
    """
    logger.warning("Resetting database schema - all data will be deleted")

    with db.cursor() as cur:
        for trigger in TRIGGER_NAMES:
            cur.execute(f"DROP TRIGGER IF EXISTS {trigger}")
        cur.execute("DROP TABLE IF EXISTS knowledge_items_fts")
        for table in TABLE_NAMES:
            cur.execute(f"DROP TABLE IF EXISTS {table}")

    init_schema(db, tokenizer)

    logger.info("Schema reset complete")


def get_statistics(db: DatabaseManager) -> dict:
    """
    Get database statistics for dashboard display.

    Returns:
        Dictionary with item, conversation and message counts.
    """
    with db.connection() as conn:
        stats = {}

        row = conn.execute("SELECT COUNT(*) as count FROM knowledge_items").fetchone()
        stats["total_items"] = row["count"]

        row = conn.execute(
            "SELECT COUNT(*) as count FROM knowledge_items WHERE embedding IS NOT NULL"
        ).fetchone()
        stats["embedded_items"] = row["count"]

        rows = conn.execute(
            "SELECT type, COUNT(*) as count FROM knowledge_items GROUP BY type"
        ).fetchall()
        stats["items_by_type"] = {r["type"]: r["count"] for r in rows}

        row = conn.execute(
            "SELECT COUNT(*) as count FROM conversations WHERE deleted_at IS NULL"
        ).fetchone()
        stats["total_conversations"] = row["count"]

        row = conn.execute("SELECT COUNT(*) as count FROM messages").fetchone()
        stats["total_messages"] = row["count"]

        row = conn.execute("SELECT MAX(updated_at) as newest FROM knowledge_items").fetchone()
        stats["newest_update"] = row["newest"]

    return stats
