"""
Tests for database schema creation and statistics.

SAFETY NOTE: All tests use the `db` fixture which creates the database
in a tempfile.mkdtemp() directory that is removed after the test.
"""

from knowledge_assistant.database.schema import init_schema, reset_schema, get_statistics
from knowledge_assistant.database import KnowledgeRepository, ConversationRepository, Conversation


def _table_names(db):
    with db.connection() as conn:
        rows = conn.execute(
            "SELECT name FROM sqlite_master WHERE type IN ('table', 'trigger')"
        ).fetchall()
    return {row["name"] for row in rows}


class TestInitSchema:
    """Tests for init_schema."""

    def test_creates_tables(self, db):
        names = _table_names(db)

        assert {"conversations", "messages", "message_feedback", "knowledge_items"} <= names
        assert "knowledge_items_fts" in names

    def test_creates_fts_triggers(self, db):
        names = _table_names(db)

        assert {"knowledge_items_ai", "knowledge_items_ad", "knowledge_items_au"} <= names

    def test_init_is_idempotent(self, db):
        """Running init_schema twice leaves data intact."""
        KnowledgeRepository(db).insert(title="Kept", type="folder", created_by=1)

        init_schema(db, "porter unicode61")

        assert KnowledgeRepository(db).count() == 1


class TestResetSchema:

    def test_reset_removes_data(self, db):
        KnowledgeRepository(db).insert(title="Gone", type="folder", created_by=1)

        reset_schema(db, "porter unicode61")

        assert KnowledgeRepository(db).count() == 0
        assert "knowledge_items_fts" in _table_names(db)


class TestFtsSync:
    """The triggers keep the FTS table in step with knowledge_items."""

    def test_insert_is_searchable(self, db):
        repo = KnowledgeRepository(db)
        repo.insert(title="Billing", type="document", created_by=1, content="Download invoices")

        assert len(repo.keyword_search("invoices", limit=5)) == 1

    def test_update_reindexes_content(self, db):
        repo = KnowledgeRepository(db)
        item_id = repo.insert(title="Billing", type="document", created_by=1, content="old words")

        repo.update(item_id, {"content": "fresh words"})

        assert repo.keyword_search("old", limit=5) == []
        assert len(repo.keyword_search("fresh", limit=5)) == 1

    def test_delete_removes_from_index(self, db):
        repo = KnowledgeRepository(db)
        item_id = repo.insert(title="Billing", type="document", created_by=1, content="invoices")

        repo.delete(item_id)

        assert repo.keyword_search("invoices", limit=5) == []


class TestGetStatistics:

    def test_empty_database(self, db):
        stats = get_statistics(db)

        assert stats["total_items"] == 0
        assert stats["embedded_items"] == 0
        assert stats["items_by_type"] == {}
        assert stats["total_conversations"] == 0
        assert stats["total_messages"] == 0
        assert stats["newest_update"] is None

    def test_counts(self, db):
        repo = KnowledgeRepository(db)
        repo.insert(title="Guides", type="folder", created_by=1)
        repo.insert(title="Intro", type="document", created_by=1, content="hi", embedding=[1.0, 0.0, 0.0])
        conversations = ConversationRepository(db)
        conversations.save_conversation(Conversation(user_id=1))
        deleted = conversations.save_conversation(Conversation(user_id=1))
        conversations.delete_conversation(deleted.id)

        stats = get_statistics(db)

        assert stats["total_items"] == 2
        assert stats["embedded_items"] == 1
        assert stats["items_by_type"] == {"folder": 1, "document": 1}
        assert stats["total_conversations"] == 1
        assert stats["newest_update"] is not None
