"""
Integration tests for the wired application.

Seeds a knowledge base through the service layer, searches it in every
mode and runs a chat turn, with only the OpenAI calls mocked.

SAFETY NOTE: All tests use the `configured_db` fixture which:
- Creates a temporary directory via tempfile.mkdtemp()
- Points the global config at a temp database path
- Cleans up all temp files after the test
- Never touches real data directories
"""

import pytest
from unittest.mock import MagicMock

from knowledge_assistant.context import AppContext
from knowledge_assistant.database import get_statistics
from knowledge_assistant.search import SearchOptions
from scripts.init_database import seed_items

SEED_ENTRIES = [
    {
        "type": "folder",
        "title": "Billing",
        "children": [
            {
                "type": "document",
                "title": "Downloading invoices",
                "content": "Open Settings > Billing and download any invoice as PDF."
            },
            {
                "type": "url",
                "title": "Pricing page",
                "file_url": "https://acme.test/pricing"
            }
        ]
    },
    {
        "type": "document",
        "title": "Resetting your password",
        "content": "Use the forgot password link on the sign in page."
    }
]


def _fake_embedding(text: str):
    """Three-dimensional vectors keyed on topic words."""
    lowered = text.lower()
    return [
        1.0 if "invoice" in lowered else 0.0,
        1.0 if "password" in lowered else 0.0,
        0.1
    ]


class TestAppPipeline:
    """
    End-to-end checks across storage, search and chat.

    These tests verify that:
    1. Seeded items are stored with embeddings where their type embeds
    2. Semantic, keyword and hybrid searches agree on the obvious hit
    3. A chat turn is grounded in the knowledge base and stored
    """

    @pytest.fixture
    def context(self, configured_db, mock_openai_client):
        embedding_service = MagicMock()
        embedding_service.generate_embedding.side_effect = _fake_embedding

        context = AppContext.create(configured_db, embedding_service=embedding_service)
        context.ai_service._client = mock_openai_client

        created = seed_items(context.knowledge_service, SEED_ENTRIES, user_id=7, quiet=True)
        assert created == 4
        return context

    def test_seeded_tree(self, context):
        folders, _ = context.knowledge_service.list_items(type="folder")
        children, total = context.knowledge_service.list_items(parent_id=folders[0].id)

        assert total == 2
        assert {child.title for child in children} == {"Downloading invoices", "Pricing page"}
        assert all(child.created_by == 7 for child in children)

    def test_statistics(self, context):
        stats = get_statistics(context.db)

        assert stats["total_items"] == 4
        assert stats["embedded_items"] == 2
        assert stats["items_by_type"] == {"folder": 1, "document": 2, "url": 1}

    def test_semantic_search(self, context):
        results = context.knowledge_service.search(
            "invoice", SearchOptions(mode="semantic", threshold=0.9)
        )

        assert [r.title for r in results] == ["Downloading invoices"]
        assert results[0].score == pytest.approx(1.0, abs=1e-6)

    def test_keyword_search(self, context):
        results = context.knowledge_service.search("password", SearchOptions(mode="keyword"))

        assert [r.title for r in results] == ["Resetting your password"]
        assert results[0].score == 0.8

    def test_hybrid_search_dedupes(self, context):
        results, stats = context.knowledge_service.search_with_stats(
            "invoices", SearchOptions(limit=4, mode="hybrid")
        )

        assert [r.title for r in results] == ["Downloading invoices"]
        assert results[0].source == "semantic"
        assert stats.overlap_count == 1
        assert stats.errors == []

    def test_chat_turn(self, context, mock_openai_client):
        reply = context.chat_manager.send_message("Where can I find an invoice?", user_id=7)

        system_prompt = mock_openai_client.chat.completions.create.call_args.kwargs["messages"][0]["content"]
        assert "Downloading invoices" in system_prompt
        assert reply.content == "Hello from the assistant"
        assert [link.label for link in reply.suggested_links] == ["Billing"]
        assert reply.message_id is not None
