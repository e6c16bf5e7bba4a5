"""
Pytest fixtures and configuration for the test suite.

Provides temporary directories, a temporary config and database, and
mocked OpenAI clients so tests are isolated and never reach the network.
"""

import json
import pytest
import tempfile
import shutil
from pathlib import Path
from typing import Generator, List
from unittest.mock import MagicMock

import httpx

import sys
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from knowledge_assistant.core.config_loader import EmbeddingConfig, SearchConfig, ChatConfig  # noqa: E402

TEST_TOKENIZER = "porter unicode61"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """
    Create a temporary directory for test files.

    Yields:
        Path to temporary directory, cleaned up after test.
    """
    tmp = tempfile.mkdtemp(prefix="knowledge_assistant_test_")
    yield Path(tmp)
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def temp_config(temp_dir: Path) -> Generator[Path, None, None]:
    """
    Create a temporary config.json for testing.

    Args:
        temp_dir: Temporary directory fixture.

    Yields:
        Path to temporary config file.
    """
    config_dir = temp_dir / "config"
    config_dir.mkdir()

    output_dir = temp_dir / "output"
    output_dir.mkdir()

    logs_dir = output_dir / "logs"
    logs_dir.mkdir()

    config_data = {
        "paths": {
            "database_path": str(output_dir / "test.db"),
            "logs_directory": str(logs_dir)
        },
        "embedding": {
            "endpoint": "http://embeddings.test/v1",
            "api_key": "test-key",
            "model": "text-embedding-ada-002",
            "dimensions": 3,
            "max_retries": 3,
            "retry_delay_seconds": 0.0,
            "request_timeout_seconds": 5.0
        },
        "search": {
            "default_limit": 5,
            "default_threshold": 0.7,
            "default_mode": "hybrid",
            "tokenizer": TEST_TOKENIZER
        },
        "chat": {
            "model": "gpt-4",
            "knowledge_results": 3,
            "history_limit": 10
        },
        "assistant": {
            "organization_name": "Acme",
            "support_email": "help@acme.test",
            "navigation_links": [
                {
                    "label": "Billing",
                    "path": "/settings/billing",
                    "description": "Manage invoices",
                    "keywords": ["invoice", "payment"]
                }
            ]
        },
        "gui": {
            "page_title": "Test Assistant",
            "default_user_id": 7
        },
        "logging": {
            "level": "DEBUG",
            "format": "%(levelname)s - %(message)s",
            "max_file_size_mb": 1,
            "backup_count": 1
        }
    }

    config_path = config_dir / "config.json"
    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(config_data, f)

    yield config_path


@pytest.fixture
def reset_config_singleton():
    """
    Reset the config singleton between tests.

    This ensures each test gets a fresh config instance.
    """
    from knowledge_assistant.core import config_loader
    config_loader._config_instance = None
    yield
    config_loader._config_instance = None


@pytest.fixture
def reset_logger_singleton():
    """
    Reset the logger initialization flag between tests.
    """
    from knowledge_assistant.core import logger
    logger._logger_initialized = False
    yield
    logger._logger_initialized = False


@pytest.fixture
def configured_db(temp_config, reset_config_singleton):
    """
    Load the temp config as the global config.

    Code that falls back to get_config() then sees temp paths only.
    """
    from knowledge_assistant.core.config_loader import get_config
    yield get_config(temp_config)


@pytest.fixture
def db(temp_dir: Path):
    """
    A DatabaseManager on a fresh temporary database with the schema created.
    """
    from knowledge_assistant.database import DatabaseManager, init_schema

    manager = DatabaseManager(temp_dir / "test.db")
    init_schema(manager, TEST_TOKENIZER)
    return manager


@pytest.fixture
def embedding_config() -> EmbeddingConfig:
    """Embedding settings with no retry delay and 3-dimensional vectors."""
    return EmbeddingConfig(
        endpoint="http://embeddings.test/v1",
        api_key="test-key",
        model="text-embedding-ada-002",
        dimensions=3,
        max_input_chars=8000,
        max_retries=3,
        retry_delay_seconds=0.0,
        request_timeout_seconds=5.0
    )


@pytest.fixture
def search_config() -> SearchConfig:
    return SearchConfig(
        default_limit=5,
        default_threshold=0.7,
        default_mode="hybrid",
        keyword_score=0.8,
        snippet_length=200,
        tokenizer=TEST_TOKENIZER
    )


@pytest.fixture
def chat_config() -> ChatConfig:
    return ChatConfig(
        model="gpt-4",
        feedback_model="gpt-3.5-turbo",
        temperature=0.7,
        max_tokens=1000,
        knowledge_results=3,
        history_limit=10,
        enable_feedback_detection=False
    )


def make_embedding_response(vector: List[float]) -> MagicMock:
    """Build an object shaped like an embeddings.create() response."""
    response = MagicMock()
    item = MagicMock()
    item.embedding = vector
    response.data = [item]
    return response


def make_completion_response(content: str) -> MagicMock:
    """Build an object shaped like a chat.completions.create() response."""
    response = MagicMock()
    choice = MagicMock()
    choice.message.content = content
    response.choices = [choice]
    return response


def make_request() -> httpx.Request:
    return httpx.Request("POST", "http://embeddings.test/v1/embeddings")


def make_response(status_code: int) -> httpx.Response:
    return httpx.Response(status_code, request=make_request())


@pytest.fixture
def mock_openai_client() -> MagicMock:
    """
    Mock OpenAI client returning a fixed 3-dimensional embedding.
    """
    client = MagicMock()
    client.embeddings.create.return_value = make_embedding_response([0.1, 0.2, 0.3])
    client.chat.completions.create.return_value = make_completion_response("Hello from the assistant")
    return client


@pytest.fixture
def knowledge_repo(db):
    from knowledge_assistant.database import KnowledgeRepository
    return KnowledgeRepository(db)
