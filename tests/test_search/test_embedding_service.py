"""
Tests for the embedding service module.

Tests embedding generation, input truncation and error resilience.
Uses a mocked OpenAI client to avoid API calls.
"""

import dataclasses

import pytest
from unittest.mock import patch

from openai import (
    APIConnectionError,
    APITimeoutError,
    AuthenticationError,
    BadRequestError,
    RateLimitError,
)

from conftest import make_embedding_response, make_request, make_response
from knowledge_assistant.search.embedding_service import EmbeddingService

SLEEP_PATH = "knowledge_assistant.search.embedding_service.time.sleep"


@pytest.fixture
def service(embedding_config, mock_openai_client) -> EmbeddingService:
    return EmbeddingService(embedding_config, client=mock_openai_client)


class TestEmbeddingService:
    """Tests for EmbeddingService construction and info."""

    def test_client_created_lazily(self, embedding_config):
        """Test that no client exists until the first request."""
        service = EmbeddingService(embedding_config)

        assert service._client is None
        assert service.get_model_info()["initialized"] is False

    def test_get_model_info(self, service):
        info = service.get_model_info()

        assert info["model"] == "text-embedding-ada-002"
        assert info["dimensions"] == 3
        assert info["endpoint"] == "http://embeddings.test/v1"
        assert info["configured"] is True
        assert info["initialized"] is True

    def test_uses_global_config_by_default(self, configured_db):
        service = EmbeddingService()

        assert service.config.dimensions == 3


class TestGenerateEmbedding:
    """Tests for generate_embedding with a mocked client."""

    def test_returns_vector(self, service, mock_openai_client):
        embedding = service.generate_embedding("How do I reset my password?")

        assert embedding == [0.1, 0.2, 0.3]
        mock_openai_client.embeddings.create.assert_called_once_with(
            model="text-embedding-ada-002",
            input="How do I reset my password?",
            timeout=5.0
        )

    def test_blank_text_returns_none(self, service, mock_openai_client):
        assert service.generate_embedding("") is None
        assert service.generate_embedding("   ") is None
        mock_openai_client.embeddings.create.assert_not_called()

    def test_no_api_key_returns_none(self, embedding_config):
        config = dataclasses.replace(embedding_config, api_key="")
        service = EmbeddingService(config)

        assert service.is_configured is False
        assert service.generate_embedding("hello") is None
        assert service._client is None

    def test_input_truncated(self, embedding_config, mock_openai_client):
        config = dataclasses.replace(embedding_config, max_input_chars=10)
        service = EmbeddingService(config, client=mock_openai_client)

        service.generate_embedding("x" * 25)

        kwargs = mock_openai_client.embeddings.create.call_args.kwargs
        assert kwargs["input"] == "x" * 10


class TestEmbeddingResilience:
    """Transient errors are retried, everything else fails immediately."""

    def test_connection_error_retried_then_succeeds(self, service, mock_openai_client):
        mock_openai_client.embeddings.create.side_effect = [
            APIConnectionError(request=make_request()),
            make_embedding_response([0.4, 0.5, 0.6]),
        ]

        with patch(SLEEP_PATH) as mock_sleep:
            embedding = service.generate_embedding("hello")

        assert embedding == [0.4, 0.5, 0.6]
        assert mock_openai_client.embeddings.create.call_count == 2
        mock_sleep.assert_called_once_with(0.0)

    def test_timeout_exhausts_attempts(self, service, mock_openai_client):
        mock_openai_client.embeddings.create.side_effect = APITimeoutError(request=make_request())

        with patch(SLEEP_PATH) as mock_sleep:
            embedding = service.generate_embedding("hello")

        assert embedding is None
        assert mock_openai_client.embeddings.create.call_count == 3
        assert mock_sleep.call_count == 2

    def test_retry_delay_from_config(self, embedding_config, mock_openai_client):
        config = dataclasses.replace(embedding_config, max_retries=2, retry_delay_seconds=1.5)
        service = EmbeddingService(config, client=mock_openai_client)
        mock_openai_client.embeddings.create.side_effect = APIConnectionError(request=make_request())

        with patch(SLEEP_PATH) as mock_sleep:
            assert service.generate_embedding("hello") is None

        mock_sleep.assert_called_once_with(1.5)

    @pytest.mark.parametrize("error_class, status_code", [
        (RateLimitError, 429),
        (AuthenticationError, 401),
        (BadRequestError, 400),
    ])
    def test_status_errors_not_retried(self, service, mock_openai_client, error_class, status_code):
        mock_openai_client.embeddings.create.side_effect = error_class(
            "rejected", response=make_response(status_code), body=None
        )

        with patch(SLEEP_PATH) as mock_sleep:
            embedding = service.generate_embedding("hello")

        assert embedding is None
        assert mock_openai_client.embeddings.create.call_count == 1
        mock_sleep.assert_not_called()


class TestMalformedResponses:
    """Responses that carry no usable vector fail with None."""

    def test_empty_data(self, service, mock_openai_client):
        response = make_embedding_response([0.1, 0.2, 0.3])
        response.data = []
        mock_openai_client.embeddings.create.return_value = response

        assert service.generate_embedding("hello") is None
        assert mock_openai_client.embeddings.create.call_count == 1

    def test_missing_embedding(self, service, mock_openai_client):
        response = make_embedding_response([0.1, 0.2, 0.3])
        response.data[0].embedding = None
        mock_openai_client.embeddings.create.return_value = response

        assert service.generate_embedding("hello") is None

    @pytest.mark.parametrize("vector", [
        [0.1, 0.2, 0.3, 0.4, 0.5],
        [0.1, 0.2],
    ])
    def test_wrong_dimensions(self, service, mock_openai_client, vector):
        mock_openai_client.embeddings.create.return_value = make_embedding_response(vector)

        assert service.generate_embedding("hello") is None
