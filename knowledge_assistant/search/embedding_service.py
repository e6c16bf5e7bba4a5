"""
Embedding service for generating vector representations of text.

Wraps an OpenAI-compatible embeddings endpoint. Input is truncated to a
fixed character budget and each call returns one vector, or None when no
vector could be produced.

Resilience rules:
- Connection failures and timeouts are retried with a fixed delay
- Every other API error (auth, rate limit, bad request) gives up at once
- The SDK's internal retry loop is disabled so the attempt bound holds
"""

import time
from typing import Dict, List, Optional

from openai import OpenAI, APIConnectionError, APIError, APITimeoutError

from ..core import get_config, get_logger, EmbeddingConfig

logger = get_logger(__name__)


class EmbeddingService:
    """
    Service for generating text embeddings using an OpenAI-compatible API.

    The client is created lazily on first use, so constructing the service
    without an API key is allowed; generate_embedding() then returns None.
    """

    def __init__(self, config: EmbeddingConfig = None, client: OpenAI = None):
        """
        Initialize the embedding service.

        Args:
            config: Embedding settings. Defaults to the global config.
            client: Preconfigured OpenAI client, mainly for tests.
        """
        self.config = config or get_config().embedding
        self._client: Optional[OpenAI] = client
        self._initialized = client is not None

    def _ensure_client(self) -> None:
        """Lazily initialize the OpenAI client."""
        if self._client is not None:
            return

        self._client = OpenAI(
            base_url=self.config.endpoint,
            api_key=self.config.api_key,
            timeout=self.config.request_timeout_seconds,
            max_retries=0
        )
        self._initialized = True
        logger.info(f"Embedding service initialized with model: {self.config.model}")

    @property
    def is_configured(self) -> bool:
        """Whether an API key (or an injected client) is available."""
        return bool(self.config.api_key) or self._client is not None

    def generate_embedding(self, text: str) -> Optional[List[float]]:
        """
        Generate an embedding for a single text.

        Args:
            text: Text to embed. Truncated to max_input_chars.

        Returns:
            Embedding vector, or None if the text is blank, no API key is
            configured, the provider could not be reached, or the response
            held no vector of the configured dimensions.
        """
        if not text or not text.strip():
            logger.debug("Skipping embedding for empty text")
            return None

        if not self.is_configured:
            logger.error("Embedding API key not configured, cannot generate embedding")
            return None

        self._ensure_client()

        truncated = text[:self.config.max_input_chars]
        if len(truncated) < len(text):
            logger.debug(f"Truncated embedding input from {len(text)} to {len(truncated)} chars")

        attempts = max(1, self.config.max_retries)

        for attempt in range(1, attempts + 1):
            try:
                response = self._client.embeddings.create(
                    model=self.config.model,
                    input=truncated,
                    timeout=self.config.request_timeout_seconds
                )

            except (APIConnectionError, APITimeoutError) as e:
                # APITimeoutError subclasses APIConnectionError; both are transient
                if attempt < attempts:
                    logger.warning(
                        f"Transient embedding error on attempt {attempt}/{attempts}: {e}. "
                        f"Retrying in {self.config.retry_delay_seconds}s"
                    )
                    time.sleep(self.config.retry_delay_seconds)
                    continue

                logger.error(f"Embedding failed after {attempts} attempts: {e}")
                return None

            except APIError as e:
                logger.error(f"Embedding request rejected: {e}")
                return None

            return self._extract_embedding(response)

        return None

    def _extract_embedding(self, response) -> Optional[List[float]]:
        """Pull the vector out of a response, None if malformed or the wrong size."""
        try:
            embedding = [float(value) for value in response.data[0].embedding]
        except (IndexError, AttributeError, TypeError, ValueError) as e:
            logger.error(f"Malformed embedding response: {e}")
            return None

        if len(embedding) != self.config.dimensions:
            logger.error(
                f"Embedding has {len(embedding)} dimensions, expected {self.config.dimensions}"
            )
            return None

        return embedding

    def get_model_info(self) -> Dict:
        """
        Get information about the embedding model.

        Returns:
            Dictionary with model metadata.
        """
        return {
            "model": self.config.model,
            "dimensions": self.config.dimensions,
            "endpoint": self.config.endpoint,
            "configured": self.is_configured,
            "initialized": self._initialized
        }


if __name__ == "__main__":
    service = EmbeddingService()

    print("Embedding Service Info:")
    info = service.get_model_info()
    for key, value in info.items():
        print(f"  {key}: {value}")

    print(f"\nResilience settings:")
    print(f"  Max attempts: {service.config.max_retries}")
    print(f"  Retry delay: {service.config.retry_delay_seconds}s")
    print(f"  Per-attempt timeout: {service.config.request_timeout_seconds}s")

    print("\nNote: Actual embedding requires valid API credentials in config.")
