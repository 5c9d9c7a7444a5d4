"""
Embedding provider for the Similar-Ticket Owner Router.

Uses an OpenAI-compatible embeddings API to turn a ticket's subject and
content into a semantic vector. Transient API failures (connection errors,
timeouts, rate limits, server errors) are retried with exponential backoff.
"""

import logging

import openai
from openai import OpenAI
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .config import EmbeddingConfig
from .models import EmbeddingVector


logger = logging.getLogger(__name__)


class EmbeddingFetchError(Exception):
    """Error when retrieving an embedding from the API."""
    pass


TRANSIENT_ERRORS = (
    openai.APIConnectionError,
    openai.RateLimitError,
    openai.InternalServerError,
)


def build_ticket_text(subject: str, content: str) -> str:
    """
    Build the text that represents a ticket for embedding.

    Args:
        subject: Ticket name.
        content: Ticket description.

    Returns:
        Text combining the name and description.
    """
    return f"Ticket name: {subject};\n Ticket description: {content}"


class OpenAIEmbeddingProvider:
    """
    Embedding provider backed by the OpenAI embeddings endpoint.

    The client is created per provider instance; nothing is shared at
    module level.
    """

    RETRY_WAIT = wait_exponential(multiplier=1, min=2, max=10)

    def __init__(self, config: EmbeddingConfig):
        """
        Initialize the provider.

        Args:
            config: Embedding API configuration.
        """
        self._config = config

        # Retries are handled here with tenacity, not by the SDK
        client_kwargs = {
            "api_key": config.api_key,
            "max_retries": 0,
        }
        if config.api_base_url:
            client_kwargs["base_url"] = config.api_base_url

        self._client = OpenAI(**client_kwargs)

        logger.info(f"Initialized embedding provider with model: {config.model}")

    def _request_embedding(self, text: str) -> EmbeddingVector:
        retrying = Retrying(
            stop=stop_after_attempt(max(1, self._config.max_retries)),
            wait=self.RETRY_WAIT,
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            before_sleep=lambda retry_state: logger.warning(
                f"Retrying embedding request after error: {retry_state.outcome.exception()}"
            ),
            reraise=True,
        )
        for attempt in retrying:
            with attempt:
                response = self._client.embeddings.create(
                    model=self._config.model,
                    input=text,
                )
        return list(response.data[0].embedding)

    def embed(self, text: str) -> EmbeddingVector:
        """
        Get the embedding for a piece of text.

        Args:
            text: Text to embed.

        Returns:
            Embedding vector.

        Raises:
            EmbeddingFetchError: If the request fails after retries or the
                API returns no embedding.
        """
        logger.debug(f"Requesting embedding for {len(text)} characters")

        try:
            embedding = self._request_embedding(text)
        except Exception as e:
            logger.error(f"Embedding request failed: {e}")
            raise EmbeddingFetchError(f"Failed to fetch embedding: {e}") from e

        if not embedding:
            raise EmbeddingFetchError("Empty embedding returned")

        logger.debug(f"Received embedding with {len(embedding)} dimensions")
        return embedding

    def embed_ticket(self, subject: str, content: str) -> EmbeddingVector:
        """Get the embedding for a ticket's subject and content."""
        return self.embed(build_ticket_text(subject, content))
