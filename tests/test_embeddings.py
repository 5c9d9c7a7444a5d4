"""Tests for the embedding provider."""

import httpx
import openai
import pytest
from unittest.mock import MagicMock, Mock, patch

from tenacity import wait_none

from ticket_router.config import EmbeddingConfig
from ticket_router.embeddings import (
    EmbeddingFetchError,
    OpenAIEmbeddingProvider,
    build_ticket_text,
)


def embedding_response(vector):
    """Mimic the SDK's CreateEmbeddingResponse."""
    response = Mock()
    response.data = [Mock(embedding=vector)]
    return response


@pytest.fixture
def config() -> EmbeddingConfig:
    return EmbeddingConfig(
        api_key="sk-test",
        api_base_url=None,
        model="text-embedding-ada-002",
        max_retries=3,
    )


@pytest.fixture
def provider(config):
    """Provider with a mocked OpenAI client and no backoff delay."""
    with patch("ticket_router.embeddings.OpenAI"):
        provider = OpenAIEmbeddingProvider(config)
    provider._client = MagicMock()
    provider.RETRY_WAIT = wait_none()
    return provider


class TestBuildTicketText:
    """Tests for build_ticket_text."""

    def test_format(self):
        text = build_ticket_text("Login broken", "Cannot sign in since Monday")
        assert text == "Ticket name: Login broken;\n Ticket description: Cannot sign in since Monday"


class TestOpenAIEmbeddingProvider:
    """Tests for OpenAIEmbeddingProvider."""

    def test_client_configuration(self, config):
        """Test the SDK client is built from config with SDK retries disabled."""
        with patch("ticket_router.embeddings.OpenAI") as mock_openai:
            OpenAIEmbeddingProvider(config)
        mock_openai.assert_called_once_with(api_key="sk-test", max_retries=0)

    def test_custom_base_url(self):
        config = EmbeddingConfig(api_key="sk-test", api_base_url="http://localhost:8080/v1")
        with patch("ticket_router.embeddings.OpenAI") as mock_openai:
            OpenAIEmbeddingProvider(config)
        assert mock_openai.call_args.kwargs["base_url"] == "http://localhost:8080/v1"

    def test_embed_success(self, provider):
        provider._client.embeddings.create.return_value = embedding_response([0.1, 0.2])

        assert provider.embed("hello") == [0.1, 0.2]
        provider._client.embeddings.create.assert_called_once_with(
            model="text-embedding-ada-002",
            input="hello",
        )

    def test_embed_ticket_uses_ticket_text(self, provider):
        provider._client.embeddings.create.return_value = embedding_response([1.0])

        provider.embed_ticket("Subject", "Body")

        call = provider._client.embeddings.create.call_args
        assert call.kwargs["input"] == build_ticket_text("Subject", "Body")

    def test_retries_transient_errors(self, provider):
        """Test connection errors are retried until success."""
        request = httpx.Request("POST", "https://api.openai.com/v1/embeddings")
        provider._client.embeddings.create.side_effect = [
            openai.APIConnectionError(request=request),
            embedding_response([0.5, 0.5]),
        ]

        assert provider.embed("hello") == [0.5, 0.5]
        assert provider._client.embeddings.create.call_count == 2

    def test_gives_up_after_max_retries(self, provider):
        request = httpx.Request("POST", "https://api.openai.com/v1/embeddings")
        provider._client.embeddings.create.side_effect = openai.APIConnectionError(request=request)

        with pytest.raises(EmbeddingFetchError):
            provider.embed("hello")
        assert provider._client.embeddings.create.call_count == 3

    def test_non_transient_error_not_retried(self, provider):
        provider._client.embeddings.create.side_effect = RuntimeError("bad request")

        with pytest.raises(EmbeddingFetchError, match="bad request"):
            provider.embed("hello")
        assert provider._client.embeddings.create.call_count == 1

    def test_empty_embedding(self, provider):
        provider._client.embeddings.create.return_value = embedding_response([])

        with pytest.raises(EmbeddingFetchError, match="Empty embedding"):
            provider.embed("hello")
