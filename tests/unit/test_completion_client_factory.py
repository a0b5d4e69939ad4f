"""Tests for CompletionClientFactory."""

from unittest.mock import MagicMock, patch

import pytest

from app.extraction.example_client_adapter import ExampleClientAdapter
from app.extraction.factory import CompletionClientFactory
from app.extraction.openai_client_adapter import OpenAIClientAdapter


def _make_settings(provider: str, base_url: str | None = None) -> MagicMock:
    return MagicMock(
        extraction_provider=provider,
        extraction_api_key="k",
        extraction_base_url=base_url,
        extraction_timeout_seconds=60,
        extraction_model_name="gpt-4o-mini",
        extraction_temperature=0.0,
        text_max_attempts=1,
        vision_max_attempts=2,
        retry_backoff_seconds=0.0,
    )


class TestCreateClient:
    def test_example_provider(self) -> None:
        assert isinstance(CompletionClientFactory.create(_make_settings("example")), ExampleClientAdapter)

    def test_openai_provider(self) -> None:
        with patch("app.extraction.openai_client_adapter.openai.OpenAI") as mock_openai:
            client = CompletionClientFactory.create(_make_settings("OpenAI"))

        assert isinstance(client, OpenAIClientAdapter)
        assert mock_openai.call_args.kwargs["base_url"] is None

    def test_known_compatible_provider_uses_default_url(self) -> None:
        with patch("app.extraction.openai_client_adapter.openai.OpenAI") as mock_openai:
            CompletionClientFactory.create(_make_settings("groq"))

        assert mock_openai.call_args.kwargs["base_url"] == "https://api.groq.com/openai/v1"

    def test_openai_compatible_requires_base_url(self) -> None:
        with pytest.raises(ValueError, match="extraction_base_url is required"):
            CompletionClientFactory.create(_make_settings("openai_compatible"))

    def test_openai_compatible_with_base_url(self) -> None:
        with patch("app.extraction.openai_client_adapter.openai.OpenAI") as mock_openai:
            CompletionClientFactory.create(
                _make_settings("openai_compatible", base_url=" http://llm.local/v1 ")
            )

        assert mock_openai.call_args.kwargs["base_url"] == "http://llm.local/v1"

    def test_unknown_provider(self) -> None:
        with pytest.raises(ValueError, match="Unknown extraction provider"):
            CompletionClientFactory.create(_make_settings("acme"))


class TestCreateExtractors:
    def test_vision_extractor_gets_vision_retry_policy(self) -> None:
        extractor = CompletionClientFactory.create_vision_extractor(
            _make_settings("example"), ExampleClientAdapter()
        )
        assert extractor._retry.max_attempts == 2

    def test_structured_extractor_gets_text_retry_policy(self) -> None:
        extractor = CompletionClientFactory.create_structured_extractor(
            _make_settings("example"), ExampleClientAdapter()
        )
        assert extractor._retry.max_attempts == 1
