from typing import ClassVar

from app.config.settings import Settings
from app.extraction.client_base import BaseCompletionClient
from app.extraction.example_client_adapter import ExampleClientAdapter
from app.extraction.openai_client_adapter import OpenAIClientAdapter
from app.extraction.retry import RetryPolicy
from app.extraction.structured_extractor import StructuredDataExtractor
from app.extraction.vision_extractor import VisionExtractor


class CompletionClientFactory:
    """Creates the configured completion client and the extractors built on it."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
        "together": "https://api.together.xyz/v1",
        "ollama": "http://localhost:11434/v1",
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseCompletionClient:
        """Create a completion client from application settings."""
        provider = settings.extraction_provider.lower()
        if provider == "example":
            return ExampleClientAdapter()
        return OpenAIClientAdapter(
            api_key=settings.extraction_api_key,
            timeout_seconds=settings.extraction_timeout_seconds,
            base_url=cls._resolve_base_url(provider, settings),
        )

    @classmethod
    def create_structured_extractor(
        cls,
        settings: Settings,
        client: BaseCompletionClient,
    ) -> StructuredDataExtractor:
        return StructuredDataExtractor(
            client=client,
            model=settings.extraction_model_name,
            temperature=settings.extraction_temperature,
            retry_policy=cls.retry_policy("text extraction", settings.text_max_attempts, settings),
        )

    @classmethod
    def create_vision_extractor(
        cls,
        settings: Settings,
        client: BaseCompletionClient,
    ) -> VisionExtractor:
        return VisionExtractor(
            client=client,
            model=settings.extraction_model_name,
            temperature=settings.extraction_temperature,
            retry_policy=cls.retry_policy(
                "vision extraction", settings.vision_max_attempts, settings
            ),
        )

    @staticmethod
    def retry_policy(name: str, max_attempts: int, settings: Settings) -> RetryPolicy:
        return RetryPolicy(
            name=name,
            max_attempts=max_attempts,
            backoff_seconds=settings.retry_backoff_seconds,
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        if provider == "openai":
            return settings.extraction_base_url or None
        if provider == "openai_compatible":
            url = (settings.extraction_base_url or "").strip()
            if not url:
                raise ValueError(
                    "extraction_base_url is required for "
                    "extraction_provider=openai_compatible"
                )
            return url
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return settings.extraction_base_url or default_base_url
        supported = [
            "example",
            "openai",
            "openai_compatible",
            *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS),
        ]
        raise ValueError(
            f"Unknown extraction provider '{provider}'. Choose from: {supported}"
        )
