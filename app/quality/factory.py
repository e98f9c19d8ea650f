from typing import ClassVar

from app.config.settings import Settings
from app.content.text_extractor import ContentTextExtractor
from app.quality.analyzer import QualityAnalyzer
from app.quality.base import BaseQualityService
from app.quality.example_client_adapter import ExampleClientAdapter
from app.quality.openai_client_adapter import OpenAIClientAdapter


class QualityServiceFactory:
    """Creates the configured quality service."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
        "ollama": "http://localhost:11434/v1",
    }

    @classmethod
    def create(
        cls, settings: Settings, text_extractor: ContentTextExtractor
    ) -> BaseQualityService:
        """Create a configured quality service from application settings."""
        provider = settings.quality_provider.lower()
        if provider == "example":
            return QualityAnalyzer(
                client=ExampleClientAdapter(),
                text_extractor=text_extractor,
                model="example",
            )
        client = OpenAIClientAdapter(
            api_key=cls._resolve_api_key(provider, settings),
            timeout_seconds=settings.quality_timeout_seconds,
            base_url=cls._resolve_base_url(provider, settings),
        )
        return QualityAnalyzer(
            client=client,
            text_extractor=text_extractor,
            model=cls._resolve_model_name(provider, settings),
            temperature=settings.quality_openai_temperature if provider == "openai" else 0.0,
            max_chars=settings.quality_max_chars,
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        if provider == "openai":
            return None
        if provider == "openai_compatible":
            url = settings.quality_openai_compatible_base_url.strip()
            if not url:
                raise ValueError(
                    "quality_openai_compatible_base_url is required for "
                    "quality_provider=openai_compatible"
                )
            return url
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return default_base_url
        supported = [
            "example",
            "openai",
            "openai_compatible",
            *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS),
        ]
        raise ValueError(f"Unknown quality provider '{provider}'. Choose from: {supported}")

    @classmethod
    def _resolve_api_key(cls, provider: str, settings: Settings) -> str:
        key_map = {
            "openai": settings.quality_openai_api_key,
            "openai_compatible": settings.quality_openai_compatible_api_key,
            "openrouter": settings.quality_openrouter_api_key,
            "ollama": settings.quality_ollama_api_key or "ollama",
        }
        return key_map.get(provider, "")

    @classmethod
    def _resolve_model_name(cls, provider: str, settings: Settings) -> str:
        key_map = {
            "openai": settings.quality_openai_model_name,
            "openai_compatible": settings.quality_openai_compatible_model_name,
            "openrouter": settings.quality_openrouter_model_name,
            "ollama": settings.quality_ollama_model_name,
        }
        return key_map.get(provider, "")
