from dataclasses import dataclass
from typing import ClassVar

from adinvoice.config.settings import Settings
from adinvoice.extraction.base import BaseFieldExtractor
from adinvoice.extraction.example_client_adapter import ExampleClientAdapter
from adinvoice.extraction.extractor import FieldExtractor
from adinvoice.extraction.openai_client_adapter import OpenAIClientAdapter
from adinvoice.logging.logger import Log


@dataclass(frozen=True)
class ProviderProfile:
    """Endpoint and capabilities of one OpenAI-compatible provider."""

    base_url: str | None
    structured_output: bool = True


class FieldExtractorFactory:
    """Creates the field extractor for settings.extraction_provider.

    Per-provider credentials live in settings as
    ``extraction_{provider}_api_key`` / ``_model_name`` / ``_timeout_seconds``.
    """

    PROFILES: ClassVar[dict[str, ProviderProfile]] = {
        "openai": ProviderProfile(base_url=None),
        "openrouter": ProviderProfile(base_url="https://openrouter.ai/api/v1"),
        "groq": ProviderProfile(base_url="https://api.groq.com/openai/v1"),
        "together": ProviderProfile(base_url="https://api.together.xyz/v1"),
        "deepseek": ProviderProfile(
            base_url="https://api.deepseek.com/v1", structured_output=False
        ),
        "ollama": ProviderProfile(base_url="http://localhost:11434/v1"),
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseFieldExtractor:
        provider = settings.extraction_provider.strip().lower()
        if provider == "example":
            return FieldExtractor(client=ExampleClientAdapter(), model="example", temperature=0.0)

        profile = cls._profile(provider, settings)
        Log.info(f"Using {provider} for invoice field extraction")
        client = OpenAIClientAdapter(
            api_key=_provider_value(settings, provider, "api_key") or "",
            timeout_seconds=_provider_value(settings, provider, "timeout_seconds") or 30,
            base_url=profile.base_url,
            structured_output=profile.structured_output,
        )
        # Only OpenAI gets the configurable temperature; others run deterministic.
        temperature = settings.extraction_openai_temperature if provider == "openai" else 0.0
        return FieldExtractor(
            client=client,
            model=_provider_value(settings, provider, "model_name") or "",
            temperature=temperature,
        )

    @classmethod
    def _profile(cls, provider: str, settings: Settings) -> ProviderProfile:
        if provider == "openai_compatible":
            url = settings.extraction_openai_compatible_base_url.strip()
            if not url:
                raise ValueError(
                    "extraction_openai_compatible_base_url is required for "
                    "extraction_provider=openai_compatible"
                )
            return ProviderProfile(base_url=url, structured_output=False)
        try:
            return cls.PROFILES[provider]
        except KeyError:
            supported = ["example", "openai_compatible", *sorted(cls.PROFILES)]
            raise ValueError(
                f"Unknown extraction provider '{provider}'. Choose from: {supported}"
            ) from None


def _provider_value(settings: Settings, provider: str, name: str):  # type: ignore[no-untyped-def]
    return getattr(settings, f"extraction_{provider}_{name}", None)
