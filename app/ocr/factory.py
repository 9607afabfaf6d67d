import asyncio

from app.config.pipeline_config import PipelineConfig
from app.ocr.base import BaseOcrProvider
from app.ocr.gateway import OcrGateway
from app.ocr.gemini_provider import GeminiProvider
from app.ocr.models import ProviderKind
from app.ocr.openai_provider import OpenAICompatibleProvider
from app.ocr.retry import SleepFn


class OcrGatewayFactory:
    """Creates the gateway with one adapter per configured provider."""

    ADAPTERS: dict[ProviderKind, type[BaseOcrProvider]] = {
        ProviderKind.OPENAI: OpenAICompatibleProvider,
        ProviderKind.GEMINI: GeminiProvider,
        ProviderKind.MISTRAL: OpenAICompatibleProvider,
    }

    @classmethod
    def create(cls, config: PipelineConfig, *, sleep: SleepFn = asyncio.sleep) -> OcrGateway:
        providers: dict[ProviderKind, BaseOcrProvider] = {}
        for kind, provider_config in config.providers.items():
            adapter_cls = cls.ADAPTERS.get(kind)
            if adapter_cls is None:
                raise ValueError(f"No OCR adapter for provider '{kind.value}'")
            providers[kind] = adapter_cls(provider_config, sleep=sleep)
        return OcrGateway(providers)
