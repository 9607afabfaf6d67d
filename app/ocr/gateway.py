from collections.abc import Mapping
from typing import Any

from app.ocr.base import BaseOcrProvider
from app.ocr.exceptions import UnknownProviderError
from app.ocr.models import ProviderCredential, ProviderKind
from app.preprocessing.models import EncodedImage


class OcrGateway:
    """Single extraction entry point over all configured providers."""

    def __init__(self, providers: Mapping[ProviderKind, BaseOcrProvider]) -> None:
        self._providers = dict(providers)

    def provider(self, kind: ProviderKind) -> BaseOcrProvider:
        adapter = self._providers.get(kind)
        if adapter is None:
            raise UnknownProviderError(
                f"No OCR provider registered for '{kind.value}'. "
                f"Available: {[k.value for k in self._providers]}"
            )
        return adapter

    def resolve(
        self, credential: ProviderCredential, provider_kind: ProviderKind
    ) -> BaseOcrProvider:
        """Return the adapter for a provider after checking the credential matches it."""
        if credential.provider is not provider_kind:
            raise ValueError(
                f"Credential for '{credential.provider.value}' cannot be used "
                f"with provider '{provider_kind.value}'"
            )
        return self.provider(provider_kind)

    async def extract(
        self,
        image: EncodedImage,
        prompt: str,
        credential: ProviderCredential,
        provider_kind: ProviderKind,
    ) -> list[Any]:
        """Extract raw rows from one image. Never returns None."""
        rows = await self.resolve(credential, provider_kind).extract(image, prompt, credential)
        return rows if rows is not None else []
