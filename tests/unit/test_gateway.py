from unittest.mock import AsyncMock, MagicMock

import pytest

from app.config.pipeline_config import CropConfig, PipelineConfig, ProviderConfig
from app.ocr.base import BaseOcrProvider
from app.ocr.exceptions import UnknownProviderError
from app.ocr.factory import OcrGatewayFactory
from app.ocr.gateway import OcrGateway
from app.ocr.gemini_provider import GeminiProvider
from app.ocr.models import ProviderCredential, ProviderKind
from app.ocr.openai_provider import OpenAICompatibleProvider
from app.preprocessing.models import EncodedImage


def _mock_provider(rows: object) -> MagicMock:
    provider = MagicMock(spec=BaseOcrProvider)
    provider.extract = AsyncMock(return_value=rows)
    return provider


class TestOcrGateway:
    @pytest.mark.asyncio
    async def test_dispatches_to_matching_provider(
        self, encoded_image: EncodedImage, credential: ProviderCredential
    ) -> None:
        openai_provider = _mock_provider([{"name": "A"}])
        gemini_provider = _mock_provider([])
        gateway = OcrGateway(
            {ProviderKind.OPENAI: openai_provider, ProviderKind.GEMINI: gemini_provider}
        )

        rows = await gateway.extract(encoded_image, "p", credential, ProviderKind.OPENAI)

        assert rows == [{"name": "A"}]
        openai_provider.extract.assert_awaited_once_with(encoded_image, "p", credential)
        gemini_provider.extract.assert_not_called()

    @pytest.mark.asyncio
    async def test_none_becomes_empty_list(
        self, encoded_image: EncodedImage, credential: ProviderCredential
    ) -> None:
        gateway = OcrGateway({ProviderKind.OPENAI: _mock_provider(None)})

        assert await gateway.extract(encoded_image, "p", credential, ProviderKind.OPENAI) == []

    @pytest.mark.asyncio
    async def test_rejects_credential_for_other_provider(
        self, encoded_image: EncodedImage, credential: ProviderCredential
    ) -> None:
        gateway = OcrGateway({ProviderKind.GEMINI: _mock_provider([])})

        with pytest.raises(ValueError, match="cannot be used"):
            await gateway.extract(encoded_image, "p", credential, ProviderKind.GEMINI)

    def test_unregistered_provider_raises(self) -> None:
        gateway = OcrGateway({})

        with pytest.raises(UnknownProviderError, match="No OCR provider"):
            gateway.provider(ProviderKind.MISTRAL)


class TestOcrGatewayFactory:
    def test_creates_adapter_per_provider(self) -> None:
        providers = {
            kind: ProviderConfig(kind=kind, model="m", max_output_tokens=10, timeout_seconds=5)
            for kind in ProviderKind
        }
        config = PipelineConfig(crop=CropConfig(0.1, 0.9), providers=providers)

        gateway = OcrGatewayFactory.create(config)

        assert isinstance(gateway.provider(ProviderKind.OPENAI), OpenAICompatibleProvider)
        assert isinstance(gateway.provider(ProviderKind.MISTRAL), OpenAICompatibleProvider)
        assert isinstance(gateway.provider(ProviderKind.GEMINI), GeminiProvider)
        assert gateway.provider(ProviderKind.MISTRAL).name == "mistral"


class TestProviderKind:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("openai", ProviderKind.OPENAI),
            ("GEMINI", ProviderKind.GEMINI),
            ("MISTRAL_API_KEY", ProviderKind.MISTRAL),
            (" openai_api_key ", ProviderKind.OPENAI),
        ],
    )
    def test_parses_names_and_legacy_labels(self, value: str, expected: ProviderKind) -> None:
        assert ProviderKind.parse(value) is expected

    def test_unknown_provider_raises(self) -> None:
        with pytest.raises(UnknownProviderError, match="Unknown OCR provider"):
            ProviderKind.parse("claude")

    def test_credential_repr_hides_secret(self, credential: ProviderCredential) -> None:
        assert "sk-test" not in repr(credential)
