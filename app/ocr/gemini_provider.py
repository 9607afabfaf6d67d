from typing import Any

import httpx

from app.ocr.base import BaseOcrProvider, ProviderRequest
from app.ocr.exceptions import ParseError, ProviderError, error_for_status
from app.ocr.models import ProviderCredential
from app.ocr.response_parser import parse_lenient
from app.preprocessing.models import EncodedImage


class GeminiProvider(BaseOcrProvider):
    """OCR adapter for the Gemini ``generateContent`` API.

    The key travels as a ``key`` query parameter, so request URLs must never
    be logged.
    """

    def build_request(
        self,
        image: EncodedImage,
        prompt: str,
        credential: ProviderCredential,
    ) -> ProviderRequest:
        base_url = (self._config.base_url or "").rstrip("/")
        payload = {
            "contents": [
                {
                    "parts": [
                        {"text": prompt},
                        {"inline_data": {"mime_type": image.mime_type, "data": image.data}},
                    ]
                }
            ],
            "generationConfig": {"maxOutputTokens": self._config.max_output_tokens},
        }
        return ProviderRequest(
            payload=payload,
            credential=credential,
            url=f"{base_url}/models/{self._config.model}:generateContent",
        )

    async def send(self, request: ProviderRequest) -> str:
        if request.url is None:
            raise ValueError("Gemini request requires a URL")
        try:
            async with httpx.AsyncClient(timeout=self._config.timeout_seconds) as client:
                response = await client.post(
                    request.url,
                    params={"key": request.credential.secret},
                    json=request.payload,
                )
        except httpx.HTTPError as exc:
            raise ProviderError(f"gemini network error: {type(exc).__name__}") from exc

        if not response.is_success:
            raise error_for_status(
                response.status_code,
                f"gemini API error {response.status_code}: {response.reason_phrase}",
            )
        try:
            data = response.json()
            return str(data["candidates"][0]["content"]["parts"][0]["text"])
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise ParseError(f"gemini response has no text: {exc!r}") from exc

    def parse_response(self, text: str) -> list[Any]:
        return parse_lenient(text)
