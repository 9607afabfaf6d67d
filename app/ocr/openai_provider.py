from typing import Any

import httpx
import openai

from app.ocr.base import BaseOcrProvider, ProviderRequest
from app.ocr.exceptions import ParseError, ProviderError, error_for_status
from app.ocr.models import ProviderCredential
from app.ocr.response_parser import parse_fenced
from app.preprocessing.models import EncodedImage


class OpenAICompatibleProvider(BaseOcrProvider):
    """OCR adapter for OpenAI-style chat completion APIs (OpenAI, Mistral)."""

    def build_request(
        self,
        image: EncodedImage,
        prompt: str,
        credential: ProviderCredential,
    ) -> ProviderRequest:
        payload = {
            "model": self._config.model,
            "max_tokens": self._config.max_output_tokens,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {
                            "type": "image_url",
                            "image_url": {"url": f"data:{image.mime_type};base64,{image.data}"},
                        },
                    ],
                }
            ],
        }
        return ProviderRequest(payload=payload, credential=credential, url=self._config.base_url)

    async def send(self, request: ProviderRequest) -> str:
        try:
            async with openai.AsyncOpenAI(
                api_key=request.credential.secret,
                base_url=request.url,
                timeout=self._config.timeout_seconds,
                max_retries=0,
            ) as client:
                response = await client.chat.completions.create(**request.payload)
        except openai.APIStatusError as exc:
            raise error_for_status(
                exc.status_code, f"{self.name} API error {exc.status_code}: {exc.message}"
            ) from exc
        except (openai.APIConnectionError, httpx.TransportError) as exc:
            raise ProviderError(f"{self.name} network error: {exc}") from exc
        except openai.APIError as exc:
            raise ProviderError(f"{self.name} API error: {exc}") from exc

        if not response.choices:
            raise ParseError(f"{self.name} returned no choices")
        content = response.choices[0].message.content
        if content is None:
            raise ParseError(f"{self.name} returned empty response")
        return content

    def parse_response(self, text: str) -> list[Any]:
        return parse_fenced(text)
