import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from app.config.pipeline_config import ProviderConfig
from app.logging.logger import Log
from app.ocr.exceptions import ParseError
from app.ocr.models import ProviderCredential
from app.ocr.retry import RetryPolicy, SleepFn
from app.preprocessing.models import EncodedImage


@dataclass(frozen=True)
class ProviderRequest:
    """One vendor call, built per image and discarded after it resolves."""

    payload: dict[str, Any] = field(repr=False)
    credential: ProviderCredential
    url: str | None = None


class BaseOcrProvider(ABC):
    """Contract for provider-specific OCR adapters.

    Subclasses supply the wire format (``build_request``/``send``) and the
    output parsing (``parse_response``); ``extract`` drives them under the
    configured retry policy.
    """

    def __init__(self, config: ProviderConfig, *, sleep: SleepFn = asyncio.sleep) -> None:
        self._config = config
        self._sleep = sleep
        self.name = config.kind.value

    @property
    def retry_policy(self) -> RetryPolicy | None:
        return self._config.retry

    @abstractmethod
    def build_request(
        self,
        image: EncodedImage,
        prompt: str,
        credential: ProviderCredential,
    ) -> ProviderRequest:
        """Build the vendor payload for one image."""

    @abstractmethod
    async def send(self, request: ProviderRequest) -> str:
        """Perform the call and return the model's text output.

        Raises:
            AuthError, RateLimitError, BadRequestError, ProviderError: on a
                non-success response or transport failure.
            ParseError: if the response carries no text.
        """

    @abstractmethod
    def parse_response(self, text: str) -> list[Any]:
        """Parse model text into raw row objects.

        Raises:
            ParseError: if no JSON array can be recovered.
        """

    async def extract(
        self,
        image: EncodedImage,
        prompt: str,
        credential: ProviderCredential,
    ) -> list[Any]:
        """Run one extraction. Unparseable output yields an empty list."""
        request = self.build_request(image, prompt, credential)
        try:
            text = await self._send_with_policy(request, image.filename)
            rows = self.parse_response(text)
        except ParseError as exc:
            Log.warning(f"{self.name}: unparseable output for {image.filename}: {exc}")
            return []
        Log.debug(f"{self.name}: {len(rows)} row(s) for {image.filename}")
        return rows

    async def _send_with_policy(self, request: ProviderRequest, filename: str) -> str:
        policy = self.retry_policy
        if policy is None:
            return await self.send(request)
        return await policy.call(
            lambda: self.send(request),
            label=f"{self.name} {filename}",
            sleep=self._sleep,
        )
