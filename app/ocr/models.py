from dataclasses import dataclass, field
from enum import Enum

from app.ocr.exceptions import UnknownProviderError


class ProviderKind(str, Enum):
    """Supported OCR vendors."""

    OPENAI = "openai"
    GEMINI = "gemini"
    MISTRAL = "mistral"

    @classmethod
    def parse(cls, value: str) -> "ProviderKind":
        """Resolve a provider name, accepting legacy ``*_API_KEY`` labels."""
        normalized = value.strip().lower().removesuffix("_api_key")
        try:
            return cls(normalized)
        except ValueError:
            supported = [kind.value for kind in cls]
            raise UnknownProviderError(
                f"Unknown OCR provider '{value}'. Choose from: {supported}"
            ) from None

    def storage_labels(self) -> tuple[str, str]:
        """Labels a stored key for this provider may carry in ``api_keys``."""
        return self.value, f"{self.value.upper()}_API_KEY"


@dataclass(frozen=True)
class ProviderCredential:
    """Decrypted provider secret for one owner. Never logged."""

    owner_id: str
    provider: ProviderKind
    secret: str = field(repr=False)


@dataclass(frozen=True)
class ExtractionRecord:
    """One row extracted from a petition page. Every field is optional."""

    name: str | None = None
    address: str | None = None
    date: str | None = None
    ward: str | None = None
    extra: dict[str, str | int | float | bool] = field(default_factory=dict)


@dataclass(frozen=True)
class AnnotatedRecord:
    """Extraction record with its position in the processed batch."""

    record: ExtractionRecord
    page_number: int
    row_number: int
    filename: str


@dataclass
class BatchProgress:
    """Progress of a running batch, updated at every chunk boundary."""

    total_count: int
    total_chunks: int
    completed_count: int = 0
    current_chunk_index: int = 0

    @property
    def fraction(self) -> float:
        if self.total_count == 0:
            return 1.0
        return min(self.completed_count / self.total_count, 1.0)
