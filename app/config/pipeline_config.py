"""Immutable pipeline configuration, built once at process start."""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from app.config.exceptions import ConfigurationError
from app.config.settings import Settings
from app.ocr.models import ProviderKind
from app.ocr.retry import RetryPolicy

_TOP_KEYS = ("top_crop_fraction", "TOP_CROP")
_BOTTOM_KEYS = ("bottom_crop_fraction", "BOTTOM_CROP")


@dataclass(frozen=True)
class CropConfig:
    """Vertical crop window as fractions of page height."""

    top_fraction: float
    bottom_fraction: float

    def __post_init__(self) -> None:
        for name, value in (
            ("top_fraction", self.top_fraction),
            ("bottom_fraction", self.bottom_fraction),
        ):
            if not 0.0 <= value <= 1.0:
                raise ConfigurationError(f"{name} must be within [0, 1], got {value}")
        if self.top_fraction >= self.bottom_fraction:
            raise ConfigurationError(
                f"top_fraction ({self.top_fraction}) must be below "
                f"bottom_fraction ({self.bottom_fraction})"
            )


@dataclass(frozen=True)
class ProviderConfig:
    """Wire and policy settings for one OCR provider."""

    kind: ProviderKind
    model: str
    max_output_tokens: int
    timeout_seconds: float
    base_url: str | None = None
    retry: RetryPolicy | None = None
    request_interval_seconds: float = 0.0


@dataclass(frozen=True)
class PipelineConfig:
    crop: CropConfig
    render_scale: float = 2.0
    pdf_engine: str = "pymupdf"
    batch_size: int = 10
    max_pages: int | None = None
    providers: dict[ProviderKind, ProviderConfig] = field(default_factory=dict)

    def provider(self, kind: ProviderKind) -> ProviderConfig:
        try:
            return self.providers[kind]
        except KeyError:
            raise ConfigurationError(f"Provider '{kind.value}' is not configured") from None


def load_crop_config(path: Path | None) -> CropConfig:
    """Load the crop document.

    Accepts ``top_crop_fraction``/``bottom_crop_fraction`` or the legacy
    ``TOP_CROP``/``BOTTOM_CROP`` keys.

    Raises:
        ConfigurationError: if the document is absent, unreadable or incomplete.
    """
    if path is None:
        raise ConfigurationError("Crop configuration path is not set")
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationError(f"Failed to load crop configuration: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Invalid crop configuration JSON: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigurationError("Crop configuration must be a JSON object")
    return CropConfig(
        top_fraction=_read_fraction(raw, _TOP_KEYS),
        bottom_fraction=_read_fraction(raw, _BOTTOM_KEYS),
    )


def _read_fraction(raw: dict[str, Any], keys: tuple[str, ...]) -> float:
    for key in keys:
        if key in raw:
            value = raw[key]
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigurationError(f"Crop setting '{key}' must be a number")
            return float(value)
    raise ConfigurationError(f"Crop configuration is missing '{keys[0]}'")


def build_pipeline_config(settings: Settings, crop: CropConfig) -> PipelineConfig:
    """Assemble the immutable pipeline configuration from settings."""
    return PipelineConfig(
        crop=crop,
        render_scale=settings.render_scale,
        pdf_engine=settings.pdf_engine,
        batch_size=settings.batch_size,
        max_pages=settings.max_pages,
        providers={
            ProviderKind.OPENAI: ProviderConfig(
                kind=ProviderKind.OPENAI,
                model=settings.openai_model_name,
                max_output_tokens=settings.openai_max_output_tokens,
                timeout_seconds=settings.openai_timeout_seconds,
                base_url=settings.openai_base_url,
                retry=_retry_policy(settings.openai_max_attempts, settings.openai_backoff_seconds),
                request_interval_seconds=settings.openai_request_interval_seconds,
            ),
            ProviderKind.GEMINI: ProviderConfig(
                kind=ProviderKind.GEMINI,
                model=settings.gemini_model_name,
                max_output_tokens=settings.gemini_max_output_tokens,
                timeout_seconds=settings.gemini_timeout_seconds,
                base_url=settings.gemini_base_url,
                retry=_retry_policy(settings.gemini_max_attempts, settings.gemini_backoff_seconds),
                request_interval_seconds=settings.gemini_request_interval_seconds,
            ),
            ProviderKind.MISTRAL: ProviderConfig(
                kind=ProviderKind.MISTRAL,
                model=settings.mistral_model_name,
                max_output_tokens=settings.mistral_max_output_tokens,
                timeout_seconds=settings.mistral_timeout_seconds,
                base_url=settings.mistral_base_url,
                retry=_retry_policy(settings.mistral_max_attempts, settings.mistral_backoff_seconds),
                request_interval_seconds=settings.mistral_request_interval_seconds,
            ),
        },
    )


def _retry_policy(max_attempts: int, backoff_seconds: float) -> RetryPolicy | None:
    if max_attempts <= 1:
        return None
    return RetryPolicy(max_attempts=max_attempts, backoff_seconds=backoff_seconds)
