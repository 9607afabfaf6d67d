import io

import numpy as np
import pytest
from PIL import Image
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from app.config.pipeline_config import CropConfig, ProviderConfig
from app.ocr.models import ProviderCredential, ProviderKind
from app.preprocessing.models import EncodedImage


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with a signature line."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Jane Doe, 1 Main St, 2024-01-05, Ward 3")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a two-page PDF with one signature line on each page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Page one signer")
    c.showPage()
    c.drawString(72, 720, "Page two signer")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def rgb_pixels() -> np.ndarray:
    """A 10x4 RGB buffer whose rows encode their index in the red channel."""
    pixels = np.zeros((10, 4, 3), dtype=np.uint8)
    for row in range(10):
        pixels[row, :, 0] = row * 20
        pixels[row, :, 1] = 100
        pixels[row, :, 2] = 200
    return pixels


@pytest.fixture()
def png_bytes(rgb_pixels: np.ndarray) -> bytes:
    buf = io.BytesIO()
    Image.fromarray(rgb_pixels).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture()
def crop() -> CropConfig:
    return CropConfig(top_fraction=0.2, bottom_fraction=0.8)


@pytest.fixture()
def credential() -> ProviderCredential:
    return ProviderCredential(owner_id="owner-1", provider=ProviderKind.OPENAI, secret="sk-test")


@pytest.fixture()
def gemini_credential() -> ProviderCredential:
    return ProviderCredential(owner_id="owner-1", provider=ProviderKind.GEMINI, secret="g-test")


@pytest.fixture()
def encoded_image() -> EncodedImage:
    return EncodedImage(filename="petition_page1.png", page_index=1, data="aGVsbG8=")


@pytest.fixture()
def openai_config() -> ProviderConfig:
    return ProviderConfig(
        kind=ProviderKind.OPENAI,
        model="gpt-4o",
        max_output_tokens=1000,
        timeout_seconds=60,
    )
