"""Pixel operations applied to every petition page."""

import io
import math

import numpy as np
from PIL import Image, ImageOps

from app.preprocessing.exceptions import ImageDecodeError

_LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float64)


def crop_vertically(pixels: np.ndarray, top_fraction: float, bottom_fraction: float) -> np.ndarray:
    """Keep rows ``[floor(h*top), floor(h*bottom))`` at full width."""
    height = pixels.shape[0]
    top = math.floor(height * top_fraction)
    bottom = math.floor(height * bottom_fraction)
    return pixels[top:bottom]


def to_greyscale(pixels: np.ndarray) -> np.ndarray:
    """Convert an RGB buffer to 2-D uint8 luminance (0.299R + 0.587G + 0.114B)."""
    if pixels.ndim == 2:
        return pixels.astype(np.uint8, copy=True)
    grey = pixels[:, :, :3].astype(np.float64) @ _LUMA_WEIGHTS
    return np.clip(np.rint(grey), 0, 255).astype(np.uint8)


def decode_image(data: bytes) -> np.ndarray:
    """Decode image bytes to an RGB buffer, honouring EXIF orientation.

    Raises:
        ImageDecodeError: if Pillow cannot read the image.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            img = ImageOps.exif_transpose(img)
            return np.asarray(img.convert("RGB"))
    except Exception as exc:
        raise ImageDecodeError(f"Image decoding failed: {exc}") from exc


def encode_png(pixels: np.ndarray) -> bytes:
    """Losslessly encode a greyscale buffer as PNG."""
    buffer = io.BytesIO()
    Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8)).save(buffer, format="PNG")
    return buffer.getvalue()


def decode_png(data: bytes) -> np.ndarray:
    """Inverse of :func:`encode_png`."""
    with Image.open(io.BytesIO(data)) as img:
        return np.asarray(img.convert("L"))
