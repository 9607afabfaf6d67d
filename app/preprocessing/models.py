from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class SourceFile:
    """One uploaded petition file: a scanned image or a multi-page PDF."""

    filename: str
    content: bytes
    mime_type: str | None = None


@dataclass(frozen=True, eq=False)
class NormalizedImage:
    """A cropped, greyscale petition page ready for OCR.

    ``pixels`` is a 2-D uint8 buffer; ``content`` is its PNG encoding.
    """

    filename: str
    source_filename: str
    page_index: int
    pixels: np.ndarray
    content: bytes


@dataclass(frozen=True)
class EncodedImage:
    """Base64 transport form of a normalized image, without a data-URI prefix."""

    filename: str
    page_index: int
    data: str
    mime_type: str = "image/png"
