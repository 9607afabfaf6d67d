import io

import numpy as np
import pdfplumber

from app.preprocessing.exceptions import RasterizationError
from app.preprocessing.rasterizer_base import BasePdfRasterizer

_BASE_DPI = 72


class PdfPlumberRasterizer(BasePdfRasterizer):
    """Renders PDF pages using pdfplumber."""

    def render(self, pdf_bytes: bytes, scale: float) -> list[np.ndarray]:
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                return [
                    np.asarray(page.to_image(resolution=_BASE_DPI * scale).original.convert("RGB"))
                    for page in pdf.pages
                ]
        except RasterizationError:
            raise
        except Exception as exc:
            raise RasterizationError(f"pdfplumber rendering failed: {exc}") from exc
