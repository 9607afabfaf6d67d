import numpy as np
import pymupdf

from app.preprocessing.exceptions import RasterizationError
from app.preprocessing.rasterizer_base import BasePdfRasterizer


class PyMuPdfRasterizer(BasePdfRasterizer):
    """Renders PDF pages using PyMuPDF."""

    def render(self, pdf_bytes: bytes, scale: float) -> list[np.ndarray]:
        try:
            matrix = pymupdf.Matrix(scale, scale)
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                return [self._to_array(page.get_pixmap(matrix=matrix, alpha=False)) for page in doc]
        except RasterizationError:
            raise
        except Exception as exc:
            raise RasterizationError(f"pymupdf rendering failed: {exc}") from exc

    @staticmethod
    def _to_array(pixmap: "pymupdf.Pixmap") -> np.ndarray:
        buffer = np.frombuffer(pixmap.samples, dtype=np.uint8)
        pixels = buffer.reshape(pixmap.height, pixmap.width, pixmap.n)
        if pixmap.n == 1:
            pixels = np.repeat(pixels, 3, axis=2)
        return np.ascontiguousarray(pixels[:, :, :3])
