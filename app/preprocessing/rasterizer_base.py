from abc import ABC, abstractmethod

import numpy as np


class BasePdfRasterizer(ABC):
    """Contract for all PDF page rendering adapters."""

    @abstractmethod
    def render(self, pdf_bytes: bytes, scale: float) -> list[np.ndarray]:
        """Render every page of a PDF to an RGB pixel buffer.

        Args:
            pdf_bytes: Raw PDF file content.
            scale: Upscale factor relative to 72 dpi.

        Returns:
            One ``(height, width, 3)`` uint8 array per page, in page order.
            A document without pages yields an empty list.

        Raises:
            RasterizationError: if the document cannot be opened or rendered.
        """
