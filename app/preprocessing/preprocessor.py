"""Turns uploaded petition files into cropped greyscale page images."""

from collections.abc import Iterable
from pathlib import PurePath

import numpy as np

from app.config.exceptions import ConfigurationError
from app.config.pipeline_config import CropConfig
from app.logging.logger import Log
from app.preprocessing.exceptions import PreprocessingError
from app.preprocessing.image_ops import crop_vertically, decode_image, encode_png, to_greyscale
from app.preprocessing.models import NormalizedImage, SourceFile
from app.preprocessing.rasterizer_base import BasePdfRasterizer

_PDF_MAGIC = b"%PDF"


class ImagePreprocessor:
    """Rasterizes, crops and greyscales every page of every source file."""

    def __init__(
        self,
        *,
        crop: CropConfig | None,
        rasterizer: BasePdfRasterizer,
        render_scale: float = 2.0,
        max_pages: int | None = None,
    ) -> None:
        if crop is None:
            raise ConfigurationError("Crop configuration is required for preprocessing")
        self._crop = crop
        self._rasterizer = rasterizer
        self._render_scale = render_scale
        self._max_pages = max_pages

    def process(self, sources: Iterable[SourceFile]) -> list[NormalizedImage]:
        """Normalize sources in input order.

        A source that cannot be decoded contributes no pages; its siblings
        are still processed.
        """
        images: list[NormalizedImage] = []
        for source in sources:
            images.extend(self.process_file(source))
            if self._max_pages is not None and len(images) >= self._max_pages:
                Log.info(f"Page limit {self._max_pages} reached, ignoring remaining pages")
                return images[: self._max_pages]
        return images

    def process_file(self, source: SourceFile) -> list[NormalizedImage]:
        is_pdf = _is_pdf(source)
        try:
            pages = self._load_pages(source, is_pdf)
        except PreprocessingError as exc:
            Log.warning(f"Skipping unreadable file {source.filename}: {exc}")
            return []
        if not pages:
            Log.warning(f"File {source.filename} has no pages")
            return []

        stem = PurePath(source.filename).stem
        images: list[NormalizedImage] = []
        for page_index, pixels in enumerate(pages, start=1):
            filename = f"{stem}_page{page_index}.png" if is_pdf else f"{stem}_cropped.png"
            image = self._normalize(pixels, filename, source.filename, page_index)
            if image is not None:
                images.append(image)
        Log.debug(f"Normalized {len(images)} page(s) from {source.filename}")
        return images

    def _load_pages(self, source: SourceFile, is_pdf: bool) -> list[np.ndarray]:
        if is_pdf:
            return self._rasterizer.render(source.content, self._render_scale)
        return [decode_image(source.content)]

    def _normalize(
        self,
        pixels: np.ndarray,
        filename: str,
        source_filename: str,
        page_index: int,
    ) -> NormalizedImage | None:
        cropped = crop_vertically(pixels, self._crop.top_fraction, self._crop.bottom_fraction)
        if cropped.shape[0] == 0 or cropped.shape[1] == 0:
            Log.warning(f"Crop window is empty for {filename}, page skipped")
            return None
        grey = to_greyscale(cropped)
        return NormalizedImage(
            filename=filename,
            source_filename=source_filename,
            page_index=page_index,
            pixels=grey,
            content=encode_png(grey),
        )


def _is_pdf(source: SourceFile) -> bool:
    if source.mime_type:
        return source.mime_type.lower() == "application/pdf"
    if source.filename.lower().endswith(".pdf"):
        return True
    return source.content[:4] == _PDF_MAGIC
