from app.preprocessing.pdfplumber_rasterizer import PdfPlumberRasterizer
from app.preprocessing.pymupdf_rasterizer import PyMuPdfRasterizer
from app.preprocessing.rasterizer_base import BasePdfRasterizer


class PdfRasterizerFactory:
    """Creates the correct PDF rasterizer for the configured engine."""

    ADAPTERS: dict[str, type[BasePdfRasterizer]] = {
        "pdfplumber": PdfPlumberRasterizer,
        "pymupdf": PyMuPdfRasterizer,
    }

    @classmethod
    def create(cls, engine: str) -> BasePdfRasterizer:
        engine = engine.lower()
        adapter_cls = cls.ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {list(cls.ADAPTERS)}"
            )
        return adapter_cls()
