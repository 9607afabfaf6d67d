class PreprocessingError(Exception):
    """Base exception for image preprocessing failures."""


class RasterizationError(PreprocessingError):
    """Raised when a paginated document cannot be rendered."""


class ImageDecodeError(PreprocessingError):
    """Raised when a plain image cannot be decoded."""
