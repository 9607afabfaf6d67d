class OcrError(Exception):
    """Base class for OCR provider failures."""


class AuthError(OcrError):
    """Raised when the provider rejects the credential (HTTP 401)."""


class RateLimitError(OcrError):
    """Raised when the provider throttles the request (HTTP 429)."""


class RetryExhaustedError(RateLimitError):
    """Raised when every attempt allowed by a retry policy was rate limited."""

    def __init__(self, message: str, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts


class BadRequestError(OcrError):
    """Raised when the provider rejects the request as malformed (HTTP 400)."""


class ProviderError(OcrError):
    """Raised for any other transport or HTTP failure."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ParseError(OcrError):
    """Raised when model output is not the expected JSON array."""


def error_for_status(status_code: int, message: str) -> OcrError:
    """Map a non-success HTTP status to the matching OCR error."""
    if status_code == 401:
        return AuthError(message)
    if status_code == 429:
        return RateLimitError(message)
    if status_code == 400:
        return BadRequestError(message)
    return ProviderError(message, status_code=status_code)


class UnknownProviderError(ValueError):
    """Raised when a provider name or kind has no adapter."""
