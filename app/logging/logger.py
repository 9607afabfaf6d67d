import logging
import re
import sys

# Request URLs may carry provider keys in the query string.
_QUIET_LOGGERS = ("httpx", "httpcore", "openai")

_SECRET_PATTERNS = (
    re.compile(r"([?&]key=)[^&\s\"']+"),
    re.compile(r"(Bearer\s+)[A-Za-z0-9._\-]+"),
    re.compile(r"\b(sk-)[A-Za-z0-9_\-]{8,}"),
)


def redact(text: str) -> str:
    """Mask provider secrets that may appear in URLs, headers or error text."""
    for pattern in _SECRET_PATTERNS:
        text = pattern.sub(r"\1***", text)
    return text


class SecretRedactingFilter(logging.Filter):
    """Rewrites log records so provider keys never reach a handler."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


class Log:
    """Worker-wide logging: one stdout handler, secrets masked."""

    _logger: logging.Logger = logging.getLogger("petition_ocr")

    @classmethod
    def configure(cls, log_level: str) -> None:
        """Configure the logger with the specified level and stdout handler.

        Third-party HTTP loggers are capped at WARNING and pass through the
        same redaction filter.
        """
        cls._logger.setLevel(log_level.upper())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(
                logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
            )
            handler.addFilter(SecretRedactingFilter())
            cls._logger.addHandler(handler)
        for name in _QUIET_LOGGERS:
            third_party = logging.getLogger(name)
            third_party.setLevel(logging.WARNING)
            if not any(isinstance(f, SecretRedactingFilter) for f in third_party.filters):
                third_party.addFilter(SecretRedactingFilter())

    @classmethod
    def info(cls, message: str, **kwargs: object) -> None:
        cls._logger.info(message, extra=kwargs)

    @classmethod
    def error(cls, message: str, **kwargs: object) -> None:
        cls._logger.error(message, extra=kwargs)

    @classmethod
    def warning(cls, message: str, **kwargs: object) -> None:
        cls._logger.warning(message, extra=kwargs)

    @classmethod
    def debug(cls, message: str, **kwargs: object) -> None:
        cls._logger.debug(message, extra=kwargs)
