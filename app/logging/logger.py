import logging
import re
import sys

# hex(iv):hex(tag):hex(ciphertext)
_ENVELOPE_RE = re.compile(r"\b[0-9a-fA-F]{32}:[0-9a-fA-F]{32}:[0-9a-fA-F]*")
REDACTED = "<envelope redacted>"


class EnvelopeRedactionFilter(logging.Filter):
    """Replaces anything shaped like a cipher envelope in a log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = _ENVELOPE_RE.sub(REDACTED, message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


class Log:
    """Centralized logging with structured format.

    Callers must never pass plaintext field values or key material into a
    message; stray cipher envelopes are redacted by the logger itself.
    """

    _logger: logging.Logger = logging.getLogger("privacy_core")

    @classmethod
    def configure(cls, log_level: str) -> None:
        """Configure the logger with the specified level and stdout handler."""
        cls._logger.setLevel(log_level.upper())
        if not any(isinstance(f, EnvelopeRedactionFilter) for f in cls._logger.filters):
            cls._logger.addFilter(EnvelopeRedactionFilter())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(
                logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
            )
            cls._logger.addHandler(handler)

    @classmethod
    def info(cls, message: str, **kwargs: object) -> None:
        """Log an info message."""
        cls._logger.info(message, extra=kwargs)

    @classmethod
    def error(cls, message: str, **kwargs: object) -> None:
        """Log an error message."""
        cls._logger.error(message, extra=kwargs)

    @classmethod
    def warning(cls, message: str, **kwargs: object) -> None:
        """Log a warning message."""
        cls._logger.warning(message, extra=kwargs)

    @classmethod
    def debug(cls, message: str, **kwargs: object) -> None:
        """Log a debug message."""
        cls._logger.debug(message, extra=kwargs)
