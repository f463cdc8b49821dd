"""
lochub logging utilities.

Loggers live under the ``lochub`` namespace. Credentials travel through this
service in three places (the Authorization header, the clone URL and the
token exchange body), so anything that might echo one of them goes through
``mask_sensitive_data`` before it is logged or returned to a caller.
"""

import logging
import re

_service_logger = logging.getLogger("lochub")

# Patterns for credentials that must never reach a log line
_SENSITIVE_PATTERNS = [
    # Userinfo in URLs: https://<token>@github.com/owner/repo
    (re.compile(r"(?P<scheme>[a-zA-Z][a-zA-Z0-9+.-]*://)[^/@\s]+@"), r"\g<scheme>[REDACTED]@"),
    # Authorization header values
    (re.compile(r"\b(Bearer|Basic)\s+[A-Za-z0-9_\-.=+/]+"), r"\1 [REDACTED]"),
    # Form-encoded secrets in token exchange bodies and query strings
    (re.compile(r"\b(access_token|refresh_token|client_secret|code)=[^&\s]+"), r"\1=[REDACTED]"),
]


def configure_logging(
    level: int | str = logging.INFO,
    handler: logging.Handler | None = None,
    format_string: str | None = None,
) -> None:
    """
    Configure lochub logging.

    Args:
        level: Log level for the ``lochub`` logger tree (default: INFO)
        handler: Custom handler to use (default: StreamHandler to stderr)
        format_string: Custom format string (default: timestamp, level, logger name)
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    if handler is None:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(format_string))

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    _service_logger.setLevel(level)
    for existing in list(_service_logger.handlers):
        _service_logger.removeHandler(existing)
    _service_logger.addHandler(handler)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the service logger, or a child such as ``lochub.workspace``."""
    if name is None:
        return _service_logger
    return logging.getLogger(f"lochub.{name}")


def mask_sensitive_data(text: str) -> str:
    """Replace credentials in ``text`` with redacted placeholders."""
    result = text
    for pattern, replacement in _SENSITIVE_PATTERNS:
        result = pattern.sub(replacement, result)
    return result
