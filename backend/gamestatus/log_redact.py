"""Secret redaction for log output.

Cache and database URLs can embed credentials (``redis://:pass@host``), and
error messages from client libraries sometimes echo them back.
"""

from __future__ import annotations

import logging
import re
import traceback
from urllib.parse import urlsplit, urlunsplit

_SENSITIVE_KEY_PATTERN = r"(?:password|passwd|pass|secret|token|apikey|api_key)"
_URL_PATTERN = re.compile(r"(?i)\b(?:rediss?|unix|sqlite|https?|mysql|postgres(?:ql)?)://[^\s\"'<>]+")
_KV_SECRET_PATTERN = re.compile(
    rf"(?i)(\b{_SENSITIVE_KEY_PATTERN}\b[ \t]*[=:][ \t]*)([^&\s,;\"'<>]+)"
)

_FILTER_LOGGERS = (
    "",
    "uvicorn",
    "uvicorn.error",
    "uvicorn.access",
    "gamestatus",
)


def redact_url(url: str) -> str:
    """Mask the password (and username) of a URL, keeping host and path."""
    try:
        parsed = urlsplit(url)
    except ValueError:
        return url
    if not parsed.password and not parsed.username:
        return url

    host = parsed.hostname or ""
    if ":" in host:
        host = f"[{host}]"
    try:
        port = parsed.port
    except ValueError:
        port = None
    netloc = f"***@{host}" if port is None else f"***@{host}:{port}"
    return urlunsplit((parsed.scheme, netloc, parsed.path, parsed.query, parsed.fragment))


def redact_text(value: str | None) -> str | None:
    """Redact URL credentials and ``key=value`` secrets from arbitrary text."""
    if value is None:
        return None
    text = str(value)
    text = _URL_PATTERN.sub(lambda match: redact_url(match.group(0)), text)
    text = _KV_SECRET_PATTERN.sub(r"\1***", text)
    return text


class SecretRedactionFilter(logging.Filter):
    """Logging filter that redacts secrets before records are emitted."""

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            message = record.getMessage()
        except Exception:
            message = str(record.msg)

        record.msg = redact_text(message) or ""
        record.args = ()
        if record.exc_info:
            exc_text = "".join(traceback.format_exception(*record.exc_info))
            record.exc_text = redact_text(exc_text)
        return True


def install_log_redaction() -> None:
    """Attach a redaction filter to the root, uvicorn and gamestatus loggers."""
    redaction_filter = SecretRedactionFilter()
    for logger_name in _FILTER_LOGGERS:
        logger = logging.getLogger(logger_name)
        if not any(isinstance(existing, SecretRedactionFilter) for existing in logger.filters):
            logger.addFilter(redaction_filter)
        for handler in logger.handlers:
            if not any(isinstance(existing, SecretRedactionFilter) for existing in handler.filters):
                handler.addFilter(redaction_filter)
