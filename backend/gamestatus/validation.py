"""Request input validation for server addresses and analytics lookups.

Everything here is pure: no cache, no network, no database. Callers must
validate before touching any of those.
"""

from __future__ import annotations

import ipaddress
import re
from typing import Optional
from urllib.parse import urlsplit

from gamestatus.models import FieldError, FieldErrorKind, ServerAddress

MAX_HOSTNAME_LENGTH = 253
PORT_MAX_DIGITS = 5
LIMIT_MAX_DIGITS = 9
_HOST_LABEL = re.compile(r"(?!-)[a-z0-9-]{1,63}(?<!-)")
_TLD_LABEL = re.compile(r"[a-z]{2,63}|xn--[a-z0-9-]{1,59}")
_DIGITS = re.compile(r"[0-9]+")
_SCHEME = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")
STEAM_ID_PATTERN = re.compile(r"STEAM_[01]:[01]:[0-9]+")

INVALID_HOST_MESSAGE = "Invalid ip address or url"
INVALID_PORT_MESSAGE = "Invalid port number"


class InputValidationError(ValueError):
    """Raised when one or more request parameters fail validation."""

    def __init__(self, errors: list[FieldError]) -> None:
        self.errors = errors
        super().__init__("; ".join(f"{error.param}: {error.msg}" for error in errors))


def _normalize_ip(candidate: str) -> Optional[str]:
    if candidate.startswith("[") and candidate.endswith("]"):
        candidate = candidate[1:-1]
    try:
        return ipaddress.ip_address(candidate).compressed
    except ValueError:
        return None


def _normalize_hostname(candidate: str) -> Optional[str]:
    hostname = candidate.lower()
    if hostname.endswith("."):
        hostname = hostname[:-1]
    if not hostname or len(hostname) > MAX_HOSTNAME_LENGTH:
        return None
    labels = hostname.split(".")
    if len(labels) < 2:
        return None
    if not all(_HOST_LABEL.fullmatch(label) for label in labels):
        return None
    if not _TLD_LABEL.fullmatch(labels[-1]):
        return None
    return hostname


def _host_from_url(raw: str) -> Optional[str]:
    if not _SCHEME.match(raw):
        return raw
    try:
        parts = urlsplit(raw)
        # Accessing .port validates it, a bad port makes the URL unusable.
        _ = parts.port
    except ValueError:
        return None
    return parts.hostname


def normalize_host(raw_host: Optional[str]) -> Optional[str]:
    """Return the canonical host for *raw_host* or ``None`` when it is invalid."""
    if raw_host is None:
        return None
    candidate = raw_host.strip()
    if not candidate:
        return None

    ip = _normalize_ip(candidate)
    if ip is not None:
        return ip

    host = _host_from_url(candidate)
    if not host:
        return None
    ip = _normalize_ip(host)
    if ip is not None:
        return ip
    return _normalize_hostname(host)


def _parse_digits(raw: Optional[str], max_digits: int) -> Optional[int]:
    """Parse an ASCII digit string, saturating at ``10 ** max_digits``.

    Longer inputs never reach ``int()``, which refuses very long strings.
    """
    if raw is None or not _DIGITS.fullmatch(raw):
        return None
    significant = raw.lstrip("0") or "0"
    if len(significant) > max_digits:
        return 10 ** max_digits
    return int(significant)


def parse_port(raw_port: Optional[str]) -> Optional[int]:
    port = _parse_digits(raw_port, PORT_MAX_DIGITS)
    if port is None:
        return None
    if not 1 <= port <= 65535:
        return None
    return port


def validate_address(raw_host: Optional[str], raw_port: Optional[str]) -> ServerAddress:
    """Validate and normalize a caller supplied ``(host, port)`` pair.

    Both fields are checked so the caller sees every problem at once.
    Raises :class:`InputValidationError` listing the bad fields.
    """
    errors: list[FieldError] = []

    host = normalize_host(raw_host)
    if host is None:
        errors.append(
            FieldError(
                kind=FieldErrorKind.INVALID_HOST,
                param="ip",
                msg=INVALID_HOST_MESSAGE,
                value=raw_host,
            )
        )

    port = parse_port(raw_port)
    if port is None:
        errors.append(
            FieldError(
                kind=FieldErrorKind.INVALID_PORT,
                param="port",
                msg=INVALID_PORT_MESSAGE,
                value=raw_port,
            )
        )

    if errors:
        raise InputValidationError(errors)
    return ServerAddress(host=host, port=port)


def validate_player_query(steam_id: Optional[str], raw_limit: Optional[str]) -> tuple[str, int]:
    """Validate the ``/player`` lookup parameters."""
    errors: list[FieldError] = []

    if steam_id is None or not STEAM_ID_PATTERN.fullmatch(steam_id):
        errors.append(
            FieldError(
                kind=FieldErrorKind.INVALID_STEAM_ID,
                param="steamid",
                msg="Invalid SteamID",
                value=steam_id,
            )
        )

    limit = _parse_digits(raw_limit, LIMIT_MAX_DIGITS)
    if not limit:
        errors.append(
            FieldError(
                kind=FieldErrorKind.INVALID_LIMIT,
                param="limit",
                msg="limit should be greater than 0",
                value=raw_limit,
            )
        )

    if errors:
        raise InputValidationError(errors)
    return steam_id, limit
