"""Cache-aside lookup of game server status.

validate -> cache get -> (miss) upstream query -> cache put -> status

Only invalid input and upstream failures reach the caller. An unreachable
cache or a corrupt cache entry degrades to a live query, and a failed cache
write is logged and dropped. Failed queries are never cached.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from pydantic import ValidationError

from gamestatus.cache import CacheUnavailable, StatusCache
from gamestatus.models import FieldError, ServerAddress, ServerStatus
from gamestatus.services import QueryError, ServerQuerier
from gamestatus.state import InflightCoalescer
from gamestatus.validation import InputValidationError, validate_address

logger = logging.getLogger("gamestatus.status")

DEFAULT_TTL_SECONDS = 30
DEFAULT_QUERY_TIMEOUT_SECONDS = 4.0


class ServiceErrorKind(str, Enum):
    INVALID_INPUT = "InvalidInput"
    UPSTREAM_UNAVAILABLE = "UpstreamUnavailable"


class ServiceError(Exception):
    def __init__(
        self,
        kind: ServiceErrorKind,
        message: str,
        *,
        field_errors: Optional[list[FieldError]] = None,
        query_error: Optional[QueryError] = None,
    ) -> None:
        self.kind = kind
        self.field_errors = field_errors or []
        self.query_error = query_error
        super().__init__(message)


class StatusService:
    def __init__(
        self,
        cache: StatusCache,
        querier: ServerQuerier,
        *,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        query_timeout: float = DEFAULT_QUERY_TIMEOUT_SECONDS,
        single_flight: bool = False,
    ):
        self.cache = cache
        self.querier = querier
        self.ttl_seconds = ttl_seconds
        self.query_timeout = query_timeout
        self._inflight: Optional[InflightCoalescer[ServerStatus]] = (
            InflightCoalescer() if single_flight else None
        )

    async def get_status(self, raw_host: Optional[str], raw_port: Optional[str]) -> ServerStatus:
        """Return the status of the server at ``raw_host:raw_port``.

        Raises :class:`ServiceError` with kind ``INVALID_INPUT`` before any
        I/O when the address is malformed, or ``UPSTREAM_UNAVAILABLE`` when
        the live query fails.
        """
        try:
            address = validate_address(raw_host, raw_port)
        except InputValidationError as exc:
            raise ServiceError(
                ServiceErrorKind.INVALID_INPUT,
                str(exc),
                field_errors=exc.errors,
            ) from exc

        key = address.cache_key()
        cached = await self._read_cache(key)
        if cached is not None:
            logger.debug("Cache hit for %s", key)
            return cached

        logger.debug("Cache miss for %s", key)
        if self._inflight is None:
            return await self._query_and_store(address, key)
        return await self._inflight.run(key, lambda: self._query_and_store(address, key))

    async def _read_cache(self, key: str) -> Optional[ServerStatus]:
        try:
            raw = await self.cache.get(key)
        except CacheUnavailable as exc:
            logger.warning("Status cache read failed for %s, querying live: %s", key, exc)
            return None
        if raw is None:
            return None
        try:
            return ServerStatus.from_json(raw)
        except ValidationError:
            logger.warning("Discarding unreadable cache entry %s", key)
            return None

    async def _query_and_store(self, address: ServerAddress, key: str) -> ServerStatus:
        try:
            status = await self.querier.query(address, self.query_timeout)
        except QueryError as exc:
            logger.warning("Query failed for %s kind=%s", address, exc.kind.value)
            raise ServiceError(
                ServiceErrorKind.UPSTREAM_UNAVAILABLE,
                str(exc),
                query_error=exc,
            ) from exc

        try:
            await self.cache.put(key, status.to_json(), self.ttl_seconds)
        except CacheUnavailable as exc:
            logger.warning("Status cache write failed for %s: %s", key, exc)
        return status
