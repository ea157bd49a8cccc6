"""Game server query backends and the contract they share."""

from enum import Enum
from typing import Protocol

from gamestatus.models import ServerAddress, ServerStatus


class QueryErrorKind(str, Enum):
    UNREACHABLE = "Unreachable"
    TIMEOUT = "Timeout"
    PROTOCOL_ERROR = "ProtocolError"


class QueryError(Exception):
    """A single upstream query failed; no status was produced."""

    def __init__(self, kind: QueryErrorKind, address: ServerAddress, detail: str = "") -> None:
        self.kind = kind
        self.address = address
        self.detail = detail
        message = f"{kind.value} querying {address}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ServerQuerier(Protocol):
    """Runs exactly one status exchange against a game server.

    Implementations must bound the exchange by *timeout* seconds and must
    not retry. Every failure is raised as :class:`QueryError`.
    """

    async def query(self, address: ServerAddress, timeout: float) -> ServerStatus:
        ...


def build_querier(game_type: str) -> ServerQuerier:
    """Return the querier for the configured game type."""
    from gamestatus.services.a2s import A2S_GAME_TYPES, A2SQuerier

    normalized = game_type.strip().lower()
    if normalized in A2S_GAME_TYPES:
        return A2SQuerier(game_type=normalized)
    raise ValueError(f"Unsupported game type {game_type!r}")
