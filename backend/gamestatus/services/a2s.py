"""Valve A2S (Source / GoldSrc) server query."""

import asyncio
import logging
import socket
import time

import a2s

from gamestatus.models import ServerAddress, ServerStatus
from gamestatus.services import QueryError, QueryErrorKind

logger = logging.getLogger("gamestatus.services.a2s")

# Games answering the A2S_INFO query on their game/query port.
A2S_GAME_TYPES = frozenset(
    {
        "tf2",
        "css",
        "csgo",
        "cs2",
        "cs16",
        "dods",
        "garrysmod",
        "hl2dm",
        "insurgency",
        "l4d",
        "l4d2",
        "rust",
    }
)


class A2SQuerier:
    def __init__(self, game_type: str = "tf2"):
        self.game_type = game_type

    async def query(self, address: ServerAddress, timeout: float) -> ServerStatus:
        """Send one A2S_INFO request and normalize the reply. Never retries."""
        start = time.monotonic()
        try:
            # a2s has its own socket timeout; wait_for is the hard upper bound.
            info = await asyncio.wait_for(
                a2s.ainfo((address.host, address.port), timeout=timeout),
                timeout=timeout,
            )
        except (asyncio.TimeoutError, socket.timeout) as exc:
            raise QueryError(QueryErrorKind.TIMEOUT, address, f"no reply within {timeout:g}s") from exc
        except (a2s.BrokenMessageError, a2s.BufferExhaustedError) as exc:
            raise QueryError(QueryErrorKind.PROTOCOL_ERROR, address, exc.__class__.__name__) from exc
        except OSError as exc:
            raise QueryError(QueryErrorKind.UNREACHABLE, address, exc.__class__.__name__) from exc

        try:
            status = ServerStatus(
                name=info.server_name,
                player_count=info.player_count,
                max_player_count=info.max_players,
            )
        except (AttributeError, ValueError) as exc:
            raise QueryError(QueryErrorKind.PROTOCOL_ERROR, address, "malformed info reply") from exc

        latency = int((time.monotonic() - start) * 1000)
        logger.debug("A2S %s game=%s latency_ms=%d", address, self.game_type, latency)
        return status
