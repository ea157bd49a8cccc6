"""Configuration: reads all settings from environment variables."""

import os

from gamestatus.env_utils import get_env


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_csv(name: str) -> list[str]:
    raw = os.getenv(name, "")
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS: list[str] = _env_csv("CORS_ORIGINS")

# Status cache
REDIS_URL: str = get_env("REDIS_URL")
STATUS_CACHE_TTL_SECONDS: int = int(os.getenv("STATUS_CACHE_TTL_SECONDS", "30"))
STATUS_SINGLE_FLIGHT: bool = _env_bool("STATUS_SINGLE_FLIGHT", True)

# Upstream game server queries
QUERY_TIMEOUT_SECONDS: float = float(os.getenv("QUERY_TIMEOUT_SECONDS", "4"))
QUERY_GAME_TYPE: str = os.getenv("QUERY_GAME_TYPE", "tf2").strip().lower()

# Player analytics
ANALYTICS_DB_PATH: str = os.getenv("ANALYTICS_DB_PATH", "/data/analytics.db")
ANALYTICS_MAX_LIMIT: int = int(os.getenv("ANALYTICS_MAX_LIMIT", "1000"))
