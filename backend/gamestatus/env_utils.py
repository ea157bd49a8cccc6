"""Environment lookups that also accept Docker secret files (``NAME_FILE``)."""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger("gamestatus.env")


def _read_secret_file(name: str) -> str:
    file_path = (os.getenv(f"{name}_FILE") or "").strip()
    if not file_path:
        return ""
    try:
        return Path(file_path).read_text(encoding="utf-8").strip()
    except OSError as exc:
        # Only the variable name is logged, the path may be sensitive too.
        logger.warning("Could not read secret file for %s (%s)", name, exc.__class__.__name__)
        return ""


def get_env(name: str, default: str = "") -> str:
    """Return ``$NAME``, else the contents of ``$NAME_FILE``, else *default*."""
    value = (os.getenv(name) or "").strip()
    if value:
        return value
    return _read_secret_file(name) or default
