"""Read-only access to the SQLite player analytics database.

The ``player_analytics`` table is written by the game servers' analytics
plugin; this module never creates or alters it. All statements take their
inputs as bound parameters.
"""

import logging
import sqlite3
import threading
from pathlib import Path
from typing import Any

logger = logging.getLogger("gamestatus.analytics")

PLAYER_RECORDS_SQL = "SELECT * FROM player_analytics WHERE auth = ? LIMIT ?"
SUMMARY_SQL = (
    "SELECT COUNT(DISTINCT auth) AS unique_player, "
    "COUNT(*) AS total_record, "
    "COUNT(DISTINCT country) AS unique_country "
    "FROM player_analytics"
)


class AnalyticsError(Exception):
    """Raised when the analytics database cannot answer a query."""


class AnalyticsStore:
    def __init__(self, path: str):
        self.path = Path(path)
        self._local = threading.local()

    def _get_connection(self) -> sqlite3.Connection:
        """Return this thread's read-only connection, opening it on first use."""
        conn = getattr(self._local, "conn", None)
        if conn is None:
            uri = f"{self.path.resolve().as_uri()}?mode=ro"
            conn = sqlite3.connect(uri, uri=True)
            conn.row_factory = sqlite3.Row
            self._local.conn = conn
        return conn

    def _fetchall(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        try:
            return self._get_connection().execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            logger.warning("Analytics query failed (%s)", exc.__class__.__name__)
            raise AnalyticsError(str(exc)) from exc

    def player_records(self, steam_id: str, limit: int) -> list[dict[str, Any]]:
        rows = self._fetchall(PLAYER_RECORDS_SQL, (steam_id, limit))
        return [dict(row) for row in rows]

    def summary(self) -> dict[str, int]:
        rows = self._fetchall(SUMMARY_SQL)
        if not rows:
            return {"unique_player": 0, "total_record": 0, "unique_country": 0}
        return {key: int(rows[0][key] or 0) for key in rows[0].keys()}
