# db_config.py
"""Database configuration and read-only alliance lookups for the scanner."""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

import psycopg2
from psycopg2.extensions import connection

from alliance import AllianceRecord, Snapshot
from alliance_matcher import Failed, Found, LookupResult, NotFound
from scan_errors import StoreError

logger = logging.getLogger(__name__)

# Database connection parameters
# You can override these with environment variables
DB_CONFIG: Dict[str, Any] = {
    "host": os.getenv("WARTRACKER_DB_HOST", "localhost"),
    "port": int(os.getenv("WARTRACKER_DB_PORT", "5432")),
    "database": os.getenv("WARTRACKER_DB_NAME", "wartracker"),
    "user": os.getenv("WARTRACKER_DB_USER", "postgres"),
    "password": os.getenv("WARTRACKER_DB_PASSWORD", "postgres"),
}


def get_connection(config: Optional[Dict[str, Any]] = None) -> connection:
    """Create and return a database connection."""
    cfg = config or DB_CONFIG
    try:
        return psycopg2.connect(**cfg)
    except psycopg2.OperationalError as e:
        raise StoreError(
            f"Could not connect to PostgreSQL at "
            f"{cfg['user']}@{cfg['host']}:{cfg['port']}/{cfg['database']}: {e}"
        ) from e


class PostgresAllianceStore:
    """
    Read-only view of the alliance tables.

    Expects `alliance(id, server_id, tag, name)` and
    `alliance_data(alliance_id, date, tag, name, power, gift_level, member_count)`;
    creating them is somebody else's job.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or DB_CONFIG

    def lookup_by_tag(self, server_id: int, tag: str) -> LookupResult:
        try:
            conn = get_connection(self.config)
        except StoreError as e:
            return Failed(str(e))

        try:
            cur = conn.cursor()
            cur.execute(
                "SELECT id, server_id, tag, name FROM alliance WHERE server_id = %s AND tag = %s",
                (server_id, tag),
            )
            row = cur.fetchone()
            if row is None:
                cur.close()
                return NotFound()

            alliance_id, row_server, row_tag, row_name = row
            cur.execute(
                """
                SELECT date, tag, name, power, gift_level, member_count
                FROM alliance_data
                WHERE alliance_id = %s
                ORDER BY date
                """,
                (alliance_id,),
            )
            history = tuple(
                Snapshot(capture_date=d, tag=t, name=n, power=p, gift_level=g, member_count=m)
                for d, t, n, p, g, m in cur.fetchall()
            )
            cur.close()
        except psycopg2.Error as e:
            logger.warning("Alliance lookup for %s on server %s failed: %s", tag, server_id, e)
            return Failed(str(e))
        finally:
            conn.close()

        return Found(AllianceRecord(server_id=row_server, tag=row_tag, name=row_name, history=history))
