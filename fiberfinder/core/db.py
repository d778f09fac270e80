"""Database helpers for the provider dataset."""

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Tuple

from psycopg2 import extras, pool

from fiberfinder.core.config import get_settings
from fiberfinder.core.models import ProviderRecord
from fiberfinder.etl.transform import to_provider_record

logger = logging.getLogger(__name__)

_connection_pool: Optional[pool.SimpleConnectionPool] = None


def init_pool(minconn: int = 1, maxconn: int = 5) -> pool.SimpleConnectionPool:
    """Initialise and return the shared connection pool."""
    global _connection_pool
    if _connection_pool is None:
        settings = get_settings()
        if not settings.database_url:
            raise RuntimeError("DATABASE_URL is required for database connections")
        _connection_pool = pool.SimpleConnectionPool(
            minconn,
            maxconn,
            dsn=settings.database_url,
            connect_timeout=10,
        )
        logger.info("Database connection pool initialised")
    return _connection_pool


@contextmanager
def get_connection():
    """Context manager yielding a pooled connection."""
    pg_pool = init_pool()
    conn = pg_pool.getconn()
    try:
        yield conn
    finally:
        pg_pool.putconn(conn)


def _fetch_all(sql: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
    with get_connection() as conn:
        with conn.cursor(cursor_factory=extras.RealDictCursor) as cur:
            cur.execute(sql, params)
            rows = cur.fetchall()
        # read-only; end the implicit transaction before returning the connection
        conn.rollback()
    return [dict(row) for row in rows]


_SELECT_FIBER_ROWS = """
SELECT
    frn,
    provider_id,
    brand_name,
    location_id,
    technology,
    max_advertised_download_speed,
    max_advertised_upload_speed,
    low_latency,
    business_residential_code,
    state_usps,
    block_geoid,
    h3_res8_id
FROM fiber_providers
WHERE block_geoid = %(block_geoid)s
  AND max_advertised_download_speed >= %(min_download)s
  AND max_advertised_upload_speed >= %(min_upload)s
ORDER BY brand_name ASC, max_advertised_download_speed DESC;
"""

_SELECT_BRANDS_BY_STATE = """
SELECT DISTINCT brand_name
FROM fiber_providers
WHERE state_usps = %(state_usps)s
ORDER BY brand_name ASC;
"""

# The scope filter is either "every row" or a single block GEOID.
_SCOPE = "(%(block_geoid)s IS NULL OR block_geoid = %(block_geoid)s)"

_COUNT_ROWS = f"SELECT COUNT(*) AS total FROM fiber_providers WHERE {_SCOPE};"

_AVERAGE_SPEEDS = f"""
SELECT
    AVG(max_advertised_download_speed) AS avg_download,
    AVG(max_advertised_upload_speed) AS avg_upload
FROM fiber_providers
WHERE {_SCOPE};
"""

_BRAND_COUNTS = f"""
SELECT brand_name, COUNT(*) AS row_count
FROM fiber_providers
WHERE {_SCOPE}
GROUP BY brand_name
ORDER BY brand_name ASC;
"""


def fetch_fiber_rows(block_geoid: str, min_download: int, min_upload: int) -> List[ProviderRecord]:
    """Rows for one census block at or above the given speeds, ordered brand asc / download desc."""
    rows = _fetch_all(
        _SELECT_FIBER_ROWS,
        {"block_geoid": block_geoid, "min_download": min_download, "min_upload": min_upload},
    )
    logger.debug("Fetched %d provider rows for block %s", len(rows), block_geoid)
    return [to_provider_record(row) for row in rows]


def fetch_brands_by_state(state_usps: str) -> List[str]:
    rows = _fetch_all(_SELECT_BRANDS_BY_STATE, {"state_usps": state_usps.upper()})
    return [row["brand_name"] for row in rows]


def count_rows(block_geoid: Optional[str] = None) -> int:
    rows = _fetch_all(_COUNT_ROWS, {"block_geoid": block_geoid})
    return int(rows[0]["total"]) if rows else 0


def average_speeds(block_geoid: Optional[str] = None) -> Tuple[Optional[float], Optional[float]]:
    """Average download/upload speed for the scope; ``None`` when the scope is empty."""
    rows = _fetch_all(_AVERAGE_SPEEDS, {"block_geoid": block_geoid})
    if not rows:
        return None, None
    avg_download = rows[0].get("avg_download")
    avg_upload = rows[0].get("avg_upload")
    return (
        float(avg_download) if avg_download is not None else None,
        float(avg_upload) if avg_upload is not None else None,
    )


def brand_counts(block_geoid: Optional[str] = None) -> List[Tuple[str, int]]:
    """Row count per brand name, in brand name order."""
    rows = _fetch_all(_BRAND_COUNTS, {"block_geoid": block_geoid})
    return [(row["brand_name"], int(row["row_count"])) for row in rows]
