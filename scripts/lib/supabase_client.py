"""
Supabase Client Helper for Agency Pulse.
Provides the service connection, per-session connections, table reads and
the single RPC gateway used for stored procedures.

Usage:
    from scripts.lib.supabase_client import get_client, fetch_rows, rpc

    entries = fetch_rows(
        "daily_entries", select="id, producer_id",
        gte={"entry_date": "2025-09-01"}, lte={"entry_date": "2025-09-07"},
    )
    leaderboard = rpc("get_csr_leaderboard", {"p_year": 2025})

Unlike a best-effort helper, every read here raises DataFetchError on failure
so callers never mistake an outage for an empty result.
"""
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from dotenv import load_dotenv

from scripts.lib.errors import ConfigError, DataFetchError, DataWriteError
from scripts.lib.logger import setup_logger
from scripts.lib.num import first_row

logger = setup_logger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
load_dotenv(PROJECT_ROOT / ".env")

SUPABASE_URL = os.environ.get("SUPABASE_URL", "")
SUPABASE_KEY = (
    os.environ.get("SUPABASE_SERVICE_ROLE_KEY", "")
    or os.environ.get("SUPABASE_KEY", "")
)
SUPABASE_ANON_KEY = os.environ.get("SUPABASE_ANON_KEY", "") or SUPABASE_KEY

# Rows per request; keep at or below the PostgREST max-rows setting.
PAGE_SIZE = int(os.environ.get("SUPABASE_PAGE_SIZE", "1000"))

_client = None


def get_client():
    """Create and return the service-role Supabase client (singleton)."""
    global _client
    if _client is not None:
        return _client

    if not SUPABASE_URL or not SUPABASE_KEY:
        raise ConfigError(
            "SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set in .env",
            setting="SUPABASE_URL",
        )

    from supabase import create_client
    _client = create_client(SUPABASE_URL, SUPABASE_KEY)
    logger.info("Supabase client connected to %s", SUPABASE_URL)
    return _client


def set_client(client) -> None:
    """Replace the shared client (None resets to lazy creation)."""
    global _client
    _client = client


def create_session_client(access_token: str):
    """
    Create a client that runs queries as the signed-in user.

    RPCs such as get_my_roles resolve the caller from the JWT, so they must
    not go through the service-role singleton.
    """
    if not SUPABASE_URL or not SUPABASE_ANON_KEY:
        raise ConfigError(
            "SUPABASE_URL and SUPABASE_ANON_KEY must be set in .env",
            setting="SUPABASE_ANON_KEY",
        )

    from supabase import ClientOptions, create_client
    options = ClientOptions(headers={"Authorization": f"Bearer {access_token}"})
    return create_client(SUPABASE_URL, SUPABASE_ANON_KEY, options=options)


def _apply_filters(query, eq=None, in_=None, gte=None, lte=None):
    for col, val in (eq or {}).items():
        query = query.eq(col, val)
    for col, values in (in_ or {}).items():
        query = query.in_(col, list(values))
    for col, val in (gte or {}).items():
        query = query.gte(col, val)
    for col, val in (lte or {}).items():
        query = query.lte(col, val)
    return query


def fetch_rows(
    table: str,
    select: str = "*",
    eq: Dict[str, Any] = None,
    in_: Dict[str, Iterable[Any]] = None,
    gte: Dict[str, Any] = None,
    lte: Dict[str, Any] = None,
    order_by: str = None,
    desc: bool = False,
    page_key: str = "id",
    page_size: int = None,
    client=None,
) -> List[Dict]:
    """
    Read every row matching simple filters, one page at a time.

    PostgREST caps each response at its max-rows setting, so a single
    request can come back short without any error. Pages are requested
    with .range() until one returns fewer rows than asked for.

    Args:
        table: Table name.
        select: Columns to select.
        eq: column=value equality filters.
        in_: column=values membership filters.
        gte: column>=value filters.
        lte: column<=value filters.
        order_by: Column to order by.
        desc: Descending order.
        page_key: Unique column appended to the ordering so pages don't
            overlap or skip rows.
        page_size: Rows per request (default PAGE_SIZE, which must not
            exceed the server's max-rows).
        client: Client to use (default: service client).

    Returns:
        List of row dicts (empty when the table has no matches).

    Raises:
        DataFetchError: any page could not be read.
    """
    page_size = page_size or PAGE_SIZE
    rows: List[Dict] = []
    offset = 0
    try:
        client = client or get_client()
        while True:
            query = _apply_filters(
                client.table(table).select(select), eq=eq, in_=in_, gte=gte, lte=lte,
            )
            if order_by:
                query = query.order(order_by, desc=desc)
            if page_key and page_key != order_by:
                query = query.order(page_key)

            page = query.range(offset, offset + page_size - 1).execute().data or []
            rows.extend(page)
            if len(page) < page_size:
                break
            offset += page_size
    except ConfigError:
        raise
    except Exception as e:
        logger.error("Supabase query failed on %s at offset %d: %s", table, offset, e)
        raise DataFetchError(f"Query on '{table}' failed: {e}", source=table, cause=e) from e

    logger.debug("Fetched %d rows from %s", len(rows), table)
    return rows


def fetch_page(
    table: str,
    select: str = "*",
    eq: Dict[str, Any] = None,
    order_by: Sequence[str] = (),
    desc: bool = True,
    page: int = 1,
    page_size: int = 10,
    client=None,
) -> Tuple[List[Dict], int]:
    """
    One page of rows plus the exact total match count, for paginated tables.

    Args:
        page: 1-based page number.
        order_by: Columns to order by, most significant first.

    Raises:
        DataFetchError: the query could not be executed.
    """
    start = (page - 1) * page_size
    try:
        client = client or get_client()
        query = _apply_filters(client.table(table).select(select, count="exact"), eq=eq)
        for column in order_by:
            query = query.order(column, desc=desc)
        result = query.range(start, start + page_size - 1).execute()
    except ConfigError:
        raise
    except Exception as e:
        logger.error("Supabase page query failed on %s: %s", table, e)
        raise DataFetchError(f"Query on '{table}' failed: {e}", source=table, cause=e) from e

    return result.data or [], result.count or 0


def insert_row(table: str, row: Dict, client=None) -> Dict:
    """
    Insert one row and return it as stored.

    Raises:
        DataWriteError: the insert failed or returned nothing.
    """
    try:
        client = client or get_client()
        result = client.table(table).insert(row).execute()
    except ConfigError:
        raise
    except Exception as e:
        logger.error("Supabase insert failed on %s: %s", table, e)
        raise DataWriteError(f"Insert into '{table}' failed: {e}", table=table, cause=e) from e

    stored = first_row(result.data)
    if stored is None:
        raise DataWriteError(f"Insert into '{table}' returned no row", table=table)
    logger.info("Inserted row into %s", table)
    return stored


def delete_rows(table: str, eq: Dict[str, Any], client=None) -> int:
    """
    Delete rows matching equality filters; returns how many were removed.

    Raises:
        DataWriteError: the delete failed.
    """
    if not eq:
        raise ValueError("delete_rows needs at least one filter")
    try:
        client = client or get_client()
        result = _apply_filters(client.table(table).delete(), eq=eq).execute()
    except ConfigError:
        raise
    except Exception as e:
        logger.error("Supabase delete failed on %s: %s", table, e)
        raise DataWriteError(f"Delete from '{table}' failed: {e}", table=table, cause=e) from e

    deleted = len(result.data or [])
    logger.info("Deleted %d rows from %s", deleted, table)
    return deleted


def fetch_single(
    table: str,
    select: str = "*",
    eq: Dict[str, Any] = None,
    client=None,
) -> Optional[Dict]:
    """Read at most one row matching the equality filters."""
    try:
        client = client or get_client()
        query = client.table(table).select(select)
        for col, val in (eq or {}).items():
            query = query.eq(col, val)
        result = query.limit(1).execute()
    except ConfigError:
        raise
    except Exception as e:
        logger.error("Supabase single-row query failed on %s: %s", table, e)
        raise DataFetchError(f"Query on '{table}' failed: {e}", source=table, cause=e) from e

    return first_row(result.data)


def rpc(fn: str, params: Dict[str, Any] = None, client=None) -> Any:
    """
    Invoke a stored procedure and return its raw payload.

    Raises:
        DataFetchError: the RPC call failed.
    """
    try:
        client = client or get_client()
        result = client.rpc(fn, params or {}).execute()
    except ConfigError:
        raise
    except Exception as e:
        logger.error("RPC %s failed: %s", fn, e)
        raise DataFetchError(f"RPC '{fn}' failed: {e}", source=fn, cause=e) from e
    return result.data


def check_connection() -> bool:
    """True when the service client can be created."""
    try:
        get_client()
        return True
    except Exception as e:
        logger.warning("Supabase not available: %s", e)
        return False
