"""
Database connection handle and query utilities.

A ``Database`` wraps a single psycopg connection that is opened lazily on
first use, so building a handle never touches the network. Every operation
takes the handle explicitly; there is no module-level connection.

For testing, use ``Database.from_connection()`` to wrap a connection the
caller owns. Such a handle never closes the connection, and because each
operation runs inside ``conn.transaction()`` it nests as a savepoint in the
caller's transaction, which the test fixture rolls back.
"""

import itertools
import re
import time
from contextlib import contextmanager
from typing import Any, Iterator

import psycopg
from psycopg.conninfo import conninfo_to_dict
from psycopg.rows import dict_row

from albumdb.errors import ConnectError, ProbeError
from albumdb.log import get_logger

logger = get_logger(__name__)

_cursor_ids = itertools.count(1)


# password=... as a URI query parameter or a key/value conninfo entry
_PASSWORD_PARAM = re.compile(r"(^|[?&\s])(password\s*=\s*)('[^']*'|[^&\s]*)")


def redact_url(url: str) -> str:
    """Mask every password in a connection descriptor for logging."""
    url = _PASSWORD_PARAM.sub(r"\1\2****", url)
    scheme, sep, rest = url.partition("://")
    if not sep:
        return url
    location, q, query = rest.partition("?")
    credentials, at, host = location.rpartition("@")
    if not at or ":" not in credentials:
        return url
    user = credentials.split(":", 1)[0]
    return f"{scheme}://{user}:****@{host}{q}{query}"


# =============================================================================
# Connection Handle
# =============================================================================


class Database:
    """
    Lazily connected handle to a PostgreSQL database.

    States: unopened (no physical connection yet), open, closed. A handle
    whose connection was lost reconnects on next use.

    Usage:
        with connect(url) as db:
            await_ready(db)
            db.execute("INSERT ...", (...))
    """

    def __init__(self, conninfo: str):
        self.conninfo = conninfo
        self._conn: psycopg.Connection | None = None
        self._owned = True
        self._closed = False

    @classmethod
    def from_connection(cls, conn: psycopg.Connection) -> "Database":
        """Wrap an existing connection. The caller keeps ownership of it."""
        db = cls(conn.info.dsn)
        db._conn = conn
        db._owned = False
        return db

    @property
    def connection(self) -> psycopg.Connection:
        """The underlying connection, opened on first access."""
        if self._closed:
            raise psycopg.InterfaceError("the database handle is closed")
        if self._conn is None or (self._owned and self._conn.closed):
            self._conn = psycopg.connect(self.conninfo, autocommit=True)
        return self._conn

    @property
    def closed(self) -> bool:
        return self._closed

    def ping(self) -> None:
        """
        Probe the server with a trivial round trip.

        Raises:
            ProbeError: if the connection cannot be opened or the probe fails
        """
        try:
            self.connection.execute("SELECT 1")
        except psycopg.Error as e:
            raise ProbeError(str(e).strip()) from e

    def close(self) -> None:
        """Release the connection. Borrowed connections are left open."""
        if self._closed:
            return
        if self._owned and self._conn is not None:
            self._conn.close()
        self._conn = None
        self._closed = True

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # =========================================================================
    # Query Helpers
    # =========================================================================

    @contextmanager
    def cursor(self, row_factory=dict_row, name: str = ""):
        """
        Context manager for a cursor inside a transaction block.

        Commits on successful exit and rolls back on exception. Pass ``name``
        to get a server-side cursor that streams rows instead of fetching
        them all at once.
        """
        conn = self.connection
        with conn.transaction():
            with conn.cursor(name=name, row_factory=row_factory) as cur:
                yield cur

    def execute(self, query: str, params: tuple = None) -> None:
        """Execute a statement without returning results."""
        with self.cursor() as cur:
            cur.execute(query, params)

    def fetch_one(self, query: str, params: tuple = None, row_factory=dict_row) -> Any | None:
        """Execute a query and return the first row, or None if there is none."""
        with self.cursor(row_factory=row_factory) as cur:
            cur.execute(query, params)
            return cur.fetchone()

    def fetch_all(self, query: str, params: tuple = None, row_factory=dict_row) -> list[Any]:
        """Execute a query and return all rows, empty list if none."""
        with self.cursor(row_factory=row_factory) as cur:
            cur.execute(query, params)
            return cur.fetchall()

    def iter_rows(
        self,
        query: str,
        params: tuple = None,
        row_factory=dict_row,
        itersize: int = 100,
    ) -> Iterator[Any]:
        """
        Stream the rows of a query through a server-side cursor.

        The cursor lives on a dedicated connection that is closed when the
        generator is exhausted or closed, so writes made through this handle
        while the generator is paused commit on their own. A borrowed
        connection streams in place, inside its owner's transaction.

        The returned generator is single-use.
        """
        name = f"albumdb_cursor_{next(_cursor_ids)}"
        if not self._owned:
            with self.cursor(row_factory=row_factory, name=name) as cur:
                cur.itersize = itersize
                cur.execute(query, params)
                yield from cur
            return

        if self._closed:
            raise psycopg.InterfaceError("the database handle is closed")
        conn = psycopg.connect(self.conninfo)
        try:
            with conn.cursor(name=name, row_factory=row_factory) as cur:
                cur.itersize = itersize
                cur.execute(query, params)
                yield from cur
        finally:
            conn.close()


# =============================================================================
# Connection Management
# =============================================================================


def connect(descriptor: str) -> Database:
    """
    Build a handle for ``descriptor`` without contacting the server.

    Raises:
        ConnectError: if the descriptor cannot be parsed
    """
    try:
        conninfo_to_dict(descriptor)
    except psycopg.Error as e:
        raise ConnectError(
            f"invalid connection descriptor {redact_url(descriptor)!r}: {e}"
        ) from e
    return Database(descriptor)


def await_ready(db: Database, interval: float = 1.0, timeout: float | None = None) -> None:
    """
    Block until ``db`` answers a probe.

    Retries every ``interval`` seconds. With ``timeout=None`` this waits
    forever; otherwise ProbeError is raised once the next retry would pass
    the deadline.
    """
    deadline = None if timeout is None else time.monotonic() + timeout
    while True:
        try:
            db.ping()
        except ProbeError as e:
            logger.warning("%s", e)
            if deadline is not None and time.monotonic() + interval > deadline:
                raise ProbeError(f"database not reachable after {timeout:g}s: {e}") from e
            logger.info("Waiting for database, retrying in %gs...", interval)
            time.sleep(interval)
            continue
        logger.info("Connected to database.")
        return
