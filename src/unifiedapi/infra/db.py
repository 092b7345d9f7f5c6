"""Database access layer using psycopg2.

Provides:
- Database: explicitly constructed store handle owning a bounded connection pool
- Database.txn(): context manager for short, safe transactions
- Database.ping(): connectivity probe used at startup
- fetchone/fetchall: query helpers for repositories
- database_from_settings(): build a Database from Settings
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Iterator, Sequence
from urllib.parse import urlparse

import psycopg2
from psycopg2.extensions import connection as PgConnection, cursor as PgCursor
from psycopg2.pool import ThreadedConnectionPool

from unifiedapi.config import Settings


def _dsn_has_password(dsn: str) -> bool:
    """Check whether a libpq DSN or URL already carries a password."""
    if "://" in dsn:
        return bool(urlparse(dsn).password)
    return any(part.startswith("password=") for part in dsn.split())


def connect_kwargs(
    dsn: str,
    *,
    password: str | None = None,
    sslmode: str | None = None,
) -> dict[str, Any]:
    """Build keyword arguments for psycopg2.connect().

    The password is only injected when the DSN does not carry one.
    """
    kwargs: dict[str, Any] = {}
    if password and not _dsn_has_password(dsn):
        kwargs["password"] = password
    if sslmode:
        kwargs["sslmode"] = sslmode
    return kwargs


class Database:
    """Pooled PostgreSQL handle.

    The pool is created lazily on first use so an application can be
    constructed (and tested) without a reachable database. Callers beyond
    maxconn wait for a connection to be returned instead of failing.
    """

    def __init__(
        self,
        dsn: str | None,
        *,
        minconn: int = 1,
        maxconn: int = 10,
        password: str | None = None,
        sslmode: str | None = None,
    ) -> None:
        self._dsn = dsn
        self._minconn = minconn
        self._maxconn = maxconn
        self._password = password
        self._sslmode = sslmode
        self._pool: ThreadedConnectionPool | None = None
        self._lock = threading.Lock()
        self._slots = threading.BoundedSemaphore(maxconn)

    def _get_pool(self) -> ThreadedConnectionPool:
        with self._lock:
            if self._pool is None:
                if not self._dsn:
                    raise psycopg2.OperationalError("DATABASE_URL environment variable not set")
                self._pool = ThreadedConnectionPool(
                    self._minconn,
                    self._maxconn,
                    self._dsn,
                    **connect_kwargs(self._dsn, password=self._password, sslmode=self._sslmode),
                )
            return self._pool

    @contextmanager
    def connection(self) -> Iterator[PgConnection]:
        """Borrow a connection from the pool and return it on exit.

        Blocks while all maxconn connections are checked out.
        """
        with self._slots:
            pool = self._get_pool()
            conn = pool.getconn()
            try:
                yield conn
            finally:
                pool.putconn(conn, close=bool(conn.closed))

    @contextmanager
    def txn(self) -> Iterator[PgCursor]:
        """Context manager for a short, safe transaction.

        Commits on successful exit, rolls back on exception.

        Example:
            with db.txn() as cur:
                cur.execute("UPDATE t SET x = %s WHERE id = %s", (1, 2))
        """
        with self.connection() as conn:
            try:
                with conn.cursor() as cur:
                    yield cur
                conn.commit()
            except Exception:
                if not conn.closed:
                    conn.rollback()
                raise

    def ping(self) -> str:
        """Return the current database name. Raises on connectivity failure."""
        with self.txn() as cur:
            row = fetchone(cur, "SELECT current_database()")
        return row[0]

    def close(self) -> None:
        """Close every pooled connection. Safe to call more than once."""
        with self._lock:
            if self._pool is not None:
                self._pool.closeall()
                self._pool = None


def database_from_settings(settings: Settings) -> Database:
    return Database(
        settings.database_url,
        minconn=settings.db_pool_min,
        maxconn=settings.db_pool_max,
        password=settings.db_password,
        sslmode=settings.db_sslmode,
    )


def fetchone(
    cur: PgCursor,
    query: str,
    params: Sequence[Any] | None = None,
) -> tuple[Any, ...] | None:
    """Execute query and fetch one row.

    Args:
        cur: Database cursor.
        query: SQL query with %s placeholders.
        params: Query parameters.

    Returns:
        Single row tuple or None if no results.
    """
    cur.execute(query, params)
    return cur.fetchone()


def fetchall(
    cur: PgCursor,
    query: str,
    params: Sequence[Any] | None = None,
) -> list[tuple[Any, ...]]:
    """Execute query and fetch all rows.

    Args:
        cur: Database cursor.
        query: SQL query with %s placeholders.
        params: Query parameters.

    Returns:
        List of row tuples.
    """
    cur.execute(query, params)
    return cur.fetchall()
