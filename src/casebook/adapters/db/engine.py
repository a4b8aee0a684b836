"""Database engine factory and backend detection.

Casebook runs on PostgreSQL (shared deployments) and SQLite (local files and
tests). Every engine is created here so both backends are configured the
same way wherever a connection is opened.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import create_engine, event
from sqlalchemy.engine import URL, make_url
from sqlalchemy.pool import StaticPool

if TYPE_CHECKING:
    from sqlite3 import Connection as SQLiteConnection

    from sqlalchemy.engine import Connection, Engine


class UnsupportedDialect(Exception):
    """Raised for database backends Casebook does not support."""


class DialectName(str, Enum):
    """Supported SQLAlchemy backend names."""

    POSTGRES = "postgresql"
    SQLITE = "sqlite"

    @classmethod
    def from_string(cls, dialect_str: str) -> DialectName:
        """Map a backend name or driver-qualified name to a DialectName.

        Accepts 'postgres', 'pg', 'postgresql+psycopg', 'sqlite+pysqlite'...

        Raises:
            UnsupportedDialect: if the backend is not supported.
        """
        base = (dialect_str or "").strip().lower().split("+", 1)[0]
        if base in {"postgres", "postgresql", "pg"}:
            return cls.POSTGRES
        if base == "sqlite":
            return cls.SQLITE
        raise UnsupportedDialect(f"Unsupported dialect: {dialect_str!r}")

    @classmethod
    def from_url(cls, url: str | URL) -> DialectName:
        return cls.from_string(make_url(str(url)).get_backend_name())

    @classmethod
    def from_sqlalchemy(cls, obj: Engine | Connection) -> DialectName:
        """Backend of a live Engine or Connection.

        Raises:
            UnsupportedDialect: if `obj` has no dialect or it is not supported.
        """
        try:
            name = obj.dialect.name
        except AttributeError as e:
            raise UnsupportedDialect(
                f"Object {type(obj).__name__} does not expose .dialect.name"
            ) from e
        return cls.from_string(name)


def is_sqlite(url: str | URL) -> bool:
    """Return True if the given SQLAlchemy URL or string corresponds to SQLite."""
    return make_url(str(url)).get_backend_name() == DialectName.SQLITE.value


def _is_sqlite_memory(url: str | URL) -> bool:
    u = make_url(str(url))
    return is_sqlite(u) and u.database in (None, "", ":memory:")


def make_engine(url: str | URL, *, echo: bool = False) -> Engine:
    """Create a SQLAlchemy Engine for the given URL.

    SQLite connections get these PRAGMAs on connect:
        - ``foreign_keys=ON`` (folders, versions and links reference their owners)
        - ``journal_mode=WAL`` (readers are not blocked by a writer)
        - ``synchronous=NORMAL``
        - ``temp_store=MEMORY``

    In-memory SQLite databases share one connection (``StaticPool``) so every
    unit of work sees the same database.

    Args:
        url: Database connection URL (str or :class:`URL`).
        echo: If True, log SQL statements.
    """

    if _is_sqlite_memory(url):
        engine = create_engine(
            url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        engine = create_engine(url, echo=echo)

    if is_sqlite(url):

        @event.listens_for(engine, "connect")
        def _sqlite_pragmas(dbapi_conn: SQLiteConnection, conn_record):  # type: ignore #pylint: disable=W0613
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA foreign_keys=ON;")
            cur.execute("PRAGMA journal_mode=WAL;")
            cur.execute("PRAGMA synchronous=NORMAL;")
            cur.execute("PRAGMA temp_store=MEMORY;")
            cur.close()

    return engine
