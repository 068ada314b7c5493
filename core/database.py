"""
core/database.py -- Engine construction and driver-error translation.

One SQLAlchemy engine is shared by the credential store (auth/store.py) and
the entry store (board/store.py), so both draw from the same bounded pool.

Pool policy (every URL except in-memory SQLite):
  pool_size=N, max_overflow=0 -- never more than N connections.
  pool_timeout                -- a caller waits this long for a free
                                 connection; QueuePool then raises
                                 sqlalchemy.exc.TimeoutError, which
                                 translate_errors() turns into Upstream.

In-memory SQLite URLs (tests) skip the pool arguments: they use
SingletonThreadPool, which rejects max_overflow / pool_timeout. File SQLite
gets a QueuePool and the same bound as any server database.

Layer rule: core/ is the kernel. No imports from api/, auth/, or board/.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.exc import SQLAlchemyError

from core.errors import Upstream


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _is_memory_sqlite(url: URL) -> bool:
    """True for `sqlite://`, `:memory:` and `file:...?mode=memory` URLs."""
    return url.database in (None, "", ":memory:") or url.query.get("mode") == "memory"


def create_db_engine(db_url: str, pool_size: int = 5, pool_timeout: float = 30.0) -> Engine:
    """Build the shared engine for db_url."""
    url = make_url(db_url)
    if url.get_backend_name() != "sqlite":
        return create_engine(
            url,
            pool_size=pool_size,
            max_overflow=0,
            pool_timeout=pool_timeout,
            pool_pre_ping=True,
        )

    connect_args = {"check_same_thread": False}
    if _is_memory_sqlite(url):
        engine = create_engine(url, connect_args=connect_args)
    else:
        engine = create_engine(
            url,
            connect_args=connect_args,
            pool_size=pool_size,
            max_overflow=0,
            pool_timeout=pool_timeout,
        )
    event.listen(engine, "connect", _set_wal_mode)
    return engine


@contextmanager
def translate_errors(logger: logging.Logger, action: str) -> Iterator[None]:
    """Re-raise any SQLAlchemy error inside the block as Upstream.

    The driver message goes to the log only. Clients get a generic message so
    connection strings and SQL never leak into responses.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        logger.exception("Data store failure during %s", action)
        raise Upstream("Data store unavailable.", detail=action) from exc
