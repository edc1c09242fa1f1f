"""
Database engine and session handling for the weekly record store.

One process-wide engine, created by ``init_engine_from_url()``.  Services are
handed the session factory and open a short ``session_scope()`` per upload or
query; nothing holds a session between requests.

SQLite file databases run in WAL mode with a busy timeout: readers keep
reading the last committed state while an upload commits, and a second
writer waits instead of failing.  In-memory SQLite is refused: its
connections cannot share one database without also sharing uncommitted
writes.  PostgreSQL runs at READ COMMITTED; a snapshot is a single SELECT,
which is consistent on its own.
"""

import atexit
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from ar_kernel.exceptions import ConfigurationError
from ar_kernel.logging_config import configure_logging, get_logger

logger = get_logger("db.engine")

_SQLITE_MEMORY_NAMES = ("", ":memory:")

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def is_sqlite_memory_url(database_url: str) -> bool:
    """True for SQLite URLs that name a private or shared in-memory database."""
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return False
    name = url.database or ""
    return (
        name in _SQLITE_MEMORY_NAMES
        or name.startswith("file::memory:")
        or url.query.get("mode") == "memory"
    )


def _sqlite_engine(database_url: str, echo: bool) -> Engine:
    engine = create_engine(
        database_url,
        echo=echo,
        connect_args={"check_same_thread": False, "timeout": 30},
    )

    @event.listens_for(engine, "connect")
    def _pragmas(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA busy_timeout=30000")
        cursor.close()

    return engine


def init_engine_from_url(
    database_url: str,
    echo: bool = False,
    pool_size: int = 10,
    max_overflow: int = 10,
) -> Engine:
    """
    Create the engine and session factory for ``database_url``.

    Replaces any engine from an earlier call; the old one is disposed.
    ``pool_size`` and ``max_overflow`` apply to server databases only.

    Raises:
        ConfigurationError: ``database_url`` is an in-memory SQLite database.
    """
    global _engine, _session_factory

    if is_sqlite_memory_url(database_url):
        raise ConfigurationError(
            "database_url",
            "in-memory SQLite cannot isolate readers from an upload in progress; use a file path",
        )

    if _engine is not None:
        _engine.dispose()

    if database_url.startswith("sqlite"):
        _engine = _sqlite_engine(database_url, echo)
    else:
        _engine = create_engine(
            database_url,
            echo=echo,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=True,
            isolation_level="READ COMMITTED",
        )
    _session_factory = sessionmaker(bind=_engine, expire_on_commit=False)

    configure_logging()
    logger.info("engine_initialized", extra={"dialect": _engine.dialect.name})
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError("Database not initialized; call init_engine_from_url() first")
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    if _session_factory is None:
        raise RuntimeError("Database not initialized; call init_engine_from_url() first")
    return _session_factory


@contextmanager
def session_scope(factory: sessionmaker[Session]) -> Iterator[Session]:
    """
    One transaction: commit on normal exit, roll back and re-raise on error.

        with session_scope(factory) as session:
            session.add(model)
    """
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables() -> None:
    """Create ``weekly_records`` and ``upload_batches`` if they do not exist."""
    from ar_kernel.db.base import Base
    import ar_kernel.models  # noqa: F401  (registers the tables)

    Base.metadata.create_all(get_engine())
    logger.info("tables_created", extra={"tables": sorted(Base.metadata.tables)})


def drop_tables() -> None:
    """Drop every store table.  Tests only."""
    from ar_kernel.db.base import Base
    import ar_kernel.models  # noqa: F401

    Base.metadata.drop_all(get_engine())


def reset_engine() -> None:
    """Dispose the engine and forget the session factory."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


atexit.register(lambda: _engine.dispose() if _engine is not None else None)
