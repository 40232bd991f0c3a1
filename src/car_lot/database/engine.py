"""Database engine and session management.

The database location comes from Settings: ``database_url`` when set, else the
SQLite file at ``db_path`` (environment overrides DATABASE_URL and
CAR_LOT_DB_PATH are applied by ``load_settings``). One engine is shared per
process and built on first use; ``init_db`` rebinds it to another database.
"""

import logging
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from car_lot.config import load_settings
from car_lot.models.db_models import Base
from car_lot.models.pydantic_models import Settings

logger = logging.getLogger(__name__)

SQLITE_BUSY_TIMEOUT = 30  # seconds

_engine: Engine | None = None
_SessionLocal: sessionmaker[Session] | None = None


def get_database_url(db_path: Path | str | None = None, settings: Settings | None = None) -> str:
    """Resolve the database URL.

    Args:
        db_path: SQLite file to use instead of the configured database.
        settings: Application settings. Loaded with load_settings() if None.

    Returns:
        SQLAlchemy URL string.
    """
    if db_path is not None:
        return f"sqlite:///{db_path}"

    settings = settings or load_settings()
    if settings.database_url:
        return settings.database_url
    return f"sqlite:///{settings.db_path}"


def _configure_sqlite_connection(dbapi_connection: Any, connection_record: Any) -> None:
    """Enforce foreign keys and use WAL so readers don't block the writer."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.close()


def _build_engine(url: str, echo: bool) -> Engine:
    """Create an engine for url and make sure every table exists."""
    connect_args: dict[str, Any] = {}
    is_sqlite = make_url(url).get_backend_name() == "sqlite"

    if is_sqlite:
        connect_args = {"check_same_thread": False, "timeout": SQLITE_BUSY_TIMEOUT}
        database = make_url(url).database
        if database and database != ":memory:":
            Path(database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(url, echo=echo, connect_args=connect_args)
    if is_sqlite:
        event.listen(engine, "connect", _configure_sqlite_connection)

    Base.metadata.create_all(engine)
    return engine


def get_engine() -> Engine:
    """Get the shared engine, building it from settings on first use."""
    global _engine

    if _engine is None:
        _engine = _build_engine(get_database_url(), echo=False)

    return _engine


def init_db(
    db_path: Path | str | None = None,
    echo: bool = False,
    settings: Settings | None = None,
) -> Engine:
    """Point the shared engine at a database and create its tables.

    Any engine built earlier in the process is disposed first, so an explicit
    db_path always takes effect.

    Args:
        db_path: SQLite file to use instead of the configured database.
        echo: Whether to echo SQL statements.
        settings: Application settings. Loaded with load_settings() if None.

    Returns:
        The new shared engine.
    """
    global _engine

    reset_engine()
    _engine = _build_engine(get_database_url(db_path, settings), echo=echo)
    logger.info("Database ready at %s", _engine.url.render_as_string(hide_password=True))
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    """Get or create the session factory bound to the shared engine."""
    global _SessionLocal

    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())

    return _SessionLocal


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Get a database session as a context manager.

    Yields:
        Database session, closed on exit.
    """
    session = get_session_factory()()
    try:
        yield session
    finally:
        session.close()


def reset_engine() -> None:
    """Dispose the shared engine and session factory."""
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None
