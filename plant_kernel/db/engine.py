"""
Module: plant_kernel.db.engine
Responsibility: The process-wide SQLAlchemy engine, its session factory and
    the commit-or-rollback session scope used by the CLI.
Architecture position: Kernel > DB.  ``create_tables`` imports the module
    ORM registry lazily; nothing else here reaches above the kernel.

SQLite URLs (tests, a single workstation) get a StaticPool, so one
in-memory database is shared by every session, and ``PRAGMA foreign_keys``
is switched on for each connection.  Any other URL gets a QueuePool with
pre-ping.

Everything except ``init_engine_from_url`` raises RuntimeError until an
engine has been initialized.
"""

import atexit
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from plant_kernel.logging_config import configure_logging, get_logger

logger = get_logger("db.engine")

_engine: Engine | None = None
_SessionFactory: sessionmaker[Session] | None = None


def _sqlite_pragmas(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


def _build_engine(database_url: str, echo: bool, pool_size: int, max_overflow: int) -> Engine:
    if make_url(database_url).get_backend_name() == "sqlite":
        engine = create_engine(
            database_url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        event.listen(engine, "connect", _sqlite_pragmas)
        return engine

    return create_engine(
        database_url,
        echo=echo,
        poolclass=QueuePool,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_pre_ping=True,
        pool_recycle=1800,
    )


def init_engine_from_url(
    database_url: str,
    echo: bool = False,
    pool_size: int = 10,
    max_overflow: int = 5,
) -> Engine:
    """
    Replace the process engine with one for ``database_url``.

    ``pool_size`` and ``max_overflow`` only apply to pooled (non-SQLite)
    databases; they come from the ``database`` section of the config set.
    """
    global _engine, _SessionFactory

    reset_engine()
    _engine = _build_engine(database_url, echo, pool_size, max_overflow)
    _SessionFactory = sessionmaker(bind=_engine, expire_on_commit=False)

    configure_logging()
    logger.info(
        "engine_initialized",
        extra={"dialect": _engine.dialect.name, "echo": echo},
    )
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")
    return _engine


def get_session() -> Session:
    if _SessionFactory is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")
    return _SessionFactory()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """
    Yield a session that commits when the block exits normally.

    Any exception rolls the session back and propagates unchanged.
    """
    session = get_session()
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
    """Create the table for every ORM model in ``plant_modules``."""
    from plant_kernel.db.base import Base
    from plant_modules._orm_registry import import_all_orm_models

    engine = get_engine()
    import_all_orm_models()
    Base.metadata.create_all(engine)
    logger.info("tables_created", extra={"table_count": len(Base.metadata.tables)})


def reset_engine() -> None:
    """Dispose the engine, if any, and forget the session factory."""
    global _engine, _SessionFactory

    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionFactory = None


atexit.register(reset_engine)
