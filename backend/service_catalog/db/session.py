import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from service_catalog.core.config import get_database_url

logger = logging.getLogger(__name__)

# Create Base class for models
Base = declarative_base()

# Internal lazy globals
_engine = None
_SessionLocal = None
_database_url = None


def _build_engine(database_url: str) -> Engine:
    url = make_url(database_url)
    if url.drivername.startswith("postgres"):
        return create_engine(
            database_url,
            pool_size=10,
            max_overflow=20,
            pool_pre_ping=True,  # Detects and refreshes stale connections
            pool_recycle=3600,
            connect_args={
                "application_name": "service_catalog",  # Visible in pg_stat_activity
                "connect_timeout": 10,
            },
        )
    if url.drivername.startswith("sqlite") and url.database in (None, "", ":memory:"):
        # Single shared in-memory database so DDL persists across sessions
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(database_url)


def get_engine() -> Engine:
    """Return a cached SQLAlchemy engine, creating it from DATABASE_URL on
    first call. If DATABASE_URL changed since the last call the engine is
    rebuilt, which lets tests point the application at their own database."""
    global _engine, _SessionLocal, _database_url
    database_url = get_database_url()
    if _engine is None or _database_url != database_url:
        if _engine is not None:
            _engine.dispose()
        _engine = _build_engine(database_url)
        _SessionLocal = None
        _database_url = database_url
        logger.debug(
            "SQLAlchemy engine created",
            extra={"context": {"dialect": _engine.dialect.name}},
        )
    return _engine


def get_sessionmaker() -> sessionmaker:
    """Return a cached sessionmaker bound to the lazy engine."""
    global _SessionLocal
    engine = get_engine()
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, expire_on_commit=False, bind=engine
        )
    return _SessionLocal


def SessionLocal() -> Session:
    """Return a new Session bound to the current engine."""
    return get_sessionmaker()()


def create_tables() -> None:
    """Create all tables in database using the lazy engine."""
    # Ensure models are registered on Base.metadata
    from service_catalog.db import base  # noqa: F401

    Base.metadata.create_all(bind=get_engine())


def drop_tables() -> None:
    from service_catalog.db import base  # noqa: F401

    Base.metadata.drop_all(bind=get_engine())


def dispose_engine() -> None:
    """Dispose the cached engine (used by tests between databases)."""
    global _engine, _SessionLocal, _database_url
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None
    _database_url = None
