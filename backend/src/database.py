"""Database engine and session factory for the document store.

The SQLAlchemy repositories in infrastructure.repositories open one short-lived
session per store operation, so every write or delete is its own transaction.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from models.base import Base

SQLITE_BUSY_TIMEOUT = 30


def build_engine(database_url: str) -> Engine:
    """Create an engine for the given URL.

    Pool settings only apply to server databases. File SQLite waits up to
    SQLITE_BUSY_TIMEOUT seconds for the write lock, since repositories write
    from several threadpool workers at once. In-memory SQLite shares a
    single connection so every session sees the same data; it suits
    single-worker scripts, not concurrent sweeps.
    """
    engine_kwargs = {
        "pool_pre_ping": True,
        "echo": False,
    }

    if database_url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {
            "check_same_thread": False,
            "timeout": SQLITE_BUSY_TIMEOUT,
        }
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            engine_kwargs["poolclass"] = StaticPool
    else:
        engine_kwargs["pool_size"] = 5
        engine_kwargs["max_overflow"] = 10

    return create_engine(database_url, **engine_kwargs)


def build_session_factory(engine: Engine) -> sessionmaker:
    """Create the session factory handed to the repositories."""
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
    )


def init_db(engine: Engine) -> None:
    """Create the requests and notifications tables if missing."""
    # Import models so they register on Base.metadata
    import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
