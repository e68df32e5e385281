"""
Database engine, session management, and base model.

Every model inherits from Base. Every request gets a session
from get_db(). Ledger mutations run inside atomic(), which is
the only place the ledger commits or rolls back.
"""

import time
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker, DeclarativeBase

from finance_tracker.config import get_settings

settings = get_settings()


def _connect_args(url: str) -> dict:
    # SQLite connections are shared with the FastAPI threadpool
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


# --- Engine ---
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    connect_args=_connect_args(settings.DATABASE_URL),
)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ignores foreign keys unless asked per connection."""
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# --- Session Factory ---
# autoflush=False: SQL is only sent when we flush or commit,
# so validation can run before anything reaches the database.
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    pass


def now_ms() -> int:
    """Current time as integer epoch milliseconds."""
    return int(time.time() * 1000)


@contextmanager
def atomic(db: Session):
    """
    Run a block as one all-or-nothing unit of work.

    Commits when the block finishes, rolls back and re-raises on
    any exception. Storage errors pass through unchanged.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


# --- Dependency for FastAPI ---
def get_db():
    """
    Provide a database session for a single request.

    The try/finally pattern ensures the session is always
    closed, even when the endpoint raises.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
