# allowance_tracker/services/db.py
from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

# Import the models' Base so create_all() sees both tables.
from allowance_tracker.models.transaction import Base, Transaction  # noqa: F401

logger = logging.getLogger(__name__)

# -----------------------
# Configuration
# -----------------------
DB_PATH = os.getenv("DB_PATH", "data/app.db")
DATABASE_URL = os.getenv("DATABASE_URL")

ENGINE: Optional[Engine] = None
SessionLocal: Optional[sessionmaker] = None


def _sqlite_url(path: str) -> str:
    folder = os.path.dirname(path)
    if folder:
        os.makedirs(folder, exist_ok=True)
    return f"sqlite:///{path}"


def configure(url: Optional[str] = None) -> Engine:
    """
    (Re)bind the module engine and session factory.
    Defaults to DATABASE_URL, then the SQLite file at DB_PATH.
    """
    global ENGINE, SessionLocal
    if ENGINE is not None:
        ENGINE.dispose()

    url = url or DATABASE_URL or _sqlite_url(DB_PATH)
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    ENGINE = create_engine(url, connect_args=connect_args, future=True)

    if url.startswith("sqlite"):
        # Enable foreign keys on SQLite
        @event.listens_for(ENGINE, "connect")
        def set_sqlite_pragma(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    SessionLocal = sessionmaker(bind=ENGINE, autoflush=False, autocommit=False, future=True)
    logger.debug("Database bound to %s", ENGINE.url)
    return ENGINE


def get_engine() -> Engine:
    """Expose the SQLAlchemy Engine, creating it on first use."""
    if ENGINE is None:
        configure()
    return ENGINE


# -----------------------
# Public API
# -----------------------
def init_db(url: Optional[str] = None) -> Engine:
    """
    Create all tables (no-op if they already exist).
    Call this once on app startup; pass a URL to bind a different database.
    """
    engine = configure(url) if url else get_engine()
    Base.metadata.create_all(bind=engine)
    return engine


def get_session() -> Session:
    """
    Return a new Session. Remember to close() it after use,
    or prefer the session_scope() context manager below.
    """
    get_engine()
    return SessionLocal()


@contextmanager
def session_scope() -> Iterator[Session]:
    """
    Context manager for a transactional scope:

        with session_scope() as session:
            session.add(...)

    Commits on success; rolls back on exception; always closes.
    """
    session: Session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def clear_transactions() -> None:
    """Delete all rows from the 'transactions' table but keep schema and budget."""
    with session_scope() as session:
        session.execute(text("DELETE FROM transactions"))


def reset_database() -> None:
    """Factory reset: drop and recreate every table."""
    engine = get_engine()
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    logger.info("Database reset")
