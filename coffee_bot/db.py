"""
Database connection management.

Environment variables:
    - DATABASE_URL: SQLAlchemy connection URL (see config.py for the default
      and for postgres:// URL normalization)

Both relations (menu, stats) rely on single-statement upserts. Those are
dialect specific in SQLAlchemy, so upsert_insert() picks the right insert
construct for the bound engine.
"""

import logging
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import sessionmaker, Session

from .config import DATABASE_URL
from .models import Base

logger = logging.getLogger(__name__)


def _connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        # Request threads share the pool; writers wait on the file lock
        return {"check_same_thread": False, "timeout": 30}
    return {}


engine = create_engine(
    DATABASE_URL,
    pool_pre_ping=True,
    echo=False,
    connect_args=_connect_args(DATABASE_URL),
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency that yields a SQLAlchemy Session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create the menu and stats tables if they do not exist yet."""
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables initialised (%s)", engine.url.get_backend_name())


def upsert_insert(db: Session, table):
    """
    Return a dialect-specific INSERT for ``table`` that supports
    ``on_conflict_do_update``.

    Raises:
        NotImplementedError: for backends without ON CONFLICT support.
    """
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(table)
    if dialect == "sqlite":
        return sqlite.insert(table)
    raise NotImplementedError(f"Atomic upsert is not supported on '{dialect}'")
