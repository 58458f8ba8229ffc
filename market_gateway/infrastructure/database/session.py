"""Database session management with connection pooling"""

from contextlib import contextmanager
from typing import Any, Dict, Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session
from market_gateway.config import settings
from market_gateway.domain.exceptions import PersistenceError


def build_engine(database_url: str, timeout_seconds: float = settings.db_timeout_seconds) -> Engine:
    """Create an engine whose persistence calls are bounded by timeout_seconds"""
    if database_url.startswith("sqlite"):
        # SQLite busy timeout: how long a writer waits for the database lock
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False, "timeout": timeout_seconds},
        )

    connect_args: Dict[str, Any] = {}
    if database_url.startswith("postgresql"):
        connect_args["options"] = f"-c statement_timeout={int(timeout_seconds * 1000)}"

    # Connection pool: recycle after 1 hour to avoid stale connections
    return create_engine(
        database_url,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=timeout_seconds,
        pool_recycle=3600,
        connect_args=connect_args,
    )


engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Session:
    """Dependency injection for database sessions"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """
    Commit everything written inside the block as one database transaction.

    Any exception rolls the whole block back. Driver/store failures surface
    as PersistenceError; domain exceptions propagate unchanged.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(f"database operation failed: {e.__class__.__name__}") from e
    except Exception:
        db.rollback()
        raise
