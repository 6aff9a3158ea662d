# labtrack/database.py
"""
Database connection, session management, and transaction scoping.
Uses SQLAlchemy over an embedded SQLite file by default. All models are
imported by load_models() so metadata covers every table before
create_all() runs.
"""

import os
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from labtrack.config import settings
from labtrack.exceptions import StorageError, TrackerError
from labtrack.utils.logger import get_logger

logger = get_logger(__name__)

Base = declarative_base()


def _enable_sqlite_pragmas(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")     # logs.User is ON DELETE RESTRICT
    cursor.execute("PRAGMA journal_mode=WAL")    # readers don't block the writer
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()


def build_engine(url: str) -> Engine:
    """
    Create an engine for the given URL.
    SQLite URLs get FK enforcement + WAL on every new connection; an
    in-memory URL is pinned to one shared connection (used by tests).
    """
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return create_engine(url, pool_pre_ping=True, echo=False)

    database = parsed.database
    kwargs = {"connect_args": {"check_same_thread": False}}
    if not database or database == ":memory:":
        kwargs["poolclass"] = StaticPool
    else:
        directory = os.path.dirname(os.path.abspath(database))
        os.makedirs(directory, exist_ok=True)

    engine = create_engine(url, echo=False, **kwargs)
    event.listen(engine, "connect", _enable_sqlite_pragmas)
    return engine


engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """FastAPI dependency: yields a DB session and closes it after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session, passthrough: tuple = ()):
    """
    One unit of work: commit on success, roll back on any error.
    Store errors, constraint violations included, surface as StorageError;
    domain errors pass through. A caller that translates a constraint
    violation itself names it in passthrough, e.g. (IntegrityError,).
    """
    try:
        yield db
        db.commit()
    except TrackerError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        if isinstance(exc, passthrough):
            raise
        logger.error(f"Storage failure: {exc}", exc_info=True)
        raise StorageError(f"Storage failure: {exc.__class__.__name__}") from exc
    except Exception:
        db.rollback()
        raise


def load_models():
    """Import all models here so SQLAlchemy knows about them."""
    from labtrack.models.user import User               # noqa
    from labtrack.models.log_entry import LogEntry      # noqa
    from labtrack.models.credential import Credential   # noqa
    return Base.metadata
