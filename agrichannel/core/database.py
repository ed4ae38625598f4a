import logging

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import QueuePool

from agrichannel.core.config import Settings
from agrichannel.core.errors import StorageBusyError, StorageError

logger = logging.getLogger(__name__)

Base = declarative_base()

_BUSY_MARKERS = ("database is locked", "database is busy", "database table is locked")


def create_db_engine(settings: Settings) -> Engine:
    """
    Build the SQLite engine.

    One pooled connection means one writer at a time; callers wait at most
    ``db_pool_timeout_seconds`` for it, and SQLite itself waits at most
    ``db_busy_timeout_ms`` on a locked file.
    """
    db_url = settings.database_url
    engine = create_engine(
        db_url,
        connect_args={"check_same_thread": False},
        poolclass=QueuePool,
        pool_size=1,
        max_overflow=0,
        pool_timeout=settings.db_pool_timeout_seconds,
    )

    busy_timeout = int(settings.db_busy_timeout_ms)

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragmas(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute(f"PRAGMA busy_timeout={busy_timeout}")
        finally:
            cursor.close()
        logger.debug("SQLite pragmas applied (WAL, synchronous=NORMAL, busy_timeout=%d)", busy_timeout)

    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request):
    db: Session = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def translate_db_error(exc: Exception) -> StorageError:
    """Map a SQLAlchemy failure onto the storage error taxonomy."""
    if isinstance(exc, PoolTimeoutError):
        return StorageBusyError()
    if isinstance(exc, OperationalError):
        text = str(exc.orig if exc.orig is not None else exc).lower()
        if any(marker in text for marker in _BUSY_MARKERS):
            return StorageBusyError()
    return StorageError(str(exc))


def commit(db: Session) -> None:
    """
    Commit the session, rolling back and raising a storage error on failure.

    IntegrityError is re-raised untouched so callers can turn constraint
    violations into domain errors.
    """
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        raise translate_db_error(exc) from exc
