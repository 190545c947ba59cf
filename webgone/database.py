import logging

from sqlalchemy import create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import settings
from .errors import StorageUnavailable

logger = logging.getLogger(__name__)

Base = declarative_base()


def normalize_db_url(value: str) -> str:
    """Accept either a SQLAlchemy URL or a plain path to a sqlite file."""
    if "://" in value:
        return value
    return f"sqlite:///{value}"


def _enable_sqlite_wal(dbapi_connection, connection_record):
    # WAL lets report commands read while the monitor is writing.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.close()


def create_db_engine(db_url: str | None = None):
    db_url = normalize_db_url(db_url or settings.DB_URL)

    connect_args = {}
    if db_url.startswith("sqlite"):
        connect_args = {
            "check_same_thread": False,
            "timeout": settings.DB_BUSY_TIMEOUT,
        }

    engine = create_engine(db_url, connect_args=connect_args, future=True)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _enable_sqlite_wal)
    return engine


def create_session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False)


def init_db(engine) -> None:
    """
    Create the outage table if it does not exist yet.

    Raises StorageUnavailable when the database cannot be reached, since
    nothing else can work without it.
    """
    # Import so the model is registered on Base.metadata
    from .models import outage  # noqa: F401

    try:
        Base.metadata.create_all(engine)
    except SQLAlchemyError as e:
        logger.error(f"Cannot open outage database {engine.url!r}: {e}")
        raise StorageUnavailable(f"Cannot open outage database: {e}") from e
