import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest


def _configure_path() -> None:
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))


_configure_path()

from webgone.database import create_db_engine, create_session_factory, init_db  # noqa: E402
from webgone.services.storage import OutageStore  # noqa: E402


T0 = datetime(2024, 3, 10, 12, 0, 0, tzinfo=timezone.utc)


def at(seconds: float) -> datetime:
    return T0 + timedelta(seconds=seconds)


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "internet_outages.db"


@pytest.fixture
def engine(db_path):
    engine = create_db_engine(f"sqlite:///{db_path}")
    init_db(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def store(session_factory):
    return OutageStore(session_factory, write_retries=2, retry_delay=0, sleep=lambda _: None)


@pytest.fixture
def add_outage(store):
    """Insert a closed outage starting at `start` lasting `seconds`."""

    def _add(start: datetime, seconds: int):
        record_id = store.open_outage(start)
        return store.close_outage(record_id, start + timedelta(seconds=seconds))

    return _add
