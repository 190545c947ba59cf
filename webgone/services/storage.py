"""
Outage persistence.

Outages are appended when connectivity is lost and closed once it comes back.
Closing sets end_time and duration_seconds in a single UPDATE, so readers in
other processes see either an open record or a fully closed one.
"""
import logging
import time
from datetime import datetime, timezone
from typing import Callable, List, Optional

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import settings
from ..errors import OutageStateError, StorageUnavailable, StorageWriteFailed
from ..models.outage import Outage
from ..schemas.outage import OutageOut

logger = logging.getLogger(__name__)


class OutageStore:
    def __init__(
        self,
        session_factory: Callable[[], Session],
        write_retries: int = settings.WRITE_RETRIES,
        retry_delay: float = settings.WRITE_RETRY_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._session_factory = session_factory
        self._write_retries = max(0, write_retries)
        self._retry_delay = retry_delay
        self._sleep = sleep

    def open_outage(self, start_time: datetime) -> int:
        """Persist a new open outage and return its id."""

        def _open(db: Session) -> int:
            existing = db.query(Outage).filter(Outage.end_time.is_(None)).first()
            if existing:
                raise OutageStateError(
                    f"Outage #{existing.id} is still open, cannot open another one"
                )
            outage = Outage(start_time=start_time)
            db.add(outage)
            db.flush()
            return outage.id

        return self._write("open outage", _open)

    def close_outage(self, record_id: int, end_time: datetime) -> OutageOut:
        """Set end_time and duration of an open outage and return the closed record."""

        def _close(db: Session) -> OutageOut:
            outage = db.query(Outage).filter(Outage.id == record_id).first()
            if not outage:
                raise OutageStateError(f"Outage #{record_id} does not exist")
            if outage.end_time is not None:
                raise OutageStateError(f"Outage #{record_id} is already closed")

            closed_at = end_time.astimezone(timezone.utc)
            if closed_at < outage.start_time:
                # Wall clock stepped backwards while we were down
                logger.warning(
                    f"End time {end_time.isoformat()} is before start of outage "
                    f"#{record_id}, clamping to its start"
                )
                closed_at = outage.start_time

            outage.end_time = closed_at
            outage.duration_seconds = int((closed_at - outage.start_time).total_seconds())
            return OutageOut.model_validate(outage)

        return self._write(f"close outage #{record_id}", _close)

    def list_all(self) -> List[OutageOut]:
        """All outages, open or closed, in chronological order."""
        return self._read(
            lambda db: db.query(Outage).order_by(Outage.start_time.asc(), Outage.id.asc()).all()
        )

    def list_closed(self, limit: Optional[int] = None, newest_first: bool = False) -> List[OutageOut]:
        def _query(db: Session):
            query = db.query(Outage).filter(Outage.end_time.isnot(None))
            if newest_first:
                query = query.order_by(Outage.start_time.desc(), Outage.id.desc())
            else:
                query = query.order_by(Outage.start_time.asc(), Outage.id.asc())
            if limit is not None:
                query = query.limit(limit)
            return query.all()

        return self._read(_query)

    def count(self) -> int:
        db = self._session_factory()
        try:
            return db.query(Outage).count()
        except SQLAlchemyError as e:
            raise StorageUnavailable(f"Cannot read outages: {e}") from e
        finally:
            db.close()

    def find_open(self) -> Optional[OutageOut]:
        records = self._read(
            lambda db: db.query(Outage)
            .filter(Outage.end_time.is_(None))
            .order_by(Outage.id.asc())
            .limit(1)
            .all()
        )
        return records[0] if records else None

    def _read(self, query: Callable[[Session], list]) -> List[OutageOut]:
        db = self._session_factory()
        try:
            return [OutageOut.model_validate(row) for row in query(db)]
        except SQLAlchemyError as e:
            raise StorageUnavailable(f"Cannot read outages: {e}") from e
        finally:
            db.close()

    def _write(self, action: str, operation: Callable[[Session], object]):
        """
        Run a write in its own transaction.

        OperationalError (locked database, disk hiccup) is retried up to
        write_retries times; anything else propagates right away.
        """
        attempts = self._write_retries + 1
        last_error = None

        for attempt in range(1, attempts + 1):
            db = self._session_factory()
            try:
                result = operation(db)
                db.commit()
                return result
            except OperationalError as e:
                db.rollback()
                last_error = e
                logger.warning(f"Attempt {attempt}/{attempts} to {action} failed: {e}")
                if attempt < attempts:
                    self._sleep(self._retry_delay)
            except Exception:
                db.rollback()
                raise
            finally:
                db.close()

        logger.error(f"Giving up: could not {action}")
        raise StorageWriteFailed(action, attempts) from last_error
