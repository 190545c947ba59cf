from datetime import datetime

from pydantic import BaseModel, ConfigDict


class OutageOut(BaseModel):
    """A stored outage, detached from the database session."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    start_time: datetime
    end_time: datetime | None = None
    duration_seconds: int | None = None

    @property
    def is_open(self) -> bool:
        return self.end_time is None
