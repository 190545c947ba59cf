from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from .outage import OutageOut


class OutageStats(BaseModel):
    # Aggregates cover closed outages only
    total_outages: int = 0
    total_downtime: int = 0  # seconds
    average_duration: float = 0.0
    longest_outage: int = 0
    shortest_outage: int = 0
    first_start: Optional[datetime] = None
    last_end: Optional[datetime] = None
    ongoing: Optional[OutageOut] = None


class MonthlyCost(BaseModel):
    year: int
    month: int
    outages: int
    downtime_seconds: int
    days_in_month: int
    hourly_rate: float
    percent_downtime: float
    cost: float


class CostReport(BaseModel):
    monthly_rate: float
    months: List[MonthlyCost]
    total_cost: float = 0.0
    average_monthly_cost: float = 0.0
    total_downtime_hours: float = 0.0
    average_monthly_downtime_hours: float = 0.0
    cost_per_downtime_hour: float = 0.0  # total_cost / total_downtime_hours
