import csv
import logging
import math
from collections import defaultdict
from pathlib import Path
from typing import Iterable, List, TextIO

from ..errors import InvalidArgument
from ..schemas.analytics import CostReport, MonthlyCost, OutageStats
from ..schemas.outage import OutageOut
from .storage import OutageStore

logger = logging.getLogger(__name__)

CSV_COLUMNS = ["id", "start_time", "end_time", "duration_seconds"]
SECONDS_PER_HOUR = 3600


def get_stats(store: OutageStore) -> OutageStats:
    """
    Aggregate statistics over closed outages.
    An ongoing outage is reported on its own and left out of the totals.
    """
    closed = store.list_closed()
    ongoing = store.find_open()

    if not closed:
        return OutageStats(ongoing=ongoing)

    durations = [o.duration_seconds for o in closed]
    total_downtime = sum(durations)

    return OutageStats(
        total_outages=len(closed),
        total_downtime=total_downtime,
        average_duration=total_downtime / len(closed),
        longest_outage=max(durations),
        shortest_outage=min(durations),
        first_start=min(o.start_time for o in closed),
        last_end=max(o.end_time for o in closed),
        ongoing=ongoing,
    )


def get_recent_outages(store: OutageStore, limit: int = 5) -> List[OutageOut]:
    """Most recent closed outages, newest first. Asking for more than exist returns them all."""
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise InvalidArgument(f"Number of outages must be a positive integer, got {limit!r}")
    return store.list_closed(limit=limit, newest_first=True)


def write_csv(records: Iterable[OutageOut], stream: TextIO, lineterminator: str = "\r\n") -> int:
    writer = csv.writer(stream, lineterminator=lineterminator)
    writer.writerow(CSV_COLUMNS)

    rows = 0
    for outage in records:
        writer.writerow([
            outage.id,
            outage.start_time.isoformat(),
            outage.end_time.isoformat() if outage.end_time else "",
            outage.duration_seconds if outage.duration_seconds is not None else "",
        ])
        rows += 1
    return rows


def export_to_csv(store: OutageStore, path) -> int:
    """Write every outage to path as CSV, replacing the file. Returns the number of rows."""
    path = Path(path)
    records = store.list_all()
    with path.open("w", newline="", encoding="utf-8") as f:
        rows = write_csv(records, f)
    logger.info(f"Exported {rows} outages to {path}")
    return rows


def is_leap_year(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def days_in_month(year: int, month: int) -> int:
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    if month == 2:
        return 29 if is_leap_year(year) else 28
    if month in (4, 6, 9, 11):
        return 30
    return 31


def calculate_monthly_costs(store: OutageStore, monthly_rate: float) -> CostReport:
    """
    Price the downtime of each month against a monthly subscription rate.

    Each closed outage counts wholly towards the (UTC) month it started in,
    even when it runs past the end of that month. Months are returned
    newest first.
    """
    monthly_rate = _validate_rate(monthly_rate)

    buckets = defaultdict(lambda: {"outages": 0, "seconds": 0})
    for outage in store.list_closed():
        key = (outage.start_time.year, outage.start_time.month)
        buckets[key]["outages"] += 1
        buckets[key]["seconds"] += outage.duration_seconds

    months = []
    for (year, month) in sorted(buckets, reverse=True):
        bucket = buckets[(year, month)]
        days = days_in_month(year, month)
        hours_in_month = days * 24
        hourly_rate = monthly_rate / hours_in_month

        months.append(MonthlyCost(
            year=year,
            month=month,
            outages=bucket["outages"],
            downtime_seconds=bucket["seconds"],
            days_in_month=days,
            hourly_rate=hourly_rate,
            percent_downtime=bucket["seconds"] / (hours_in_month * SECONDS_PER_HOUR) * 100,
            cost=hourly_rate * (bucket["seconds"] / SECONDS_PER_HOUR),
        ))

    report = CostReport(monthly_rate=monthly_rate, months=months)
    if not months:
        return report

    total_cost = sum(m.cost for m in months)
    total_hours = sum(m.downtime_seconds for m in months) / SECONDS_PER_HOUR

    report.total_cost = total_cost
    report.average_monthly_cost = total_cost / len(months)
    report.total_downtime_hours = total_hours
    report.average_monthly_downtime_hours = total_hours / len(months)
    report.cost_per_downtime_hour = total_cost / total_hours if total_hours > 0 else 0.0
    return report


def _validate_rate(monthly_rate) -> float:
    try:
        rate = float(monthly_rate)
    except (TypeError, ValueError):
        raise InvalidArgument(f"Monthly rate must be a number, got {monthly_rate!r}") from None
    if not math.isfinite(rate) or rate < 0:
        raise InvalidArgument(f"Monthly rate must be a non-negative number, got {monthly_rate!r}")
    return rate
