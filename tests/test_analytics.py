import csv
import io
from datetime import datetime, timezone

import pytest

from webgone.errors import InvalidArgument
from webgone.services.analytics_service import (
    CSV_COLUMNS,
    export_to_csv,
    get_recent_outages,
    get_stats,
    write_csv,
)

from conftest import at


def test_stats_on_empty_storage(store):
    stats = get_stats(store)

    assert stats.total_outages == 0
    assert stats.total_downtime == 0
    assert stats.average_duration == 0
    assert stats.longest_outage == 0
    assert stats.first_start is None
    assert stats.ongoing is None


def test_stats_aggregate_closed_outages(store, add_outage):
    add_outage(at(0), 10)
    add_outage(at(100), 30)
    add_outage(at(200), 20)

    stats = get_stats(store)

    assert stats.total_outages == 3
    assert stats.total_downtime == 60
    assert stats.average_duration == pytest.approx(20.0)
    assert stats.longest_outage == 30
    assert stats.shortest_outage == 10
    assert stats.first_start == at(0)
    assert stats.last_end == at(220)


def test_stats_report_ongoing_outage_separately(store, add_outage):
    add_outage(at(0), 10)
    store.open_outage(at(500))

    stats = get_stats(store)

    assert stats.total_outages == 1
    assert stats.total_downtime == 10
    assert stats.ongoing.start_time == at(500)


def test_recent_is_newest_first_and_skips_open(store, add_outage):
    for i in range(7):
        add_outage(at(i * 60), i + 1)
    store.open_outage(at(1000))

    recent = get_recent_outages(store)

    assert len(recent) == 5
    starts = [o.start_time for o in recent]
    assert starts == sorted(starts, reverse=True)
    assert len(set(starts)) == len(starts)
    assert starts[0] == at(360)
    assert all(not o.is_open for o in recent)


def test_recent_limit_above_count_returns_everything(store, add_outage):
    add_outage(at(0), 5)
    add_outage(at(60), 5)

    recent = get_recent_outages(store, 50)

    assert len(recent) == 2
    assert len(recent) <= store.count()


@pytest.mark.parametrize("limit", [0, -3, True, 2.5])
def test_recent_rejects_non_positive_limit(store, limit):
    with pytest.raises(InvalidArgument):
        get_recent_outages(store, limit)


def test_csv_layout(store, add_outage):
    add_outage(at(0), 12)
    store.open_outage(at(100))
    buffer = io.StringIO()

    rows = write_csv(store.list_all(), buffer)

    lines = buffer.getvalue().splitlines()
    assert rows == 2
    assert lines[0] == ",".join(CSV_COLUMNS)
    assert lines[1] == "1,2024-03-10T12:00:00+00:00,2024-03-10T12:00:12+00:00,12"
    assert lines[2] == "2,2024-03-10T12:01:40+00:00,,"


def test_csv_export_reproduces_stored_outages(tmp_path, store, add_outage):
    add_outage(at(0), 12)
    add_outage(at(3600), 250)
    store.open_outage(at(7200))
    target = tmp_path / "outages.csv"

    export_to_csv(store, target)

    with target.open(newline="", encoding="utf-8") as f:
        parsed = list(csv.DictReader(f))

    def _ts(value):
        return datetime.fromisoformat(value) if value else None

    exported = {
        (_ts(r["start_time"]), _ts(r["end_time"]), int(r["duration_seconds"]) if r["duration_seconds"] else None)
        for r in parsed
    }
    stored = {(o.start_time, o.end_time, o.duration_seconds) for o in store.list_all()}
    assert exported == stored
    assert all(_ts(r["start_time"]).tzinfo == timezone.utc for r in parsed)


def test_csv_export_overwrites_existing_file(tmp_path, store, add_outage):
    target = tmp_path / "outages.csv"
    target.write_text("stale\ncontent\nthat is longer than the export\n" * 10)
    add_outage(at(0), 1)

    export_to_csv(store, target)

    assert target.read_text().splitlines() == [
        "id,start_time,end_time,duration_seconds",
        "1,2024-03-10T12:00:00+00:00,2024-03-10T12:00:01+00:00,1",
    ]


def test_csv_export_to_missing_directory_raises(tmp_path, store):
    with pytest.raises(OSError):
        export_to_csv(store, tmp_path / "nope" / "outages.csv")
