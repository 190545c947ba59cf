"""
Command line entry point

Usage:
  webgone watch [--ip ADDR] [--port PORT] [--interval SECONDS]
  webgone stats
  webgone recent [N]
  webgone export [PATH]
  webgone cost RATE [--currency SYMBOL]
"""
import argparse
import logging
import signal
import sys

from . import __version__
from .config import settings
from .database import create_db_engine, create_session_factory, init_db
from .errors import InvalidArgument, StorageUnavailable, StorageWriteFailed
from .services.analytics_service import (
    calculate_monthly_costs,
    export_to_csv,
    get_recent_outages,
    get_stats,
    write_csv,
)
from .services.monitor import Monitor, validate_watch_arguments
from .services.storage import OutageStore
from .utils.formatting import format_hms, format_timestamp, month_name, render_table

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INVALID_ARGUMENT = 2
EXIT_STORAGE_UNAVAILABLE = 3
EXIT_STORAGE_WRITE_FAILED = 4


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{value!r} is not an integer") from None
    if number <= 0:
        raise argparse.ArgumentTypeError(f"{value!r} must be a positive integer")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="webgone",
        description="Monitor internet connectivity and report on outages",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--db", default=settings.DB_URL,
                        help="SQLAlchemy URL or path of the sqlite outage database")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL,
                        help="Logging level (DEBUG, INFO, WARNING, ...)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    watch = subparsers.add_parser("watch", help="Watch for internet outages")
    watch.add_argument("-i", "--ip", default=settings.TARGET_IP, help="IP address to check")
    watch.add_argument("-p", "--port", type=int, default=settings.TARGET_PORT, help="Port to check")
    watch.add_argument("-I", "--interval", type=float, default=settings.CHECK_INTERVAL,
                       help="Interval in seconds")
    watch.add_argument("-t", "--timeout", type=float, default=settings.PROBE_TIMEOUT,
                       help="Connect timeout in seconds, must be shorter than the interval")

    subparsers.add_parser("stats", help="Print statistics about internet outages")

    recent = subparsers.add_parser("recent", help="View recent internet outages")
    recent.add_argument("limit", nargs="?", type=_positive_int, default=5,
                        help="Amount of outages to display")

    export = subparsers.add_parser("export", help="Export internet outages to a CSV file or stdout")
    export.add_argument("output", nargs="?", help="Output file path (stdout when omitted)")

    cost = subparsers.add_parser("cost", help="Calculate cost impact of internet outages")
    cost.add_argument("rate", type=float, help="Monthly rate for cost analysis")
    cost.add_argument("-c", "--currency", default=settings.CURRENCY, help="Currency symbol")

    return parser


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format='%(asctime)s %(levelname)s %(name)s %(message)s',
    )
    logging.getLogger("apscheduler").setLevel(logging.WARNING)


def open_store(db_url: str) -> OutageStore:
    try:
        engine = create_db_engine(db_url)
    except Exception as e:
        # Malformed URLs and missing drivers surface here
        raise StorageUnavailable(f"Cannot open outage database: {e}") from e
    init_db(engine)
    return OutageStore(create_session_factory(engine))


def cmd_watch(store: OutageStore, args) -> int:
    monitor = Monitor(
        store,
        target_ip=args.ip,
        target_port=args.port,
        interval_seconds=args.interval,
        probe_timeout=args.timeout,
    )
    monitor.run()
    return EXIT_OK


def cmd_stats(store: OutageStore, args) -> int:
    stats = get_stats(store)

    print("\nInternet Outage Statistics:")
    print("-" * 50)
    print(f"Total number of outages: {stats.total_outages}")
    print(f"Total outage duration: {stats.total_downtime} seconds ({format_hms(stats.total_downtime)})")
    print(f"Average outage duration: {stats.average_duration:.2f} seconds")
    print(f"Longest outage: {stats.longest_outage} seconds")
    print(f"Shortest outage: {stats.shortest_outage} seconds")
    if stats.first_start:
        print(f"Covering: {format_timestamp(stats.first_start)} to {format_timestamp(stats.last_end)} UTC")
    if stats.ongoing:
        print(f"Ongoing outage since: {format_timestamp(stats.ongoing.start_time)} UTC")
    print("-" * 50 + "\n")
    return EXIT_OK


def cmd_recent(store: OutageStore, args) -> int:
    outages = get_recent_outages(store, args.limit)
    if not outages:
        print("No outages recorded yet.")
        return EXIT_OK

    rows = [
        [format_timestamp(o.start_time), format_timestamp(o.end_time), str(o.duration_seconds)]
        for o in outages
    ]
    print(render_table(["Start Time (UTC)", "End Time (UTC)", "Duration (seconds)"], rows, "llr"))
    return EXIT_OK


def cmd_export(store: OutageStore, args) -> int:
    if not args.output:
        # sys.stdout translates newlines itself
        write_csv(store.list_all(), sys.stdout, lineterminator="\n")
        return EXIT_OK

    try:
        export_to_csv(store, args.output)
    except OSError as e:
        print(f"❌ Could not write {args.output}: {e}", file=sys.stderr)
        return EXIT_ERROR
    print(f"Data exported to {args.output}")
    return EXIT_OK


def cmd_cost(store: OutageStore, args) -> int:
    report = calculate_monthly_costs(store, args.rate)
    currency = args.currency

    print("\nMonthly Cost Analysis:")
    rows = [
        [
            str(m.year),
            month_name(m.month),
            str(m.outages),
            format_hms(m.downtime_seconds),
            f"{m.percent_downtime:.3f}%",
            f"{currency}{m.cost:.3f}",
            f"{currency}{m.hourly_rate:.3f}/h",
        ]
        for m in report.months
    ]
    print(render_table(
        ["Year", "Month", "Outages", "Total Time", "% Downtime", "Cost Impact", "Rate/Hour"],
        rows,
        "llrrrrr",
    ))

    if not report.months:
        print("\nNo outages recorded yet.\n")
        return EXIT_OK

    summary = [
        ["Total cost of outages", f"{currency}{report.total_cost:.3f}"],
        ["Average monthly cost", f"{currency}{report.average_monthly_cost:.3f}"],
        ["Total downtime", f"{report.total_downtime_hours:.1f} hours "
                           f"({report.average_monthly_downtime_hours:.1f} hours/month avg)"],
        ["Cost per hour of downtime", f"{currency}{report.cost_per_downtime_hour:.3f}/h"],
    ]
    print("\nSummary:")
    print(render_table(["Metric", "Value"], summary, "lr"))
    print()
    return EXIT_OK


COMMANDS = {
    "watch": cmd_watch,
    "stats": cmd_stats,
    "recent": cmd_recent,
    "export": cmd_export,
    "cost": cmd_cost,
}


def _exit_on_sigterm(signum, frame):
    raise SystemExit(EXIT_OK)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    if args.command == "watch":
        signal.signal(signal.SIGTERM, _exit_on_sigterm)

    try:
        if args.command == "watch":
            validate_watch_arguments(args.port, args.interval, args.timeout)
        store = open_store(args.db)
        return COMMANDS[args.command](store, args)
    except InvalidArgument as e:
        print(f"❌ {e}", file=sys.stderr)
        return EXIT_INVALID_ARGUMENT
    except StorageUnavailable as e:
        logger.error(f"❌ {e}")
        return EXIT_STORAGE_UNAVAILABLE
    except StorageWriteFailed as e:
        logger.error(f"❌ {e}. The outage history may be incomplete.")
        return EXIT_STORAGE_WRITE_FAILED


if __name__ == "__main__":
    sys.exit(main())
