import logging
import math
from datetime import datetime, timezone
from typing import Callable, List, Optional

from apscheduler.events import EVENT_JOB_ERROR
from apscheduler.schedulers.blocking import BlockingScheduler

from ..config import settings
from ..errors import InvalidArgument
from ..schemas.outage import OutageOut
from .probe import ProbeResult, check
from .storage import OutageStore
from .tracker import LinkState, MonitorState, OutageTracker, Transition

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Monitor:
    """
    Probes one target on a fixed cadence and records outages.

    Ticks are scheduled on interval boundaries measured from the start of
    the loop, so time spent probing does not accumulate as drift.
    """

    def __init__(
        self,
        store: OutageStore,
        target_ip: str = settings.TARGET_IP,
        target_port: int = settings.TARGET_PORT,
        interval_seconds: float = settings.CHECK_INTERVAL,
        probe_timeout: float = settings.PROBE_TIMEOUT,
        probe: Callable[[str, int, float], ProbeResult] = check,
        clock: Callable[[], datetime] = utcnow,
    ):
        validate_watch_arguments(target_port, interval_seconds, probe_timeout)

        self.store = store
        self.target_ip = target_ip
        self.target_port = target_port
        self.interval_seconds = interval_seconds
        self.probe_timeout = probe_timeout
        self._probe = probe
        self._clock = clock

        self.state = MonitorState()
        self.tracker = OutageTracker(store, self.state)

        self._scheduler: Optional[BlockingScheduler] = None
        self._fatal_error: Optional[BaseException] = None

    def reconcile(self) -> List[OutageOut]:
        """
        Close outages left open by a previous run.

        A crashed or killed monitor cannot know when connectivity came back,
        so the dangling outage is closed at restart time and monitoring
        starts fresh in the UP state.
        """
        closed = []
        restarted_at = self._clock()
        dangling = self.store.find_open()
        while dangling is not None:
            record = self.store.close_outage(dangling.id, restarted_at)
            logger.warning(
                f"⚠️ Outage #{record.id} from a previous run was still open, "
                f"closed at restart ({record.duration_seconds} seconds)"
            )
            closed.append(record)
            dangling = self.store.find_open()
        return closed

    def tick(self) -> Optional[Transition]:
        result = self._probe(self.target_ip, self.target_port, self.probe_timeout)
        transition = self.tracker.observe(result, self._clock())

        if transition is None and self.state.link == LinkState.DOWN:
            logger.debug(
                f"{self.target_ip}:{self.target_port} still unreachable, "
                f"down since {self.state.outage_started_at.isoformat()}"
            )
        elif transition is None:
            logger.debug(f"{self.target_ip}:{self.target_port} {result.value}")
        elif transition.state == LinkState.DOWN:
            logger.info(f"🔴 Internet connection lost at {transition.at.isoformat()}")
        else:
            logger.info(
                f"✅ Internet connection restored at {transition.at.isoformat()}. "
                f"Outage duration: {transition.duration_seconds} seconds"
            )
        return transition

    def run(self) -> None:
        """Reconcile, then tick until interrupted. Storage failures are re-raised."""
        self.reconcile()

        logger.info("Starting internet connectivity monitoring...")
        logger.info(
            f"Checking {self.target_ip}:{self.target_port} every {self.interval_seconds:g} seconds"
        )
        logger.info("Press Ctrl+C to stop monitoring.")

        self._scheduler = BlockingScheduler(timezone="UTC")
        self._scheduler.add_listener(self._on_job_error, EVENT_JOB_ERROR)
        self._scheduler.add_job(
            self.tick,
            "interval",
            seconds=self.interval_seconds,
            next_run_time=utcnow(),
            id="probe",
            max_instances=1,
            coalesce=True,
        )

        try:
            self._scheduler.start()
        except (KeyboardInterrupt, SystemExit):
            logger.info("Monitoring stopped")
            if self._scheduler.running:
                self._scheduler.shutdown(wait=False)

        if self._fatal_error is not None:
            raise self._fatal_error

    def _on_job_error(self, event) -> None:
        # A failed tick means an open/close was not recorded; keep no
        # further state that the database no longer agrees with.
        logger.error(f"Monitoring tick failed: {event.exception}")
        self._fatal_error = event.exception
        if self._scheduler is not None and self._scheduler.running:
            self._scheduler.shutdown(wait=False)


def validate_watch_arguments(target_port: int, interval_seconds: float, probe_timeout: float) -> None:
    if not 0 < target_port <= 65535:
        raise InvalidArgument(f"Port must be between 1 and 65535, got {target_port}")
    if not math.isfinite(interval_seconds) or interval_seconds <= 0:
        raise InvalidArgument(f"Interval must be positive, got {interval_seconds}")
    if not math.isfinite(probe_timeout) or probe_timeout <= 0:
        raise InvalidArgument(f"Probe timeout must be positive, got {probe_timeout}")
    if probe_timeout >= interval_seconds:
        raise InvalidArgument(
            f"Probe timeout ({probe_timeout}s) must be shorter than the interval ({interval_seconds}s)"
        )
