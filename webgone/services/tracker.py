"""
Outage state machine.

    UP   + connected    -> UP    (nothing to do)
    UP   + disconnected -> DOWN  (open an outage starting now)
    DOWN + disconnected -> DOWN  (outage continues)
    DOWN + connected    -> UP    (close the open outage at now)
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from .probe import ProbeResult
from .storage import OutageStore

logger = logging.getLogger(__name__)


class LinkState(str, Enum):
    UP = "up"
    DOWN = "down"


@dataclass
class MonitorState:
    """Per-process monitoring state, owned by the monitor loop."""

    link: LinkState = LinkState.UP
    open_outage_id: Optional[int] = None
    outage_started_at: Optional[datetime] = None


@dataclass(frozen=True)
class Transition:
    state: LinkState  # state entered
    at: datetime
    outage_id: int
    duration_seconds: Optional[int] = None  # only when the link came back UP


class OutageTracker:
    def __init__(self, store: OutageStore, state: MonitorState):
        self.store = store
        self.state = state

    def observe(self, result: ProbeResult, now: datetime) -> Optional[Transition]:
        """Feed one probe result; returns the transition it caused, if any."""
        if self.state.link == LinkState.UP:
            if result == ProbeResult.CONNECTED:
                return None
            outage_id = self.store.open_outage(now)
            # Only flip state once the write went through
            self.state.link = LinkState.DOWN
            self.state.open_outage_id = outage_id
            self.state.outage_started_at = now
            return Transition(state=LinkState.DOWN, at=now, outage_id=outage_id)

        if result == ProbeResult.DISCONNECTED:
            return None

        closed = self.store.close_outage(self.state.open_outage_id, now)
        self.state.link = LinkState.UP
        self.state.open_outage_id = None
        self.state.outage_started_at = None
        return Transition(
            state=LinkState.UP,
            at=closed.end_time,
            outage_id=closed.id,
            duration_seconds=closed.duration_seconds,
        )
