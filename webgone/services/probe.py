import logging
import socket
import time
from enum import Enum

from ..config import settings

logger = logging.getLogger(__name__)


class ProbeResult(str, Enum):
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


def check(target_ip: str, target_port: int, timeout: float = settings.PROBE_TIMEOUT) -> ProbeResult:
    """
    Attempt one TCP handshake with target_ip:target_port.

    The connection is closed as soon as it is established; no data is sent.
    Refused, timed out, unreachable and unresolvable targets all count as
    DISCONNECTED rather than errors.
    """
    started = time.monotonic()
    try:
        with socket.create_connection((target_ip, target_port), timeout=timeout):
            return ProbeResult.CONNECTED
    except (OSError, ValueError, OverflowError) as e:
        # OverflowError/ValueError cover bad ports and malformed hostnames
        elapsed = time.monotonic() - started
        logger.debug(f"Connection to {target_ip}:{target_port} failed after {elapsed:.3f}s: {e}")
        return ProbeResult.DISCONNECTED
