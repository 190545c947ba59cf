"""Exceptions raised by the storage layer, the monitor and the reports."""


class WebgoneError(RuntimeError):
    """Base exception for webgone failures."""


class StorageUnavailable(WebgoneError):
    """Raised when the outage database cannot be opened, bootstrapped or read."""


class StorageWriteFailed(WebgoneError):
    """Raised when a transition write still fails after all retries."""

    def __init__(self, action: str, attempts: int) -> None:
        super().__init__(f"Failed to {action} after {attempts} attempt(s)")
        self.action = action
        self.attempts = attempts


class OutageStateError(WebgoneError):
    """Raised when a write would leave two open outages or reopen a closed one."""


class InvalidArgument(WebgoneError, ValueError):
    """Raised for arguments rejected before any monitoring or reporting starts."""
