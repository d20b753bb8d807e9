"""
Process-wide scan session state.

Tracks whether a scan is active (at most one at a time) and the single
pending debounce timer. Both use test-and-set semantics under a lock.
"""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Protocol

from pcs.core.errors import ScanInProgressError

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    """Anything that can be cancelled, such as an asyncio.Task."""

    def cancel(self, *args: Any) -> Any: ...


class ScanSessionState:
    """
    Scan-in-progress flag plus a single pending-timer slot.

    Starts idle with no timer.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._scanning = False
        self._timer: TimerHandle | None = None

    @property
    def is_scanning(self) -> bool:
        """Check if a scan is currently active."""
        with self._lock:
            return self._scanning

    @property
    def pending_timer(self) -> TimerHandle | None:
        """Get the pending timer handle, if any."""
        with self._lock:
            return self._timer

    def try_begin(self) -> bool:
        """
        Mark a scan as active if none is.

        Returns:
            True if the caller now owns the scan, False if one is already active
        """
        with self._lock:
            if self._scanning:
                return False
            self._scanning = True
            return True

    def end(self) -> None:
        """Mark the active scan as finished."""
        with self._lock:
            self._scanning = False

    @contextmanager
    def scan_guard(self) -> Iterator[None]:
        """
        Hold the scan flag for the duration of a block.

        Raises:
            ScanInProgressError: If another scan is already active
        """
        if not self.try_begin():
            raise ScanInProgressError("A scan is already in progress")
        try:
            yield
        finally:
            self.end()

    def replace_timer(self, handle: TimerHandle) -> TimerHandle | None:
        """
        Store a new pending timer.

        Returns:
            The previously pending timer, which the caller should cancel
        """
        with self._lock:
            previous = self._timer
            self._timer = handle
            return previous

    def clear_timer(self, handle: TimerHandle) -> bool:
        """
        Clear the slot if it still holds the given timer.

        Returns:
            True if the slot was cleared
        """
        with self._lock:
            if self._timer is handle:
                self._timer = None
                return True
            return False

    def cancel_timer(self) -> bool:
        """
        Cancel and clear the pending timer.

        Returns:
            True if a timer was pending
        """
        with self._lock:
            handle = self._timer
            self._timer = None

        if handle is None:
            return False
        handle.cancel()
        logger.debug("Cancelled pending scan trigger")
        return True
