"""
Debouncer component for change-triggered scans.

Collapses bursts of file system notifications into a single scan trigger
fired after a quiet period.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from pcs.core.session import ScanSessionState

logger = logging.getLogger(__name__)

DEFAULT_DELAY_MS = 2000


class ChangeDebouncer:
    """
    Async debouncer that fires one trigger after changes stop arriving.

    Every change cancels the pending timer and starts a new one. The timer
    lives in the ScanSessionState's single slot. Once a timer fires it leaves
    the slot, so later changes never cancel an in-flight scan.

    Attributes:
        delay_ms: Quiet period in milliseconds
        pending_events: Number of changes collapsed into the pending trigger
    """

    def __init__(
        self,
        session: ScanSessionState,
        on_fire: Callable[[], Awaitable[None]],
        delay_ms: int = DEFAULT_DELAY_MS,
    ):
        """
        Initialize the debouncer.

        Args:
            session: Session state holding the pending-timer slot
            on_fire: Async callback invoked when the quiet period elapses
            delay_ms: Quiet period in milliseconds (default: 2000)
        """
        self._session = session
        self._on_fire = on_fire
        self._delay_ms = delay_ms
        self._pending_events = 0

    @property
    def delay_ms(self) -> int:
        """Get the debounce delay in milliseconds."""
        return self._delay_ms

    @property
    def pending_events(self) -> int:
        """Get the number of changes collapsed into the pending trigger."""
        return self._pending_events

    async def on_change(self) -> None:
        """
        Record a change and restart the quiet period.

        Must be called from within a running event loop.
        """
        self._pending_events += 1
        task = asyncio.create_task(self._timer_callback())
        previous = self._session.replace_timer(task)
        if previous is not None:
            previous.cancel()

    async def _timer_callback(self) -> None:
        """Wait for the quiet period, then fire."""
        try:
            await asyncio.sleep(self._delay_ms / 1000.0)
        except asyncio.CancelledError:
            # Replaced by a newer change
            return

        current = asyncio.current_task()
        if current is not None:
            self._session.clear_timer(current)
        await self._fire()

    async def _fire(self) -> None:
        """Invoke the callback and reset the pending count."""
        collapsed = self._pending_events
        self._pending_events = 0
        logger.debug(f"Quiet period elapsed, firing after {collapsed} change(s)")

        try:
            await self._on_fire()
        except Exception as e:
            logger.error(f"Error in debounced scan trigger: {e}")

    async def flush(self) -> bool:
        """
        Fire a pending trigger immediately.

        Returns:
            True if a trigger was pending and has fired
        """
        if not self._session.cancel_timer():
            return False
        await self._fire()
        return True

    def cancel(self) -> bool:
        """
        Drop the pending trigger without firing.

        Returns:
            True if a trigger was pending
        """
        self._pending_events = 0
        return self._session.cancel_timer()

    def has_pending(self) -> bool:
        """Check if a trigger is waiting for its quiet period."""
        return self._session.pending_timer is not None
