"""
Watch Service for change-triggered rescans.

Coordinates file system watching with a debounced scan trigger. Provides
lifecycle management, statistics tracking, and error recovery.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from pcs.core.config import WatchConfig
from pcs.core.debouncer import ChangeDebouncer
from pcs.core.errors import ScanError, ScanInProgressError
from pcs.core.file_events import FileEvent
from pcs.core.models import ScanResult
from pcs.infrastructure.file_watcher import FileWatcherInterface
from pcs.services.scan_service import ScanOrchestrator

logger = logging.getLogger(__name__)


@dataclass
class WatchStats:
    """
    Statistics for the watch service.

    Tracks events received, scans triggered and rejected, timing
    information, and error counts.
    """

    started_at: datetime = field(default_factory=datetime.now)
    events_received: int = 0
    scans_triggered: int = 0
    scans_rejected: int = 0
    last_scan_at: datetime | None = None
    last_scan_duration_ms: float = 0.0
    errors: int = 0

    def to_dict(self) -> dict:
        """Serialize stats to dictionary for JSON reporting."""
        return {
            "started_at": self.started_at.isoformat(),
            "events_received": self.events_received,
            "scans_triggered": self.scans_triggered,
            "scans_rejected": self.scans_rejected,
            "last_scan_at": self.last_scan_at.isoformat() if self.last_scan_at else None,
            "last_scan_duration_ms": self.last_scan_duration_ms,
            "errors": self.errors,
        }


class WatchServiceError(Exception):
    """Base exception for watch service errors."""

    pass


class PathValidationError(WatchServiceError):
    """Raised when path validation fails."""

    pass


class WatchService:
    """
    File watching service that rescans a project after changes settle.

    Every file event restarts the debounce timer. When the quiet period
    elapses the orchestrator runs one scan in a worker thread. A trigger
    that arrives while a scan is active is dropped, never queued.
    """

    def __init__(
        self,
        orchestrator: ScanOrchestrator,
        file_watcher: FileWatcherInterface,
        config: WatchConfig | None = None,
    ):
        """
        Initialize the watch service.

        Args:
            orchestrator: Orchestrator that runs scans
            file_watcher: File system watcher implementation
            config: Watch configuration (defaults if None)
        """
        self._orchestrator = orchestrator
        self._file_watcher = file_watcher
        self._config = config or WatchConfig()
        self._debouncer: ChangeDebouncer | None = None
        self._stats = WatchStats()
        self._running = False
        self._event_loop: asyncio.AbstractEventLoop | None = None

    @property
    def config(self) -> WatchConfig:
        return self._config

    async def start(self) -> None:
        """
        Start the watch service.

        Validates the root, runs the initial scan if configured, and begins
        file system monitoring.

        Raises:
            PathValidationError: If the root doesn't exist or isn't a directory
            WatchServiceError: If the service is already running
        """
        if self._running:
            raise WatchServiceError("Watch service is already running")

        watch_path = Path(self._orchestrator.root).resolve()
        self._validate_path(watch_path)

        logger.info(
            f"Starting watch service for: {watch_path}",
            extra={"watch_path": str(watch_path), "debounce_ms": self._config.debounce_ms},
        )

        self._event_loop = asyncio.get_running_loop()
        self._stats = WatchStats()
        self._running = True

        if self._config.scan_on_start:
            await self._trigger_scan()

        self._debouncer = ChangeDebouncer(
            session=self._orchestrator.session,
            on_fire=self._trigger_scan,
            delay_ms=self._config.debounce_ms,
        )

        try:
            self._file_watcher.start(watch_path, self._on_file_event_sync)
        except (ValueError, RuntimeError) as e:
            self._running = False
            self._debouncer = None
            self._event_loop = None
            raise WatchServiceError(f"Failed to start file watcher: {e}") from e

        logger.info("Watch service started", extra={"watch_path": str(watch_path)})

    async def stop(self) -> None:
        """
        Stop the watch service.

        Cancels the pending scan trigger and releases the file watcher. A
        scan already running in a worker thread is left to finish.
        """
        if not self._running:
            logger.debug("Watch service is not running, nothing to stop")
            return

        logger.info("Stopping watch service...")
        self._running = False

        if self._debouncer is not None and self._debouncer.cancel():
            logger.debug("Dropped pending scan trigger on shutdown")

        self._file_watcher.stop()
        self._debouncer = None
        self._event_loop = None

        logger.info("Watch service stopped", extra={"stats": self._stats.to_dict()})

    def is_running(self) -> bool:
        return self._running

    def get_stats(self) -> WatchStats:
        return self._stats

    def get_pending_count(self) -> int:
        """Get the number of changes waiting for the quiet period."""
        if self._debouncer and self._debouncer.has_pending():
            return self._debouncer.pending_events
        return 0

    def notify_change(self) -> None:
        """
        Signal that the file system changed.

        Safe to call from any thread. The change is handed to the debouncer
        on the service's event loop.
        """
        loop = self._event_loop
        if loop is None or not self._running:
            return
        asyncio.run_coroutine_threadsafe(self._on_change(), loop)

    def _validate_path(self, path: Path) -> None:
        if not path.exists():
            raise PathValidationError(f"Path does not exist: {path}")
        if not path.is_dir():
            raise PathValidationError(f"Path is not a directory: {path}")

    def _on_file_event_sync(self, event: FileEvent) -> None:
        """
        Synchronous callback for file events from the watchdog thread.

        Schedules the async handler on the event loop.
        """
        loop = self._event_loop
        if loop is None or not self._running:
            return
        asyncio.run_coroutine_threadsafe(self._on_file_event(event), loop)

    async def _on_file_event(self, event: FileEvent) -> None:
        """Log the event and restart the quiet period."""
        if not self._running:
            return

        logger.debug(
            "File change detected: %s - %s",
            event.event_type.value,
            event.file_path,
            extra={
                "event_type": event.event_type.value,
                "file_path": str(event.file_path),
                "timestamp": event.timestamp,
            },
        )
        await self._on_change()

    async def _on_change(self) -> None:
        if not self._running or self._debouncer is None:
            return
        self._stats.events_received += 1
        await self._debouncer.on_change()

    async def _trigger_scan(self) -> ScanResult | None:
        """
        Run one scan in a worker thread.

        Returns:
            The ScanResult, or None if the scan was rejected or failed
        """
        start_time = time.time()
        try:
            result = await asyncio.to_thread(self._orchestrator.run_scan)
        except ScanInProgressError:
            self._stats.scans_rejected += 1
            logger.info("Scan already in progress, change-triggered scan dropped")
            return None
        except ScanError as e:
            self._stats.errors += 1
            logger.error(
                f"Change-triggered scan failed: {e}",
                extra={"error_type": type(e).__name__},
                exc_info=True,
            )
            return None

        duration_ms = (time.time() - start_time) * 1000
        self._stats.scans_triggered += 1
        self._stats.last_scan_at = datetime.now()
        self._stats.last_scan_duration_ms = duration_ms

        logger.info(
            "Change-triggered scan completed in %.2fms",
            duration_ms,
            extra={
                "duration_ms": duration_ms,
                "file_count": result.summary.file_count,
                "truncated": result.truncated,
            },
        )
        return result
