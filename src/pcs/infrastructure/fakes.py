"""
Fake implementations for testing.
"""

from collections.abc import Callable
from pathlib import Path

from pcs.core.file_events import FileEvent


class FakeFileWatcher:
    """
    Fake file watcher for testing.

    Allows manual triggering of file events without actual file system monitoring.
    Implements the same interface as FileWatcher for use in tests.
    """

    def __init__(self) -> None:
        self._callback: Callable[[FileEvent], None] | None = None
        self._watch_path: Path | None = None
        self._running = False
        self._events: list[FileEvent] = []

    @property
    def watch_path(self) -> Path | None:
        return self._watch_path

    def start(self, path: Path, callback: Callable[[FileEvent], None]) -> None:
        """
        Start the fake watcher.

        Args:
            path: Directory path to watch
            callback: Function to call when events are triggered
        """
        if self._running:
            raise RuntimeError("File watcher is already running")

        self._watch_path = Path(path).resolve()
        self._callback = callback
        self._running = True

    def stop(self) -> None:
        """Stop the fake watcher."""
        self._running = False
        self._callback = None
        self._watch_path = None

    def is_running(self) -> bool:
        return self._running

    def trigger_event(self, event: FileEvent) -> None:
        """
        Manually trigger a file event.

        Args:
            event: The FileEvent to trigger
        """
        if not self._running:
            raise RuntimeError("File watcher is not running")

        self._events.append(event)
        if self._callback is not None:
            self._callback(event)

    def get_triggered_events(self) -> list[FileEvent]:
        """Get all events that have been triggered."""
        return list(self._events)
