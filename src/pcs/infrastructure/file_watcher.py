"""
File watcher infrastructure component.

Provides file system monitoring using the watchdog library with support for:
- File creation, modification, deletion, and move events
- Exclusion-rule filtering with the same matcher the scan uses
- Thread-safe callback delivery
"""

import logging
import threading
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Protocol

from watchdog.events import (
    DirCreatedEvent,
    DirDeletedEvent,
    DirModifiedEvent,
    DirMovedEvent,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from pcs.core.file_events import FileEvent, FileEventType
from pcs.core.models import ExclusionRule
from pcs.core.pattern_matcher import PatternMatcher, get_default_matcher

logger = logging.getLogger(__name__)


class FileWatcherInterface(Protocol):
    """Protocol for file watcher implementations."""

    def start(self, path: Path, callback: Callable[[FileEvent], None]) -> None:
        """
        Start watching the specified directory.

        Args:
            path: Directory path to watch
            callback: Function to call when file events occur
        """
        ...

    def stop(self) -> None:
        """Stop watching and release resources."""
        ...

    def is_running(self) -> bool:
        """Check if the watcher is currently running."""
        ...


class FileWatcher(FileWatcherInterface):
    """
    File system watcher implementation using watchdog.

    Monitors a directory tree and emits FileEvent objects through a
    callback. Paths excluded by the ignore rules (or by the built-in
    rules) never produce events.
    """

    def __init__(
        self,
        ignore_rules: Sequence[ExclusionRule] | None = None,
        matcher: PatternMatcher | None = None,
    ):
        """
        Initialize the file watcher.

        Args:
            ignore_rules: Exclusion rules whose matches are not reported
            matcher: PatternMatcher to evaluate the rules (default matcher if None)
        """
        self._ignore_rules = list(ignore_rules or [])
        self._matcher = matcher or get_default_matcher()
        self._observer: Observer | None = None
        self._callback: Callable[[FileEvent], None] | None = None
        self._watch_path: Path | None = None
        self._lock = threading.Lock()

    @property
    def ignore_rules(self) -> list[ExclusionRule]:
        return list(self._ignore_rules)

    def start(self, path: Path, callback: Callable[[FileEvent], None]) -> None:
        """
        Start watching the specified directory.

        Args:
            path: Directory path to watch (must exist and be a directory)
            callback: Function to call when file events occur

        Raises:
            ValueError: If path doesn't exist or isn't a directory
            RuntimeError: If watcher is already running
        """
        with self._lock:
            if self._observer is not None and self._observer.is_alive():
                raise RuntimeError("File watcher is already running")

            path = Path(path).resolve()
            if not path.exists():
                raise ValueError(f"Path does not exist: {path}")
            if not path.is_dir():
                raise ValueError(f"Path is not a directory: {path}")

            self._watch_path = path
            self._callback = callback

            handler = _WatchdogEventHandler(
                callback=self._handle_event,
                ignore_rules=self._ignore_rules,
                matcher=self._matcher,
                root_path=path,
            )

            self._observer = Observer()
            self._observer.schedule(handler, str(path), recursive=True)
            self._observer.start()

            logger.info(f"Started watching: {path}")

    def stop(self) -> None:
        """Stop watching and release resources."""
        with self._lock:
            if self._observer is not None:
                self._observer.stop()
                self._observer.join(timeout=5.0)
                self._observer = None
                logger.info(f"Stopped watching: {self._watch_path}")
            self._callback = None
            self._watch_path = None

    def is_running(self) -> bool:
        """Check if the watcher is currently running."""
        with self._lock:
            return self._observer is not None and self._observer.is_alive()

    def _handle_event(self, event: FileEvent) -> None:
        """Forward events to the callback."""
        if self._callback is not None:
            try:
                self._callback(event)
            except Exception as e:
                logger.error(f"Error in file event callback: {e}")


class _WatchdogEventHandler(FileSystemEventHandler):
    """
    Internal watchdog event handler.

    Converts watchdog events to FileEvent objects and drops excluded paths.
    """

    def __init__(
        self,
        callback: Callable[[FileEvent], None],
        ignore_rules: list[ExclusionRule],
        matcher: PatternMatcher,
        root_path: Path,
    ):
        super().__init__()
        self._callback = callback
        self._ignore_rules = ignore_rules
        self._matcher = matcher
        self._root_path = root_path

    def _should_ignore(self, path: Path) -> bool:
        """
        Check if a path is excluded.

        Paths outside the watched root are ignored.
        """
        try:
            rel_path = path.relative_to(self._root_path).as_posix()
        except ValueError:
            return True

        if not rel_path or rel_path == ".":
            return True

        return self._matcher.matches(rel_path, self._ignore_rules, is_dir=False)

    def _emit_event(
        self,
        event_type: FileEventType,
        file_path: Path,
        old_path: Path | None = None,
    ) -> None:
        event = FileEvent(event_type=event_type, file_path=file_path, old_path=old_path)
        logger.debug(f"Emitting event: {event_type.value} - {file_path}")
        self._callback(event)

    def _handle_simple(self, event_type: FileEventType, event: FileSystemEvent) -> None:
        path = Path(event.src_path)
        if self._should_ignore(path):
            logger.debug(f"Ignoring {event_type.value} event for: {path}")
            return
        self._emit_event(event_type, path)

    def on_created(self, event: FileSystemEvent) -> None:
        if isinstance(event, DirCreatedEvent):
            return
        self._handle_simple(FileEventType.CREATED, event)

    def on_modified(self, event: FileSystemEvent) -> None:
        if isinstance(event, DirModifiedEvent):
            return
        self._handle_simple(FileEventType.MODIFIED, event)

    def on_deleted(self, event: FileSystemEvent) -> None:
        if isinstance(event, DirDeletedEvent):
            return
        self._handle_simple(FileEventType.DELETED, event)

    def on_moved(self, event: FileSystemEvent) -> None:
        if isinstance(event, DirMovedEvent):
            return

        src_path = Path(event.src_path)
        dest_path = Path(event.dest_path)
        src_valid = not self._should_ignore(src_path)
        dest_valid = not self._should_ignore(dest_path)

        # A move out of an excluded area (or into one) still changes the tree
        if src_valid or dest_valid:
            self._emit_event(
                FileEventType.MOVED,
                dest_path,
                old_path=src_path if src_valid else None,
            )
