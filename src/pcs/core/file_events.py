"""
File event models for the watch service.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class FileEventType(Enum):
    """Types of file system events."""

    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"
    MOVED = "moved"


@dataclass
class FileEvent:
    """
    Represents a single file system event.

    Attributes:
        event_type: Type of the file event (CREATED, MODIFIED, DELETED, MOVED)
        file_path: Path to the affected file
        old_path: Previous path for MOVED events, None otherwise
        timestamp: Unix timestamp when the event occurred
    """

    event_type: FileEventType
    file_path: Path
    old_path: Path | None = None
    timestamp: float = field(default_factory=time.time)

    def __post_init__(self) -> None:
        """Ensure paths are Path objects."""
        if isinstance(self.file_path, str):
            self.file_path = Path(self.file_path)
        if isinstance(self.old_path, str):
            self.old_path = Path(self.old_path)

    def relative_path(self, root: Path) -> str | None:
        """
        Get the event path relative to a root, forward-slash separated.

        Returns:
            Relative path, or None if the file is outside the root
        """
        try:
            return self.file_path.relative_to(root).as_posix()
        except ValueError:
            return None
