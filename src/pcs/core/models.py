"""
Data models for Project Context Scanner.

Defines exclusion rules, the resolved per-scan configuration snapshot, and
the records that make up a scan result.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Union

MAX_FILES_WARNING = "Max file limit reached. Some files were not analyzed."


class RuleSource(str, Enum):
    """
    Provenance of an exclusion rule.

    Inherits from str to enable JSON serialization and string comparison.
    """

    EXPLICIT = "explicit"
    LEGACY = "legacy"
    HOST = "host"
    GITIGNORE = "gitignore"
    PROJECT = "project"
    BUILTIN = "builtin"


@dataclass(frozen=True)
class ExclusionRule:
    """
    An immutable exclusion pattern with its provenance.

    Attributes:
        pattern: Pattern string (glob, directory form ending in '/', or plain)
        source: Where the pattern came from
    """

    pattern: str
    source: RuleSource = RuleSource.EXPLICIT


@dataclass(frozen=True)
class ScanConfig:
    """
    Resolved configuration snapshot for a single scan.

    Created once per scan invocation and never mutated mid-scan.

    Attributes:
        root: Absolute path of the directory being scanned
        max_file_size: Files larger than this many bytes are skipped
        max_files: Maximum number of files recorded before the walk stops
        rules: Merged, ordered exclusion rules
        output_target: Absolute path of the output artifact
        follow_symlinks: Whether symlinked files and directories are followed
        scan_timeout: Optional overall deadline in seconds
    """

    root: Path
    max_file_size: int = 1_000_000
    max_files: int = 1000
    rules: tuple[ExclusionRule, ...] = ()
    output_target: Path | None = None
    follow_symlinks: bool = False
    scan_timeout: float | None = None

    @property
    def patterns(self) -> list[str]:
        """Return the pattern strings of the merged rules, in order."""
        return [rule.pattern for rule in self.rules]


@dataclass(frozen=True)
class FileRecord:
    """
    Extracted metadata for one accepted file.

    Attributes:
        path: Path relative to the scan root, forward-slash separated
        type: Detected language tag ('Python', 'Go', ..., 'Unknown')
        size: File size in bytes
        dependencies: Ordered, unique dependency lines
        structure: Ordered structural declaration lines (at most 10)
    """

    path: str
    type: str
    size: int
    dependencies: tuple[str, ...] = ()
    structure: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "type": self.type,
            "size": self.size,
            "dependencies": list(self.dependencies),
            "structure": list(self.structure),
        }


@dataclass(frozen=True)
class ScanWarning:
    """Terminal marker appended when the file-count budget is exceeded."""

    warning: str = MAX_FILES_WARNING

    def to_dict(self) -> dict[str, Any]:
        return {"warning": self.warning}


@dataclass(frozen=True)
class FileReadError:
    """A file that could not be read or decoded and was left out of the result."""

    path: str
    reason: str


ScanEntry = Union[FileRecord, ScanWarning]


def format_timestamp(value: datetime) -> str:
    """Format an aware datetime as an ISO-8601 UTC string with millisecond precision."""
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class ScanSummary:
    """Summary block of a scan result."""

    file_count: int = 0
    scanned_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    excluded_patterns: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "fileCount": self.file_count,
            "scannedAt": format_timestamp(self.scanned_at),
            "excludedPatterns": list(self.excluded_patterns),
        }


@dataclass
class ScanResult:
    """
    Root aggregate of a scan.

    Attributes:
        files: FileRecords in traversal order, optionally followed by a single
               ScanWarning when the file-count budget was exceeded
        summary: Count, completion timestamp, and effective exclusion patterns
        errors: Files skipped because they could not be read (not serialized)
        truncated: True if the walk stopped on the file-count budget
        timed_out: True if the walk stopped on the scan deadline
    """

    files: list[ScanEntry] = field(default_factory=list)
    summary: ScanSummary = field(default_factory=ScanSummary)
    errors: list[FileReadError] = field(default_factory=list)
    truncated: bool = False
    timed_out: bool = False

    @property
    def records(self) -> list[FileRecord]:
        """Return only the FileRecord entries."""
        return [entry for entry in self.files if isinstance(entry, FileRecord)]

    def language_counts(self) -> dict[str, int]:
        """Count records per language tag, most common first."""
        counts: dict[str, int] = {}
        for record in self.records:
            counts[record.type] = counts.get(record.type, 0) + 1
        return dict(sorted(counts.items(), key=lambda item: (-item[1], item[0])))

    def to_dict(self) -> dict[str, Any]:
        """Convert the result to the output document structure."""
        return {
            "projectStructure": {
                "files": [entry.to_dict() for entry in self.files],
                "summary": self.summary.to_dict(),
            }
        }
