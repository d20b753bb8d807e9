"""
Infrastructure Layer - File watching and result writing.
"""

from pcs.infrastructure.fakes import FakeFileWatcher
from pcs.infrastructure.file_watcher import FileWatcher, FileWatcherInterface
from pcs.infrastructure.result_writer import serialize_result, write_result

__all__ = [
    "FileWatcherInterface",
    "FileWatcher",
    "FakeFileWatcher",
    "serialize_result",
    "write_result",
]
