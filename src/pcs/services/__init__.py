"""
Service Layer - ScanOrchestrator and WatchService.
"""

from pcs.services.scan_service import ScanOrchestrator, merge_rules, resolve_scan_config
from pcs.services.watch_service import (
    PathValidationError,
    WatchService,
    WatchServiceError,
    WatchStats,
)

__all__ = [
    "ScanOrchestrator",
    "resolve_scan_config",
    "merge_rules",
    "WatchService",
    "WatchServiceError",
    "PathValidationError",
    "WatchStats",
]
