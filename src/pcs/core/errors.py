"""
Error types for Project Context Scanner.

Only configuration, concurrency, and output failures surface as exceptions.
Per-file read failures and glob evaluation faults are absorbed where they
happen and never interrupt a walk.
"""


class ScanError(Exception):
    """Base exception for scan errors."""

    pass


class ConfigurationUnavailableError(ScanError):
    """Raised when the scan root does not exist or cannot be read."""

    pass


class ScanInProgressError(ScanError):
    """Raised when a scan is requested while another one is active."""

    pass


class OutputWriteError(ScanError):
    """Raised when the scan result cannot be serialized or written."""

    pass
