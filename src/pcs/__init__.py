"""
Project Context Scanner - Summarize a source tree into a machine-readable context document.
"""

from pcs.core.config import PCSConfig, load_config
from pcs.core.errors import (
    ConfigurationUnavailableError,
    OutputWriteError,
    ScanError,
    ScanInProgressError,
)
from pcs.core.models import ScanConfig, ScanResult
from pcs.services.scan_service import ScanOrchestrator

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "PCSConfig",
    "load_config",
    "ScanError",
    "ConfigurationUnavailableError",
    "ScanInProgressError",
    "OutputWriteError",
    "ScanConfig",
    "ScanResult",
    "ScanOrchestrator",
]
