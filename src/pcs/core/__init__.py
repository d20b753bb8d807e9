"""
Core Layer - Pattern matching, language classification, line extraction, and directory walking.
"""

from pcs.core.config import (
    LoggingConfig,
    PCSConfig,
    ScannerConfig,
    WatchConfig,
    load_config,
)
from pcs.core.debouncer import ChangeDebouncer
from pcs.core.directory_walker import DirectoryWalker
from pcs.core.errors import (
    ConfigurationUnavailableError,
    OutputWriteError,
    ScanError,
    ScanInProgressError,
)
from pcs.core.file_events import FileEvent, FileEventType
from pcs.core.ignore_file import load_ignore_patterns, parse_ignore_lines
from pcs.core.language_registry import (
    LanguageRegistry,
    LanguageRules,
    LanguageTag,
    get_default_registry,
)
from pcs.core.line_extractor import LineExtractor
from pcs.core.models import (
    MAX_FILES_WARNING,
    ExclusionRule,
    FileReadError,
    FileRecord,
    RuleSource,
    ScanConfig,
    ScanResult,
    ScanSummary,
    ScanWarning,
)
from pcs.core.pattern_matcher import PatternMatcher, get_default_matcher
from pcs.core.project_detector import detect_project_types, project_exclusion_rules
from pcs.core.session import ScanSessionState

__all__ = [
    # Config
    "PCSConfig",
    "ScannerConfig",
    "WatchConfig",
    "LoggingConfig",
    "load_config",
    # Errors
    "ScanError",
    "ConfigurationUnavailableError",
    "ScanInProgressError",
    "OutputWriteError",
    # Models
    "MAX_FILES_WARNING",
    "RuleSource",
    "ExclusionRule",
    "ScanConfig",
    "FileRecord",
    "ScanWarning",
    "FileReadError",
    "ScanSummary",
    "ScanResult",
    # Matching
    "PatternMatcher",
    "get_default_matcher",
    # Languages
    "LanguageTag",
    "LanguageRules",
    "LanguageRegistry",
    "get_default_registry",
    "LineExtractor",
    # Walking
    "DirectoryWalker",
    "detect_project_types",
    "project_exclusion_rules",
    "load_ignore_patterns",
    "parse_ignore_lines",
    # Session
    "ScanSessionState",
    "ChangeDebouncer",
    "FileEvent",
    "FileEventType",
]
