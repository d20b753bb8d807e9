"""
Scan service: resolves configuration, runs one scan, and writes the artifact.
"""

import logging
import time
from collections.abc import Callable, Mapping
from pathlib import Path

from pcs.core.config import PCSConfig
from pcs.core.directory_walker import DirectoryWalker
from pcs.core.errors import ConfigurationUnavailableError
from pcs.core.ignore_file import DEFAULT_IGNORE_FILENAME, load_ignore_patterns
from pcs.core.models import ExclusionRule, RuleSource, ScanConfig, ScanResult
from pcs.core.project_detector import project_exclusion_rules
from pcs.core.session import ScanSessionState
from pcs.infrastructure.result_writer import staging_path, write_result

logger = logging.getLogger(__name__)

ResultWriter = Callable[[ScanResult, Path], object]


def merge_rules(*sources: tuple[RuleSource, list[str]]) -> list[ExclusionRule]:
    """
    Merge pattern lists into one ordered rule list.

    Blank patterns are dropped and duplicates keep their first provenance.

    Args:
        sources: (provenance, patterns) pairs in merge order

    Returns:
        Merged exclusion rules
    """
    rules: list[ExclusionRule] = []
    seen: set[str] = set()
    for source, patterns in sources:
        for raw in patterns:
            pattern = str(raw).strip()
            if not pattern or pattern in seen:
                continue
            seen.add(pattern)
            rules.append(ExclusionRule(pattern, source))
    return rules


def resolve_scan_config(
    root: Path,
    config: PCSConfig,
    host_excludes: Mapping[str, bool] | None = None,
) -> ScanConfig:
    """
    Resolve an immutable ScanConfig for one scan.

    Merges, in order: legacy ignore patterns, explicit exclude patterns,
    enabled host exclude entries, and root .gitignore lines.

    Args:
        root: Scan root directory
        config: Application configuration
        host_excludes: Host exclude map overriding config.scanner.host_excludes

    Returns:
        ScanConfig snapshot

    Raises:
        ConfigurationUnavailableError: If root is missing or not a directory
    """
    root = Path(root).resolve()
    if not root.exists():
        raise ConfigurationUnavailableError(f"Root path does not exist: {root}")
    if not root.is_dir():
        raise ConfigurationUnavailableError(f"Root path is not a directory: {root}")

    scanner = config.scanner

    host_patterns: list[str] = []
    if scanner.use_host_excludes:
        excludes = host_excludes if host_excludes is not None else scanner.host_excludes
        host_patterns = [pattern for pattern, enabled in (excludes or {}).items() if enabled]

    gitignore_patterns: list[str] = []
    if scanner.use_gitignore:
        gitignore_patterns = load_ignore_patterns(root / DEFAULT_IGNORE_FILENAME)

    rules = merge_rules(
        (RuleSource.LEGACY, scanner.ignore_patterns or []),
        (RuleSource.EXPLICIT, scanner.exclude_patterns or []),
        (RuleSource.HOST, host_patterns),
        (RuleSource.GITIGNORE, gitignore_patterns),
    )

    output_target = Path(scanner.output_file)
    if not output_target.is_absolute():
        output_target = root / output_target

    return ScanConfig(
        root=root,
        max_file_size=scanner.max_file_size,
        max_files=scanner.max_files,
        rules=tuple(rules),
        output_target=output_target,
        follow_symlinks=scanner.follow_symlinks,
        scan_timeout=scanner.scan_timeout,
    )


class ScanOrchestrator:
    """
    Drives one scan at a time for a project root.

    run_scan() is the "run scan now" entry point. A request made while a
    scan is active fails fast with ScanInProgressError.
    """

    def __init__(
        self,
        root: Path | str,
        config: PCSConfig | None = None,
        session: ScanSessionState | None = None,
        walker: DirectoryWalker | None = None,
        writer: ResultWriter | None = None,
        host_excludes: Mapping[str, bool] | None = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            root: Project root to scan
            config: Application configuration (defaults if None)
            session: Shared session state (a new one if None)
            walker: DirectoryWalker to use (default walker if None)
            writer: Callable writing a result to a path (write_result if None)
            host_excludes: Host exclude map overriding the configured one
        """
        self._root = Path(root)
        self._config = config or PCSConfig()
        self._session = session or ScanSessionState()
        self._walker = walker or DirectoryWalker()
        self._writer = writer or write_result
        self._host_excludes = host_excludes
        self._last_result: ScanResult | None = None

    @property
    def root(self) -> Path:
        return self._root

    @property
    def config(self) -> PCSConfig:
        return self._config

    @property
    def session(self) -> ScanSessionState:
        return self._session

    @property
    def last_result(self) -> ScanResult | None:
        """Result of the most recent successful scan."""
        return self._last_result

    def resolve_config(self) -> ScanConfig:
        """Resolve the ScanConfig for the next scan."""
        return resolve_scan_config(self._root, self._config, self._host_excludes)

    def watch_rules(self) -> list[ExclusionRule]:
        """
        Rules a file watcher should apply so that excluded paths and the
        output artifact (and its staging file) never trigger a rescan.
        """
        scan_config = self.resolve_config()
        rules = project_exclusion_rules(scan_config.root)
        seen = {rule.pattern for rule in rules}
        rules.extend(rule for rule in scan_config.rules if rule.pattern not in seen)

        try:
            output_rel = scan_config.output_target.relative_to(scan_config.root)
        except ValueError:
            return rules
        rules[:0] = [
            ExclusionRule(output_rel.as_posix(), RuleSource.BUILTIN),
            ExclusionRule(staging_path(output_rel).as_posix(), RuleSource.BUILTIN),
        ]
        return rules

    def run_scan(self) -> ScanResult:
        """
        Run one scan to completion and write the output artifact.

        Returns:
            The ScanResult that was written

        Raises:
            ScanInProgressError: If a scan is already active
            ConfigurationUnavailableError: If the root cannot be scanned
            OutputWriteError: If the artifact cannot be written
        """
        with self._session.scan_guard():
            start_time = time.time()
            scan_config = self.resolve_config()

            logger.info(
                f"Scanning {scan_config.root}",
                extra={
                    "root": str(scan_config.root),
                    "max_files": scan_config.max_files,
                    "max_file_size": scan_config.max_file_size,
                    "rule_count": len(scan_config.rules),
                },
            )

            result = self._walker.walk(scan_config.root, scan_config)
            self._writer(result, scan_config.output_target)

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "Scan complete: %d files in %.2fms",
                result.summary.file_count,
                duration_ms,
                extra={
                    "file_count": result.summary.file_count,
                    "skipped_unreadable": len(result.errors),
                    "truncated": result.truncated,
                    "timed_out": result.timed_out,
                    "duration_ms": duration_ms,
                    "output": str(scan_config.output_target),
                },
            )

            self._last_result = result
            return result
