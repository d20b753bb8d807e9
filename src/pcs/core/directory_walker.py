"""
DirectoryWalker for Project Context Scanner.

Recursive, deterministic directory traversal with exclusion pruning,
size and count budgets, and per-file language classification and
line extraction.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from pcs.core.errors import ConfigurationUnavailableError
from pcs.core.language_registry import LanguageRegistry, get_default_registry
from pcs.core.line_extractor import LineExtractor
from pcs.core.models import (
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
from pcs.core.project_detector import project_exclusion_rules

logger = logging.getLogger(__name__)


@dataclass
class _WalkState:
    """Mutable bookkeeping for one walk."""

    root: Path
    config: ScanConfig
    rules: list[ExclusionRule]
    result: ScanResult
    deadline: float | None = None
    visited: set[Path] = field(default_factory=set)
    stopped: bool = False


class DirectoryWalker:
    """
    Walks a project tree and assembles a ScanResult.

    Provides:
    - Name-sorted depth-first traversal (directories and files interleaved)
    - Pruning of excluded directories before they are listed
    - Silent skipping of files larger than the size budget
    - A terminal warning marker and early stop on the file-count budget
    - Project-type exclusion rules injected ahead of configured rules
    - Graceful handling of unreadable directories, files and undecodable names
    - Symlinks followed only when they resolve inside the root
    """

    def __init__(
        self,
        matcher: PatternMatcher | None = None,
        registry: LanguageRegistry | None = None,
        extractor: LineExtractor | None = None,
    ):
        """
        Initialize the DirectoryWalker.

        Args:
            matcher: PatternMatcher for exclusion rules (default matcher if None)
            registry: LanguageRegistry for classification (default registry if None)
            extractor: LineExtractor for dependencies and structure. If None,
                       one is built on the registry.
        """
        self._matcher = matcher or get_default_matcher()
        self._registry = registry or get_default_registry()
        self._extractor = extractor or LineExtractor(self._registry)

    def walk(self, root: Path, config: ScanConfig) -> ScanResult:
        """
        Walk the tree under root and build a ScanResult.

        Args:
            root: Directory to scan
            config: Resolved scan configuration

        Returns:
            ScanResult with records in traversal order

        Raises:
            ConfigurationUnavailableError: If root is missing or not a directory
        """
        root = Path(root).resolve()
        if not root.exists():
            raise ConfigurationUnavailableError(f"Root path does not exist: {root}")
        if not root.is_dir():
            raise ConfigurationUnavailableError(f"Root path is not a directory: {root}")

        # Project-type rules go ahead of configured rules, for this walk only
        rules = project_exclusion_rules(root)
        seen = {rule.pattern for rule in rules}
        for rule in config.rules:
            if rule.pattern not in seen:
                seen.add(rule.pattern)
                rules.append(rule)

        listed_patterns = [r.pattern for r in rules if r.source is not RuleSource.BUILTIN]

        output_rule = self._output_rule(root, config.output_target)
        if output_rule is not None:
            rules.insert(0, output_rule)

        state = _WalkState(
            root=root,
            config=config,
            rules=rules,
            result=ScanResult(summary=ScanSummary(excluded_patterns=listed_patterns)),
        )
        if config.scan_timeout is not None:
            state.deadline = time.monotonic() + config.scan_timeout

        logger.debug(f"Walking {root} with {len(rules)} exclusion rules")
        self._walk_directory(root, "", state)

        result = state.result
        result.summary.file_count = len(result.records)
        result.summary.scanned_at = datetime.now(timezone.utc)
        return result

    def _output_rule(self, root: Path, output_target: Path | None) -> ExclusionRule | None:
        """Build a rule that keeps the scan from reading its own output artifact."""
        if output_target is None:
            return None
        try:
            rel_path = Path(output_target).resolve().relative_to(root)
        except ValueError:
            return None
        return ExclusionRule(rel_path.as_posix(), RuleSource.BUILTIN)

    def _deadline_passed(self, state: _WalkState) -> bool:
        if state.deadline is None or time.monotonic() < state.deadline:
            return False
        if not state.result.timed_out:
            logger.warning(
                f"Scan deadline of {state.config.scan_timeout}s reached, "
                "remaining entries were not visited"
            )
            state.result.timed_out = True
        state.stopped = True
        return True

    def _walk_directory(self, current_path: Path, rel_dir: str, state: _WalkState) -> None:
        """
        Recursively walk one directory.

        Args:
            current_path: Directory being walked
            rel_dir: Its path relative to the root ('' for the root)
            state: Walk bookkeeping
        """
        try:
            real_path = current_path.resolve()
            if real_path in state.visited:
                logger.debug(f"Skipping recursive cycle: {current_path} -> {real_path}")
                return
            state.visited.add(real_path)

            entries = sorted(current_path.iterdir(), key=lambda p: p.name)
        except PermissionError as e:
            if not rel_dir:
                raise ConfigurationUnavailableError(f"Cannot read root directory: {e}") from e
            logger.warning(f"Permission denied accessing directory: {current_path} - {e}")
            return
        except OSError as e:
            if not rel_dir:
                raise ConfigurationUnavailableError(f"Cannot read root directory: {e}") from e
            logger.warning(f"Error accessing directory: {current_path} - {e}")
            return

        for entry in entries:
            if state.stopped or self._deadline_passed(state):
                return

            rel_path = f"{rel_dir}/{entry.name}" if rel_dir else entry.name
            if not _is_utf8(rel_path):
                logger.warning(f"Skipping path that is not valid UTF-8: {rel_path!r}")
                state.result.errors.append(FileReadError(rel_path, "path is not valid UTF-8"))
                continue

            if entry.is_symlink() and not self._should_follow_symlink(entry, state):
                continue

            is_dir = entry.is_dir()
            if self._matcher.matches(rel_path, state.rules, is_dir=is_dir):
                logger.debug(f"Excluded: {rel_path}")
                continue

            if is_dir:
                self._walk_directory(entry, rel_path, state)
            elif entry.is_file():
                self._visit_file(entry, rel_path, state)

        state.visited.discard(real_path)

    def _should_follow_symlink(self, link: Path, state: _WalkState) -> bool:
        """
        Decide whether a symlink is visited.

        Links must resolve to an existing target inside the root. Linked
        files are then always visited; linked directories only when
        follow_symlinks is set.
        """
        try:
            target = link.resolve(strict=True)
        except (OSError, RuntimeError) as e:
            logger.debug(f"Skipping broken symlink: {link} - {e}")
            return False

        try:
            target.relative_to(state.root)
        except ValueError:
            logger.warning(f"Skipping symlink outside root directory: {link} -> {target}")
            return False

        if target.is_dir() and not state.config.follow_symlinks:
            logger.debug(f"Skipping directory symlink (follow_symlinks=False): {link}")
            return False
        return True

    def _visit_file(self, file_path: Path, rel_path: str, state: _WalkState) -> None:
        """
        Apply the budgets to one file and record it.

        Args:
            file_path: Path to the file
            rel_path: Path relative to the root
            state: Walk bookkeeping
        """
        result = state.result
        config = state.config

        try:
            size_bytes = file_path.stat().st_size
        except OSError as e:
            logger.warning(f"Error reading file stats: {file_path} - {e}")
            result.errors.append(FileReadError(rel_path, str(e)))
            return

        if size_bytes > config.max_file_size:
            logger.debug(f"Skipping large file ({size_bytes} bytes): {rel_path}")
            return

        if len(result.files) >= config.max_files:
            logger.warning(
                f"Max file limit of {config.max_files} reached, stopping scan",
                extra={"max_files": config.max_files, "next_path": rel_path},
            )
            result.files.append(ScanWarning())
            result.truncated = True
            state.stopped = True
            return

        record = self._analyze_file(file_path, rel_path, size_bytes, result)
        if record is not None:
            result.files.append(record)

    def _analyze_file(
        self, file_path: Path, rel_path: str, size_bytes: int, result: ScanResult
    ) -> FileRecord | None:
        """
        Read, classify, and extract one file.

        Returns:
            FileRecord, or None if the file could not be read or decoded
        """
        try:
            content = file_path.read_bytes().decode("utf-8")
        except UnicodeDecodeError as e:
            logger.warning(f"Failed to decode file as UTF-8: {rel_path} - {e}")
            result.errors.append(FileReadError(rel_path, f"decode error: {e.reason}"))
            return None
        except PermissionError as e:
            logger.warning(f"Permission denied reading file: {rel_path} - {e}")
            result.errors.append(FileReadError(rel_path, str(e)))
            return None
        except OSError as e:
            logger.warning(f"Error reading file: {rel_path} - {e}")
            result.errors.append(FileReadError(rel_path, str(e)))
            return None

        language = self._registry.classify_path(file_path)
        return FileRecord(
            path=rel_path,
            type=language.value,
            size=size_bytes,
            dependencies=tuple(self._extractor.extract_dependencies(content, language)),
            structure=tuple(self._extractor.extract_structure(content, language)),
        )


def _is_utf8(rel_path: str) -> bool:
    """False for names carrying undecodable bytes as surrogate escapes."""
    try:
        rel_path.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True
