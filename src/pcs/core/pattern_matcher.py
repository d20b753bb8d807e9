"""
PatternMatcher module for Project Context Scanner.

Decides whether a relative path is excluded by a set of rules. Supports:
- Exact path rules
- Directory rules (trailing /)
- Glob rules (*, **, ?, {a,b} brace alternation) via pathspec
- Plain substring-style rules
- A degraded fallback for glob rules when glob evaluation is disabled or fails
"""

import functools
import logging
from collections.abc import Iterable

import pathspec

from pcs.core.models import ExclusionRule

logger = logging.getLogger(__name__)

# Marker files that are always excluded regardless of configuration
MARKER_FILENAMES: frozenset[str] = frozenset([".DS_Store"])

_WILDCARD_CHARS = ("*", "?", "{")


def normalize_path(path: str) -> str:
    """
    Normalize a relative path for matching.

    Converts backslashes to forward slashes and strips leading './' and '/'
    as well as trailing '/'.
    """
    normalized = str(path).replace("\\", "/")
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized.strip("/")


def has_wildcard(pattern: str) -> bool:
    """Check if a pattern uses glob syntax."""
    return any(ch in pattern for ch in _WILDCARD_CHARS)


def expand_braces(pattern: str) -> list[str]:
    """
    Expand brace groups into alternative patterns.

    Nested groups are supported. Groups without a comma and unbalanced braces
    are kept literally.

    Example:
        >>> expand_braces("**/{build,dist}/**")
        ['**/build/**', '**/dist/**']
    """
    start = pattern.find("{")
    while start != -1:
        depth = 0
        options: list[str] = []
        last = start + 1
        end = -1
        for i in range(start, len(pattern)):
            ch = pattern[i]
            if ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    options.append(pattern[last:i])
                    end = i
                    break
            elif ch == "," and depth == 1:
                options.append(pattern[last:i])
                last = i + 1

        if end == -1:
            # Unbalanced, treat the rest literally
            return [pattern]

        if len(options) > 1:
            prefix, suffix = pattern[:start], pattern[end + 1 :]
            expanded: list[str] = []
            for option in options:
                for alternative in expand_braces(prefix + option + suffix):
                    if alternative not in expanded:
                        expanded.append(alternative)
            return expanded

        start = pattern.find("{", end + 1)

    return [pattern]


def _to_wildmatch_line(alternative: str) -> str:
    """
    Convert one expanded glob alternative to a root-anchored wild-match line.

    Globs are evaluated against the whole relative path, so anything that does
    not already start with '**' is anchored at the scan root.
    """
    line = alternative
    if line.startswith("!") or line.startswith("#"):
        line = "\\" + line
    if not line.startswith("/") and not line.startswith("**"):
        line = "/" + line
    return line


@functools.lru_cache(maxsize=1024)
def _compile_glob(pattern: str) -> pathspec.PathSpec:
    """Compile a glob rule (with brace groups) into a PathSpec."""
    lines = [_to_wildmatch_line(alt) for alt in expand_braces(pattern)]
    return pathspec.PathSpec.from_lines(pathspec.patterns.GitWildMatchPattern, lines)


def _match_fallback(path: str, pattern: str) -> bool:
    """
    Degraded matching for glob rules.

    Only a leading '*' (path ends with the remainder) and a trailing '*'
    (path starts with, or contains at a segment boundary, the remainder)
    are honored.
    """
    if pattern.startswith("*") and path.endswith(pattern[1:]):
        return True
    if pattern.endswith("*"):
        base = pattern[:-1]
        if path.startswith(base) or ("/" + base) in path:
            return True
    return False


def _match_directory(path: str, name: str) -> bool:
    """Match a directory-form rule ('name/') anywhere in the path."""
    if not name:
        return False
    return path == name or path.startswith(f"{name}/") or f"/{name}/" in path


def _match_plain(path: str, pattern: str) -> bool:
    """Match a plain rule without wildcards or a trailing separator."""
    return path == pattern or f"/{pattern}" in path or path.startswith(f"{pattern}/")


class PatternMatcher:
    """
    Evaluates relative paths against exclusion rules.

    Built-in rules are checked first as a fast path:
    - Marker files such as .DS_Store
    - Hidden dot-directories (including VCS metadata like .git)

    Generic rules are then checked in any order; the first match wins.
    Matching is order-independent over the rule set.
    """

    def __init__(self, use_glob: bool = True):
        """
        Initialize the PatternMatcher.

        Args:
            use_glob: If False, glob rules use the degraded fallback matcher.
        """
        self._use_glob = use_glob

    @property
    def use_glob(self) -> bool:
        """Whether full glob evaluation is enabled."""
        return self._use_glob

    def matches(
        self,
        relative_path: str,
        rules: Iterable[ExclusionRule | str],
        is_dir: bool = False,
    ) -> bool:
        """
        Check if a path is excluded by built-in rules or any of the given rules.

        Args:
            relative_path: Path relative to the scan root
            rules: Exclusion rules or raw pattern strings
            is_dir: True if the path is a directory

        Returns:
            True if the path should be excluded
        """
        path = normalize_path(relative_path)
        if not path:
            return False

        if self.is_builtin_excluded(path, is_dir=is_dir):
            return True

        for rule in rules:
            pattern = rule.pattern if isinstance(rule, ExclusionRule) else str(rule)
            if self.matches_rule(path, pattern, is_dir=is_dir):
                return True

        return False

    def is_builtin_excluded(self, path: str, is_dir: bool = False) -> bool:
        """
        Check the always-active built-in rules.

        Args:
            path: Normalized relative path
            is_dir: True if the path is a directory

        Returns:
            True for marker files and anything inside a hidden dot-directory
        """
        segments = path.split("/")
        if segments[-1] in MARKER_FILENAMES:
            return True

        directories = segments if is_dir else segments[:-1]
        return any(s.startswith(".") and s not in (".", "..") for s in directories)

    def matches_rule(self, path: str, pattern: str, is_dir: bool = False) -> bool:
        """
        Check a single rule against a normalized path.

        Args:
            path: Normalized relative path
            pattern: Rule pattern string
            is_dir: True if the path is a directory

        Returns:
            True if the rule matches
        """
        pattern = pattern.strip()
        if not pattern:
            return False

        if path == pattern:
            return True

        if has_wildcard(pattern):
            return self._match_glob(path, pattern, is_dir)

        if pattern.endswith("/"):
            return _match_directory(path, pattern[:-1])

        return _match_plain(path, pattern)

    def _match_glob(self, path: str, pattern: str, is_dir: bool) -> bool:
        """Evaluate a glob rule, degrading to the fallback on any fault."""
        if not self._use_glob:
            return _match_fallback(path, pattern)

        try:
            spec = _compile_glob(pattern)
            if spec.match_file(path):
                return True
            # Let directory-form globs (e.g. '**/dist/') prune the directory itself
            return is_dir and spec.match_file(path + "/")
        except Exception as e:
            logger.debug(f"Glob evaluation failed for '{pattern}', using fallback: {e}")
            return _match_fallback(path, pattern)


_default_matcher = PatternMatcher()


def get_default_matcher() -> PatternMatcher:
    """Get the global default pattern matcher."""
    return _default_matcher


def matches(
    relative_path: str,
    rules: Iterable[ExclusionRule | str],
    is_dir: bool = False,
) -> bool:
    """Check a path against rules using the default matcher."""
    return _default_matcher.matches(relative_path, rules, is_dir=is_dir)
