"""
Flat .gitignore-style pattern loading.

Patterns are read from a single file at the project root and treated as
plain exclusion rules. Negation, anchoring, and nested ignore files are
not honored.
"""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_IGNORE_FILENAME = ".gitignore"


def parse_ignore_lines(content: str, source: Path | str = DEFAULT_IGNORE_FILENAME) -> list[str]:
    """
    Parse ignore-file content into flat patterns.

    Lines are stripped; blank lines and '#' comments are dropped. Negation
    lines ('!') are skipped since re-inclusion is not supported. A leading
    '/' is removed so anchored entries still match as plain rules.

    Args:
        content: Text of the ignore file
        source: Source name for log messages

    Returns:
        Patterns in file order
    """
    patterns: list[str] = []
    for line in content.splitlines():
        line = line.strip()

        if not line or line.startswith("#"):
            continue

        if line.startswith("!"):
            logger.debug(f"Skipping negation pattern '{line}' in {source}")
            continue

        if line.startswith("/"):
            line = line.lstrip("/")
            if not line:
                continue

        patterns.append(line)
    return patterns


def load_ignore_patterns(ignore_path: Path) -> list[str]:
    """
    Load flat patterns from an ignore file.

    Args:
        ignore_path: Path to the ignore file

    Returns:
        Patterns in file order (empty if the file is missing or unreadable)

    Raises:
        No exceptions - errors are logged and an empty list is returned
    """
    ignore_path = Path(ignore_path)

    if not ignore_path.is_file():
        logger.debug(f"Ignore file not found: {ignore_path}")
        return []

    try:
        content = ignore_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        logger.warning(f"Invalid UTF-8 encoding in {ignore_path}: {e}")
        return []
    except PermissionError as e:
        logger.warning(f"Permission denied reading {ignore_path}: {e}")
        return []
    except OSError as e:
        logger.warning(f"Error reading {ignore_path}: {e}")
        return []

    patterns = parse_ignore_lines(content, ignore_path)
    logger.debug(f"Loaded {len(patterns)} patterns from {ignore_path}")
    return patterns
