"""
Output artifact writer.

Serializes a ScanResult as pretty-printed JSON, or YAML when the target
has a .yaml/.yml suffix.
"""

import json
import logging
import os
from pathlib import Path

import yaml

from pcs.core.errors import OutputWriteError
from pcs.core.models import ScanResult

logger = logging.getLogger(__name__)


def serialize_result(result: ScanResult, fmt: str = "json") -> str:
    """
    Serialize a scan result to text.

    Args:
        result: Scan result to serialize
        fmt: 'json' or 'yaml'

    Returns:
        Pretty-printed document

    Raises:
        ValueError: If the format is unsupported
    """
    data = result.to_dict()
    if fmt == "json":
        return json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    if fmt == "yaml":
        return yaml.safe_dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)
    raise ValueError(f"Unsupported output format: {fmt}")


def _format_for(target: Path) -> str:
    return "yaml" if target.suffix.lower() in (".yaml", ".yml") else "json"


def staging_path(target: Path) -> Path:
    """Sibling file a document is written to before it replaces the target."""
    return target.with_name(f".{target.name}.tmp")


def write_result(result: ScanResult, target: Path | str) -> Path:
    """
    Write a scan result to the output artifact.

    The document is written to a sibling temporary file and moved onto the
    target, so a failed write leaves any previous artifact untouched.

    Args:
        result: Scan result to write
        target: Output file path

    Returns:
        The path written

    Raises:
        OutputWriteError: If the result cannot be serialized or written
    """
    target = Path(target)

    try:
        payload = serialize_result(result, _format_for(target)).encode("utf-8")
    except (TypeError, ValueError, yaml.YAMLError) as e:
        raise OutputWriteError(f"Failed to serialize scan result: {e}") from e

    staging = staging_path(target)
    try:
        staging.write_bytes(payload)
        os.replace(staging, target)
    except OSError as e:
        staging.unlink(missing_ok=True)
        raise OutputWriteError(f"Failed to write {target}: {e}") from e

    logger.info(
        f"Wrote scan result to {target}",
        extra={"output": str(target), "file_count": result.summary.file_count},
    )
    return target
