"""
Configuration module for Project Context Scanner.

Supports loading from YAML/JSON files with environment variable overrides.
Default values are loaded from defaults.yaml for maintainability.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

# Path to the default configuration file
_DEFAULTS_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"

# Project-local config file picked up from the scan root
PROJECT_CONFIG_FILENAME = ".pcs.yaml"

# Cache for default values
_defaults_cache: dict[str, Any] | None = None


def _load_defaults() -> dict[str, Any]:
    """Load default configuration values from defaults.yaml."""
    global _defaults_cache

    if _defaults_cache is not None:
        return _defaults_cache

    if not _DEFAULTS_CONFIG_PATH.exists():
        logger.warning(f"Defaults config not found: {_DEFAULTS_CONFIG_PATH}")
        _defaults_cache = {}
        return _defaults_cache

    try:
        content = _DEFAULTS_CONFIG_PATH.read_text(encoding="utf-8")
        _defaults_cache = yaml.safe_load(content) or {}
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse defaults config: {e}")
        _defaults_cache = {}

    return _defaults_cache


def _get_default(section: str, key: str, fallback: Any = None) -> Any:
    """Get a default value from the defaults config."""
    defaults = _load_defaults()
    section_defaults = defaults.get(section) or {}
    value = section_defaults.get(key, fallback)
    # Hand out copies so instances never share mutable defaults
    if isinstance(value, list):
        return list(value)
    if isinstance(value, dict):
        return dict(value)
    return value


@dataclass
class ScannerConfig:
    """Configuration for scanning: budgets, output, and exclusion sources."""

    max_file_size: int = field(
        default_factory=lambda: _get_default("scanner", "max_file_size", 1_000_000)
    )
    max_files: int = field(default_factory=lambda: _get_default("scanner", "max_files", 1000))
    output_file: str = field(
        default_factory=lambda: _get_default("scanner", "output_file", "project-context.json")
    )
    exclude_patterns: list[str] = field(
        default_factory=lambda: _get_default("scanner", "exclude_patterns", [])
    )
    ignore_patterns: list[str] = field(
        default_factory=lambda: _get_default("scanner", "ignore_patterns", [])
    )
    use_gitignore: bool = field(
        default_factory=lambda: _get_default("scanner", "use_gitignore", True)
    )
    use_host_excludes: bool = field(
        default_factory=lambda: _get_default("scanner", "use_host_excludes", True)
    )
    host_excludes: dict[str, bool] = field(
        default_factory=lambda: _get_default("scanner", "host_excludes", {})
    )
    follow_symlinks: bool = field(
        default_factory=lambda: _get_default("scanner", "follow_symlinks", False)
    )
    scan_timeout: Optional[float] = field(
        default_factory=lambda: _get_default("scanner", "scan_timeout", None)
    )


@dataclass
class WatchConfig:
    """Configuration for change-triggered rescans."""

    debounce_ms: int = field(default_factory=lambda: _get_default("watch", "debounce_ms", 2000))
    scan_on_start: bool = field(
        default_factory=lambda: _get_default("watch", "scan_on_start", True)
    )


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = field(default_factory=lambda: _get_default("logging", "level", "INFO"))
    format: str = field(
        default_factory=lambda: _get_default(
            "logging", "format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
    )


@dataclass
class PCSConfig:
    """Main configuration class for Project Context Scanner."""

    scanner: ScannerConfig = field(default_factory=ScannerConfig)
    watch: WatchConfig = field(default_factory=WatchConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, path: Path | str) -> "PCSConfig":
        """
        Load configuration from a YAML or JSON file.

        Args:
            path: Path to the configuration file (.yaml, .yml, or .json)

        Returns:
            PCSConfig instance with loaded values

        Raises:
            FileNotFoundError: If the config file doesn't exist
            ValueError: If the file format is unsupported or invalid
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        content = path.read_text(encoding="utf-8")

        try:
            if path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(content) or {}
            elif path.suffix == ".json":
                data = json.loads(content) if content.strip() else {}
            else:
                raise ValueError(f"Unsupported config file format: {path.suffix}")
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ValueError(f"Invalid configuration file {path}: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Invalid configuration file {path}: expected a mapping")

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict) -> "PCSConfig":
        """Create PCSConfig from a dictionary."""
        config = cls()

        try:
            if "scanner" in data:
                config.scanner = ScannerConfig(**data["scanner"])
            if "watch" in data:
                config.watch = WatchConfig(**data["watch"])
            if "logging" in data:
                config.logging = LoggingConfig(**data["logging"])
        except TypeError as e:
            raise ValueError(f"Unknown configuration key: {e}") from e

        return config

    def apply_env_overrides(self) -> "PCSConfig":
        """
        Apply environment variable overrides to the configuration.

        Environment variables follow the pattern: PCS_<SECTION>_<KEY>
        Examples:
            - PCS_SCANNER_MAX_FILES
            - PCS_SCANNER_OUTPUT_FILE
            - PCS_WATCH_DEBOUNCE_MS
            - PCS_LOGGING_LEVEL

        List values are comma-separated.

        Returns:
            Self with environment overrides applied
        """
        env_mappings = {
            # Scanner config
            "PCS_SCANNER_MAX_FILE_SIZE": ("scanner", "max_file_size", int),
            "PCS_SCANNER_MAX_FILES": ("scanner", "max_files", int),
            "PCS_SCANNER_OUTPUT_FILE": ("scanner", "output_file", str),
            "PCS_SCANNER_EXCLUDE_PATTERNS": ("scanner", "exclude_patterns", _parse_list),
            "PCS_SCANNER_IGNORE_PATTERNS": ("scanner", "ignore_patterns", _parse_list),
            "PCS_SCANNER_USE_GITIGNORE": ("scanner", "use_gitignore", _parse_bool),
            "PCS_SCANNER_USE_HOST_EXCLUDES": ("scanner", "use_host_excludes", _parse_bool),
            "PCS_SCANNER_FOLLOW_SYMLINKS": ("scanner", "follow_symlinks", _parse_bool),
            "PCS_SCANNER_SCAN_TIMEOUT": ("scanner", "scan_timeout", float),
            # Watch config
            "PCS_WATCH_DEBOUNCE_MS": ("watch", "debounce_ms", int),
            "PCS_WATCH_SCAN_ON_START": ("watch", "scan_on_start", _parse_bool),
            # Logging config
            "PCS_LOGGING_LEVEL": ("logging", "level", str),
        }

        for env_var, (section, key, converter) in env_mappings.items():
            value = os.environ.get(env_var)
            if value is None:
                continue
            try:
                converted = converter(value)
            except ValueError:
                logger.warning(f"Ignoring invalid value for {env_var}: {value!r}")
                continue
            setattr(getattr(self, section), key, converted)

        return self

    def to_dict(self) -> dict:
        """Convert configuration to a dictionary."""
        return asdict(self)

    def to_yaml(self) -> str:
        """Serialize configuration to YAML string."""
        return yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)

    def to_json(self) -> str:
        """Serialize configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    def save(self, path: Path | str) -> None:
        """
        Save configuration to a file.

        Args:
            path: Path to save the configuration (.yaml, .yml, or .json)

        Raises:
            ValueError: If the file format is unsupported
        """
        path = Path(path)

        if path.suffix in (".yaml", ".yml"):
            content = self.to_yaml()
        elif path.suffix == ".json":
            content = self.to_json()
        else:
            raise ValueError(f"Unsupported config file format: {path.suffix}")

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


def _parse_bool(value: str) -> bool:
    """Parse a string to boolean."""
    return value.lower() in ("true", "1", "yes", "on")


def _parse_list(value: str) -> list[str]:
    """Parse a comma-separated string to a list, dropping empty items."""
    return [item.strip() for item in value.split(",") if item.strip()]


def load_config(
    config_path: Optional[Path | str] = None,
    apply_env: bool = True,
    project_root: Optional[Path | str] = None,
) -> PCSConfig:
    """
    Load configuration with optional environment variable overrides.

    Args:
        config_path: Optional path to config file. If None, the project root's
                     .pcs.yaml is used when present, otherwise defaults.
        apply_env: Whether to apply environment variable overrides.
        project_root: Directory searched for a project-local .pcs.yaml.

    Returns:
        PCSConfig instance
    """
    if config_path is None and project_root is not None:
        candidate = Path(project_root) / PROJECT_CONFIG_FILENAME
        if candidate.is_file():
            logger.debug(f"Using project config: {candidate}")
            config_path = candidate

    if config_path:
        config = PCSConfig.from_file(config_path)
    else:
        config = PCSConfig()

    if apply_env:
        config.apply_env_overrides()

    return config
