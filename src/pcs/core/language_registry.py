"""
Language registry for mapping file extensions to language tags.

Also holds the per-language line patterns used for dependency and
structure extraction.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

# Default path to the languages configuration file
_DEFAULT_LANGUAGES_CONFIG = Path(__file__).parent / "languages.yaml"


class LanguageTag(str, Enum):
    """
    Fixed set of language tags reported for scanned files.

    Inherits from str to enable JSON serialization and string comparison.
    """

    JAVASCRIPT = "JavaScript"
    TYPESCRIPT = "TypeScript"
    PYTHON = "Python"
    JAVA = "Java"
    RUBY = "Ruby"
    PHP = "PHP"
    GO = "Go"
    RUST = "Rust"
    C_CPP = "C/C++"
    HTML = "HTML"
    CSS = "CSS"
    JSON = "JSON"
    MARKDOWN = "Markdown"
    SHELL = "Shell"
    UNKNOWN = "Unknown"

    @classmethod
    def from_value(cls, value: "str | LanguageTag") -> "LanguageTag":
        """Resolve a tag from its string value, returning UNKNOWN if not recognized."""
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class LanguageRules:
    """
    Line patterns for a language.

    Attributes:
        dependencies: Pattern selecting import/dependency lines, or None
        structure: Pattern selecting structural declaration lines, or None
    """

    dependencies: re.Pattern[str] | None = None
    structure: re.Pattern[str] | None = None


_NO_RULES = LanguageRules()


def _normalize_extension(extension: str) -> str:
    return str(extension).strip().lstrip(".").lower()


class LanguageRegistry:
    """
    Registry mapping file extensions to language tags and extraction rules.

    Example:
        >>> registry = LanguageRegistry()
        >>> registry.classify("PY")
        <LanguageTag.PYTHON: 'Python'>
        >>> registry.classify("xyz")
        <LanguageTag.UNKNOWN: 'Unknown'>
    """

    def __init__(self, load_defaults: bool = True):
        """
        Initialize the language registry.

        Args:
            load_defaults: If True, load default mappings from languages.yaml.
        """
        self._extension_to_language: dict[str, LanguageTag] = {}
        self._language_to_extensions: dict[LanguageTag, set[str]] = {}
        self._rules: dict[LanguageTag, LanguageRules] = {}

        if load_defaults:
            self._load_from_yaml(_DEFAULT_LANGUAGES_CONFIG)

    @classmethod
    def from_yaml(cls, config_path: Path | str) -> "LanguageRegistry":
        """
        Create a LanguageRegistry from a YAML configuration file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            LanguageRegistry instance with loaded mappings

        Raises:
            FileNotFoundError: If the config file doesn't exist
            ValueError: If the config file format is invalid
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Languages config not found: {config_path}")

        registry = cls(load_defaults=False)
        registry._load_from_yaml(config_path)
        return registry

    def _load_from_yaml(self, config_path: Path) -> None:
        """
        Load language mappings from a YAML file.

        Expected format:
            Python:
              extensions: [py, pyi]
              dependencies: '^(?:import|from)\\s'
              structure: '^(?:def|class)\\b'
        """
        if not config_path.exists():
            logger.warning(f"Languages config not found: {config_path}, using empty registry")
            return

        try:
            data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            logger.error(f"Failed to parse languages config: {e}")
            raise ValueError(f"Invalid YAML in languages config: {e}") from e

        if data is None:
            return

        if not isinstance(data, dict):
            raise ValueError(f"Invalid languages config format: expected dict, got {type(data)}")

        for name, entry in data.items():
            tag = LanguageTag.from_value(str(name))
            if tag is LanguageTag.UNKNOWN:
                logger.warning(f"Skipping unknown language in config: {name}")
                continue
            if not isinstance(entry, dict):
                logger.warning(f"Invalid entry for {name}: expected dict, got {type(entry)}")
                continue

            self.register(
                tag,
                [str(ext) for ext in entry.get("extensions") or []],
                dependencies=entry.get("dependencies"),
                structure=entry.get("structure"),
            )

    def register(
        self,
        language: LanguageTag | str,
        extensions: list[str],
        dependencies: str | None = None,
        structure: str | None = None,
    ) -> "LanguageRegistry":
        """
        Register extensions and optional extraction patterns for a language.

        Args:
            language: Language tag or its string value
            extensions: Extensions with or without the leading dot
            dependencies: Regex selecting dependency lines
            structure: Regex selecting structure lines

        Returns:
            Self for method chaining

        Raises:
            ValueError: If the language is not a known tag or a regex is invalid
        """
        tag = LanguageTag.from_value(language)
        if tag is LanguageTag.UNKNOWN:
            raise ValueError(f"Unknown language tag: {language}")

        for ext in extensions:
            ext_lower = _normalize_extension(ext)
            if not ext_lower:
                continue
            self._extension_to_language[ext_lower] = tag
            self._language_to_extensions.setdefault(tag, set()).add(ext_lower)

        if dependencies is not None or structure is not None:
            current = self._rules.get(tag, _NO_RULES)
            self._rules[tag] = LanguageRules(
                dependencies=_compile(dependencies, tag) if dependencies else current.dependencies,
                structure=_compile(structure, tag) if structure else current.structure,
            )
        return self

    def classify(self, extension: str) -> LanguageTag:
        """
        Map a file extension to a language tag.

        Args:
            extension: Extension with or without the dot, any case

        Returns:
            Language tag, or LanguageTag.UNKNOWN if not recognized
        """
        return self._extension_to_language.get(_normalize_extension(extension), LanguageTag.UNKNOWN)

    def classify_path(self, file_path: Path | str) -> LanguageTag:
        """Map a file path to a language tag using its suffix."""
        return self.classify(Path(file_path).suffix)

    def get_rules(self, language: LanguageTag | str) -> LanguageRules:
        """
        Get the extraction rules for a language.

        Returns:
            LanguageRules (both patterns None if the language has none)
        """
        return self._rules.get(LanguageTag.from_value(language), _NO_RULES)

    def get_extensions(self, language: LanguageTag | str) -> set[str]:
        """Get all registered extensions for a language."""
        return self._language_to_extensions.get(LanguageTag.from_value(language), set()).copy()

    def get_all_languages(self) -> set[LanguageTag]:
        """Get all languages with at least one registered extension."""
        return set(self._language_to_extensions.keys())


def _compile(pattern: str, tag: LanguageTag) -> re.Pattern[str]:
    try:
        return re.compile(pattern)
    except re.error as e:
        raise ValueError(f"Invalid pattern for {tag.value}: {e}") from e


# Global default registry instance
_default_registry = LanguageRegistry()


def get_default_registry() -> LanguageRegistry:
    """Get the global default language registry."""
    return _default_registry
