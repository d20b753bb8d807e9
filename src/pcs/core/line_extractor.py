"""
Line-based extraction of dependencies and structural declarations.

Applies per-language regular expressions to each stripped line of a file.
This is a best-effort heuristic: no parsing, no symbol resolution.
"""

from pcs.core.language_registry import LanguageRegistry, LanguageTag, get_default_registry

MAX_STRUCTURE_ITEMS = 10


class LineExtractor:
    """
    Extracts dependency and structure lines from source text.

    Patterns come from a LanguageRegistry; languages without a pattern
    yield empty results.
    """

    def __init__(
        self,
        registry: LanguageRegistry | None = None,
        max_structure_items: int = MAX_STRUCTURE_ITEMS,
    ):
        self._registry = registry or get_default_registry()
        self._max_structure_items = max_structure_items

    def extract_dependencies(self, content: str, language: LanguageTag | str) -> list[str]:
        """
        Extract dependency lines, deduplicated in first-seen order.

        Args:
            content: File content
            language: Language tag of the file

        Returns:
            Unique stripped lines matching the language's dependency pattern
        """
        pattern = self._registry.get_rules(language).dependencies
        if pattern is None:
            return []

        seen: set[str] = set()
        dependencies: list[str] = []
        for line in content.split("\n"):
            stripped = line.strip()
            if stripped and pattern.match(stripped) and stripped not in seen:
                seen.add(stripped)
                dependencies.append(stripped)
        return dependencies

    def extract_structure(self, content: str, language: LanguageTag | str) -> list[str]:
        """
        Extract structural declaration lines in source order.

        Results are not deduplicated and are truncated to the first
        max_structure_items matches.

        Args:
            content: File content
            language: Language tag of the file

        Returns:
            Stripped lines matching the language's structure pattern
        """
        pattern = self._registry.get_rules(language).structure
        if pattern is None or self._max_structure_items <= 0:
            return []

        structure: list[str] = []
        for line in content.split("\n"):
            stripped = line.strip()
            if stripped and pattern.match(stripped):
                structure.append(stripped)
                if len(structure) >= self._max_structure_items:
                    break
        return structure


_default_extractor = LineExtractor()


def extract_dependencies(content: str, language: LanguageTag | str) -> list[str]:
    """Extract dependency lines using the default registry."""
    return _default_extractor.extract_dependencies(content, language)


def extract_structure(content: str, language: LanguageTag | str) -> list[str]:
    """Extract structure lines using the default registry."""
    return _default_extractor.extract_structure(content, language)
