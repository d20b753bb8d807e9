"""
Tests for LanguageRegistry extension classification.
"""

import pytest

from pcs.core.language_registry import LanguageRegistry, LanguageTag, get_default_registry


class TestClassify:
    def test_known_extensions(self):
        registry = get_default_registry()
        assert registry.classify("py") is LanguageTag.PYTHON
        assert registry.classify("ts") is LanguageTag.TYPESCRIPT
        assert registry.classify("go") is LanguageTag.GO
        assert registry.classify("hpp") is LanguageTag.C_CPP
        assert registry.classify("md") is LanguageTag.MARKDOWN

    def test_case_insensitive(self):
        registry = get_default_registry()
        assert registry.classify("PY") is LanguageTag.PYTHON
        assert registry.classify("Js") is LanguageTag.JAVASCRIPT

    def test_leading_dot_is_optional(self):
        registry = get_default_registry()
        assert registry.classify(".rs") is LanguageTag.RUST

    def test_unknown_extension(self):
        registry = get_default_registry()
        assert registry.classify("xyz") is LanguageTag.UNKNOWN
        assert registry.classify("") is LanguageTag.UNKNOWN

    def test_classify_path(self):
        registry = get_default_registry()
        assert registry.classify_path("src/App.TSX") is LanguageTag.TYPESCRIPT
        assert registry.classify_path("Makefile") is LanguageTag.UNKNOWN

    def test_tag_values_serialize_as_strings(self):
        assert LanguageTag.C_CPP.value == "C/C++"
        assert LanguageTag.from_value("Python") is LanguageTag.PYTHON
        assert LanguageTag.from_value("Cobol") is LanguageTag.UNKNOWN


class TestRules:
    def test_languages_with_patterns(self):
        registry = get_default_registry()
        rules = registry.get_rules(LanguageTag.PYTHON)
        assert rules.dependencies is not None
        assert rules.structure is not None

    def test_languages_without_patterns(self):
        registry = get_default_registry()
        for tag in (LanguageTag.HTML, LanguageTag.JSON, LanguageTag.UNKNOWN):
            rules = registry.get_rules(tag)
            assert rules.dependencies is None
            assert rules.structure is None


class TestRegistration:
    def test_empty_registry(self):
        registry = LanguageRegistry(load_defaults=False)
        assert registry.classify("py") is LanguageTag.UNKNOWN
        assert registry.get_all_languages() == set()

    def test_register_extensions(self):
        registry = LanguageRegistry(load_defaults=False)
        registry.register(LanguageTag.SHELL, [".zsh", "FISH"])
        assert registry.classify("zsh") is LanguageTag.SHELL
        assert registry.classify("fish") is LanguageTag.SHELL
        assert registry.get_extensions("Shell") == {"zsh", "fish"}

    def test_register_unknown_tag_fails(self):
        registry = LanguageRegistry(load_defaults=False)
        with pytest.raises(ValueError):
            registry.register("Cobol", ["cob"])

    def test_register_invalid_pattern_fails(self):
        registry = LanguageRegistry(load_defaults=False)
        with pytest.raises(ValueError):
            registry.register(LanguageTag.RUBY, ["rb"], dependencies="^(require")


class TestFromYaml:
    def test_load_custom_file(self, tmp_path):
        config = tmp_path / "languages.yaml"
        config.write_text(
            "Python:\n"
            "  extensions: [py]\n"
            "  dependencies: '^import\\s'\n"
            "Klingon:\n"
            "  extensions: [tlh]\n",
            encoding="utf-8",
        )

        registry = LanguageRegistry.from_yaml(config)

        assert registry.classify("py") is LanguageTag.PYTHON
        assert registry.classify("tlh") is LanguageTag.UNKNOWN
        assert registry.get_rules("Python").structure is None

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            LanguageRegistry.from_yaml(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        config = tmp_path / "languages.yaml"
        config.write_text("Python: [unclosed\n", encoding="utf-8")
        with pytest.raises(ValueError):
            LanguageRegistry.from_yaml(config)
