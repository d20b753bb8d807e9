"""
Tests for configuration loading, file formats, and environment overrides.
"""

import json

import pytest

from pcs.core.config import PROJECT_CONFIG_FILENAME, PCSConfig, ScannerConfig, load_config


class TestDefaults:
    def test_scanner_defaults(self):
        config = PCSConfig()
        assert config.scanner.max_file_size == 1_000_000
        assert config.scanner.max_files == 1000
        assert config.scanner.output_file == "project-context.json"
        assert config.scanner.use_gitignore is True
        assert config.scanner.follow_symlinks is False
        assert config.scanner.scan_timeout is None
        assert "node_modules/" in config.scanner.exclude_patterns
        assert config.scanner.ignore_patterns == []

    def test_watch_defaults(self):
        config = PCSConfig()
        assert config.watch.debounce_ms == 2000
        assert config.watch.scan_on_start is True

    def test_instances_do_not_share_lists(self):
        first = ScannerConfig()
        second = ScannerConfig()
        first.exclude_patterns.append("extra/")
        first.host_excludes["**/extra"] = True
        assert "extra/" not in second.exclude_patterns
        assert "**/extra" not in second.host_excludes


class TestFromFile:
    def test_yaml_file(self, tmp_path):
        path = tmp_path / "pcs.yaml"
        path.write_text(
            "scanner:\n  max_files: 50\n  exclude_patterns: [out/]\nwatch:\n  debounce_ms: 500\n",
            encoding="utf-8",
        )

        config = PCSConfig.from_file(path)

        assert config.scanner.max_files == 50
        assert config.scanner.exclude_patterns == ["out/"]
        assert config.scanner.max_file_size == 1_000_000
        assert config.watch.debounce_ms == 500

    def test_json_file(self, tmp_path):
        path = tmp_path / "pcs.json"
        path.write_text(json.dumps({"scanner": {"output_file": "ctx.json"}}), encoding="utf-8")
        assert PCSConfig.from_file(path).scanner.output_file == "ctx.json"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            PCSConfig.from_file(tmp_path / "missing.yaml")

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "pcs.toml"
        path.write_text("", encoding="utf-8")
        with pytest.raises(ValueError):
            PCSConfig.from_file(path)

    def test_unknown_key(self, tmp_path):
        path = tmp_path / "pcs.yaml"
        path.write_text("scanner:\n  max_depth: 3\n", encoding="utf-8")
        with pytest.raises(ValueError):
            PCSConfig.from_file(path)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "pcs.yaml"
        path.write_text("scanner: [unclosed\n", encoding="utf-8")
        with pytest.raises(ValueError):
            PCSConfig.from_file(path)

    def test_save_and_reload(self, tmp_path):
        config = PCSConfig()
        config.scanner.max_files = 7
        path = tmp_path / "nested" / "pcs.yaml"

        config.save(path)

        assert PCSConfig.from_file(path).scanner.max_files == 7


class TestEnvOverrides:
    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("PCS_SCANNER_MAX_FILES", "10")
        monkeypatch.setenv("PCS_SCANNER_EXCLUDE_PATTERNS", "a/, b/ ,,")
        monkeypatch.setenv("PCS_SCANNER_USE_GITIGNORE", "false")
        monkeypatch.setenv("PCS_WATCH_DEBOUNCE_MS", "250")
        monkeypatch.setenv("PCS_LOGGING_LEVEL", "DEBUG")

        config = PCSConfig().apply_env_overrides()

        assert config.scanner.max_files == 10
        assert config.scanner.exclude_patterns == ["a/", "b/"]
        assert config.scanner.use_gitignore is False
        assert config.watch.debounce_ms == 250
        assert config.logging.level == "DEBUG"

    def test_invalid_value_ignored(self, monkeypatch, caplog):
        monkeypatch.setenv("PCS_SCANNER_MAX_FILES", "many")

        config = PCSConfig().apply_env_overrides()

        assert config.scanner.max_files == 1000
        assert "PCS_SCANNER_MAX_FILES" in caplog.text


class TestLoadConfig:
    def test_project_config_picked_up(self, tmp_path, monkeypatch):
        monkeypatch.delenv("PCS_SCANNER_MAX_FILES", raising=False)
        (tmp_path / PROJECT_CONFIG_FILENAME).write_text(
            "scanner:\n  max_files: 3\n", encoding="utf-8"
        )
        assert load_config(project_root=tmp_path).scanner.max_files == 3

    def test_explicit_path_wins(self, tmp_path, monkeypatch):
        monkeypatch.delenv("PCS_SCANNER_MAX_FILES", raising=False)
        (tmp_path / PROJECT_CONFIG_FILENAME).write_text(
            "scanner:\n  max_files: 3\n", encoding="utf-8"
        )
        explicit = tmp_path / "other.yaml"
        explicit.write_text("scanner:\n  max_files: 9\n", encoding="utf-8")

        assert load_config(explicit, project_root=tmp_path).scanner.max_files == 9

    def test_env_applied_after_file(self, tmp_path, monkeypatch):
        explicit = tmp_path / "pcs.yaml"
        explicit.write_text("scanner:\n  max_files: 9\n", encoding="utf-8")
        monkeypatch.setenv("PCS_SCANNER_MAX_FILES", "4")

        assert load_config(explicit).scanner.max_files == 4
        assert load_config(explicit, apply_env=False).scanner.max_files == 9
