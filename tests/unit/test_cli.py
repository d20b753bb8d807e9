"""
Integration tests for CLI commands.

Tests the basic functionality of CLI commands and error handling.
"""

import json

from typer.testing import CliRunner

from pcs.cli import app

runner = CliRunner()


class TestCLIHelp:
    """Test CLI help and usage information."""

    def test_main_help(self):
        """Main help should display available commands."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "scan" in result.stdout
        assert "watch" in result.stdout
        assert "config" in result.stdout

    def test_scan_help(self):
        result = runner.invoke(app, ["scan", "--help"])

        assert result.exit_code == 0
        assert "--max-files" in result.stdout
        assert "--output" in result.stdout

    def test_watch_help(self):
        result = runner.invoke(app, ["watch", "--help"])

        assert result.exit_code == 0
        assert "--debounce-ms" in result.stdout


class TestScanCommand:
    def test_scan_writes_document(self, tmp_path):
        (tmp_path / "app.py").write_text("import os\n", encoding="utf-8")
        (tmp_path / "index.js").write_text("const x = require('x');\n", encoding="utf-8")

        result = runner.invoke(app, ["scan", str(tmp_path)])

        assert result.exit_code == 0, result.stdout
        assert "Scan Complete" in result.stdout
        assert "Python" in result.stdout
        assert "JavaScript" in result.stdout
        document = json.loads((tmp_path / "project-context.json").read_text(encoding="utf-8"))
        assert document["projectStructure"]["summary"]["fileCount"] == 2

    def test_scan_options(self, tmp_path):
        for name in ("a.py", "b.py", "c.py"):
            (tmp_path / name).write_text("", encoding="utf-8")
        output = tmp_path / "out" / "ctx.json"
        output.parent.mkdir()

        result = runner.invoke(
            app, ["scan", str(tmp_path), "-o", str(output), "--max-files", "2", "--quiet"]
        )

        assert result.exit_code == 0, result.stdout
        assert "Scan Complete" not in result.stdout
        files = json.loads(output.read_text(encoding="utf-8"))["projectStructure"]["files"]
        assert files[-1] == {"warning": "Max file limit reached. Some files were not analyzed."}
        assert len(files) == 3

    def test_no_gitignore(self, tmp_path):
        (tmp_path / ".gitignore").write_text("skip.py\n", encoding="utf-8")
        (tmp_path / "skip.py").write_text("", encoding="utf-8")

        runner.invoke(app, ["scan", str(tmp_path), "--quiet"])
        with_ignore = json.loads((tmp_path / "project-context.json").read_text(encoding="utf-8"))
        runner.invoke(app, ["scan", str(tmp_path), "--quiet", "--no-gitignore"])
        without_ignore = json.loads((tmp_path / "project-context.json").read_text(encoding="utf-8"))

        def paths(document):
            return [f["path"] for f in document["projectStructure"]["files"]]

        assert "skip.py" not in paths(with_ignore)
        assert "skip.py" in paths(without_ignore)

    def test_scan_missing_directory(self, tmp_path):
        result = runner.invoke(app, ["scan", str(tmp_path / "missing")])

        assert result.exit_code == 1
        assert "Error" in result.stdout

    def test_scan_with_config_file(self, tmp_path):
        (tmp_path / "a.py").write_text("", encoding="utf-8")
        config = tmp_path / "pcs.yaml"
        config.write_text("scanner:\n  output_file: context.yaml\n", encoding="utf-8")

        result = runner.invoke(app, ["scan", str(tmp_path), "-c", str(config), "--quiet"])

        assert result.exit_code == 0, result.stdout
        assert (tmp_path / "context.yaml").exists()

    def test_invalid_config_file(self, tmp_path):
        config = tmp_path / "pcs.yaml"
        config.write_text("scanner:\n  bogus: 1\n", encoding="utf-8")

        result = runner.invoke(app, ["scan", str(tmp_path), "-c", str(config)])

        assert result.exit_code == 1


class TestConfigCommand:
    def test_shows_effective_config(self, tmp_path):
        config = tmp_path / "pcs.yaml"
        config.write_text("scanner:\n  max_files: 123\n", encoding="utf-8")

        result = runner.invoke(app, ["config", "-c", str(config)])

        assert result.exit_code == 0
        assert "123" in result.stdout
        assert "debounce_ms" in result.stdout


class TestCLIErrorHandling:
    def test_invalid_command(self):
        """Invalid command should show error."""
        result = runner.invoke(app, ["invalid_command"])

        assert result.exit_code != 0
