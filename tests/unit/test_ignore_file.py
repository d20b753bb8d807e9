"""
Tests for flat .gitignore loading and its error handling.
"""

import logging

from pcs.core.ignore_file import load_ignore_patterns, parse_ignore_lines


class TestParseIgnoreLines:
    def test_comments_and_blank_lines_skipped(self):
        content = "# build output\n\ndist/\n   \n*.log\n"
        assert parse_ignore_lines(content) == ["dist/", "*.log"]

    def test_lines_are_stripped(self):
        assert parse_ignore_lines("  coverage/  \n") == ["coverage/"]

    def test_negation_skipped(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="pcs.core.ignore_file"):
            patterns = parse_ignore_lines("*.log\n!keep.log\n")

        assert patterns == ["*.log"]
        assert any("!keep.log" in r.message for r in caplog.records)

    def test_leading_slash_removed(self):
        assert parse_ignore_lines("/secrets\n/\n") == ["secrets"]

    def test_order_preserved(self):
        assert parse_ignore_lines("b\na\nc\n") == ["b", "a", "c"]


class TestLoadIgnorePatterns:
    def test_missing_file(self, tmp_path):
        assert load_ignore_patterns(tmp_path / ".gitignore") == []

    def test_reads_file(self, tmp_path):
        ignore = tmp_path / ".gitignore"
        ignore.write_text("node_modules/\n.env\n", encoding="utf-8")
        assert load_ignore_patterns(ignore) == ["node_modules/", ".env"]

    def test_invalid_utf8_logs_warning(self, tmp_path, caplog):
        ignore = tmp_path / ".gitignore"
        ignore.write_bytes(b"dist/\n\xff\xfe\xfa\n")

        with caplog.at_level(logging.WARNING, logger="pcs.core.ignore_file"):
            patterns = load_ignore_patterns(ignore)

        assert patterns == []
        assert any("Invalid UTF-8" in r.message for r in caplog.records)

    def test_directory_instead_of_file(self, tmp_path):
        (tmp_path / ".gitignore").mkdir()
        assert load_ignore_patterns(tmp_path / ".gitignore") == []
