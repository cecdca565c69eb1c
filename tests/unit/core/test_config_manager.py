"""Unit tests for the key = value config reader."""

import pytest

from rpi_timelapse.core.config_manager import parse_bool, parse_config_lines, read_config, stringify_value


class TestParseConfigLines:

    def test_basic_pairs(self):
        result = parse_config_lines(["a = 1", "b=two", "  c  =  three  "])
        assert result == {"a": "1", "b": "two", "c": "three"}

    def test_comments_and_blank_lines_skipped(self):
        result = parse_config_lines(["# heading", "", "   ", "key = value", "not a pair"])
        assert result == {"key": "value"}

    def test_inline_comment_stripped(self):
        assert parse_config_lines(["interval = 500   # ms"]) == {"interval": "500"}

    def test_quoted_values_keep_hash(self):
        result = parse_config_lines(['name = "frame #1"', "path = '/tmp/a b'"])
        assert result == {"name": "frame #1", "path": "/tmp/a b"}

    def test_value_may_contain_equals(self):
        assert parse_config_lines(["opts = a=b"]) == {"opts": "a=b"}

    def test_later_keys_win(self):
        assert parse_config_lines(["k = 1", "k = 2"]) == {"k": "2"}


class TestParseBool:

    def test_true_values(self):
        for value in ("1", "yes", "YES", "true", "True", True):
            assert parse_bool(value) is True

    def test_false_values(self):
        for value in ("0", "no", "false", "FALSE", False):
            assert parse_bool(value) is False

    def test_other_values_rejected(self):
        for value in ("maybe", "", "on", "2"):
            with pytest.raises(ValueError):
                parse_bool(value)


def test_stringify_bool_is_lowercase():
    assert stringify_value(True) == "true"
    assert stringify_value(3) == "3"


class TestReadConfig:

    def test_reads_file(self, tmp_path):
        path = tmp_path / "manifest.txt"
        path.write_text("# comment\nconfig.lock_file = run.lock\n", encoding="utf-8")
        assert read_config(path) == {"config.lock_file": "run.lock"}

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_config(tmp_path / "missing.txt")
