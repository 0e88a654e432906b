"""Tests for cudblank.serializer - formatting and in-place writes."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from cudblank.errors import SerializeError, WriteError
from cudblank.serializer import format_source, serialize, write_file


class TestFormatSource:

    def test_disabled_formatter_returns_input(self, tmp_path):
        assert format_source(b"package x\n", None, tmp_path / "x.go") == b"package x\n"

    def test_missing_formatter_warns_and_returns_input(self, tmp_path, capsys):
        with patch("cudblank.serializer.shutil.which", return_value=None):
            out = format_source(b"package x\n", "gofmt", tmp_path / "x.go")

        assert out == b"package x\n"
        assert "gofmt not found" in capsys.readouterr().out

    def test_formatter_output_is_used(self, tmp_path):
        completed = MagicMock(returncode=0, stdout=b"package x\n", stderr=b"")
        with patch("cudblank.serializer.shutil.which", return_value="/usr/bin/gofmt"), \
                patch("cudblank.serializer.subprocess.run", return_value=completed) as run:
            out = format_source(b"package   x\n", "gofmt", tmp_path / "x.go")

        assert out == b"package x\n"
        assert run.call_args.args[0] == ["gofmt"]
        assert run.call_args.kwargs["input"] == b"package   x\n"

    def test_formatter_failure_is_fatal(self, tmp_path):
        completed = MagicMock(returncode=2, stdout=b"", stderr=b"<standard input>:3:1: expected declaration")
        with patch("cudblank.serializer.shutil.which", return_value="/usr/bin/gofmt"), \
                patch("cudblank.serializer.subprocess.run", return_value=completed):
            with pytest.raises(SerializeError, match="expected declaration") as exc_info:
                format_source(b"package x\n}", "gofmt", tmp_path / "x.go")
        assert exc_info.value.phase == "write"

    def test_formatter_timeout_is_fatal(self, tmp_path):
        with patch("cudblank.serializer.shutil.which", return_value="/usr/bin/gofmt"), \
                patch("cudblank.serializer.subprocess.run",
                      side_effect=subprocess.TimeoutExpired("gofmt", 60)):
            with pytest.raises(SerializeError):
                format_source(b"package x\n", "gofmt", tmp_path / "x.go")


class TestWriteFile:

    def test_truncates_and_rewrites(self, tmp_path):
        path = tmp_path / "x.go"
        path.write_bytes(b"package x\n\nfunc long() {}\n")
        write_file(path, b"package x\n")
        assert path.read_bytes() == b"package x\n"

    def test_missing_file_is_not_created(self, tmp_path):
        path = tmp_path / "missing.go"
        with pytest.raises(WriteError, match="opening for rewriting"):
            write_file(path, b"package x\n")
        assert not path.exists()

    def test_serialize_formats_then_writes(self, tmp_path):
        path = tmp_path / "x.go"
        path.write_bytes(b"old")
        assert serialize(path, b"package x\n", None) == b"package x\n"
        assert path.read_bytes() == b"package x\n"
