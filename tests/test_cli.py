"""Tests for the mtree command-line interface."""

from pathlib import Path

import pytest
from click.testing import CliRunner

from mtree.cli.common import format_entry, format_error, format_value
from mtree.cli.main import mtree_cli
from mtree.config import MTreeConfig
from mtree.core.errors import ParserError
from mtree.core.models import Device, DeviceFormat, Entry, FileMode, FileType, Params, Timestamp


@pytest.fixture
def runner():
    return CliRunner()


# ============================================================================
# Formatting
# ============================================================================


class TestFormatting:
    """Tests for entry and error formatting."""

    def test_format_entry(self):
        """Entries list the path and each present attribute."""
        entry = Entry(
            Path("/srv/.BUILDINFO"),
            Params(
                md5=bytes.fromhex("13c0a46c2fb9f18a1a237d4904b6916e"),
                mode=FileMode.from_bits(0o644),
                optional=True,
                file_type=FileType.FILE,
                uname=b"root",
            ),
        )
        text = format_entry(entry)
        assert text.splitlines() == [
            'mtree entry for "/srv/.BUILDINFO"',
            "  md5: 13c0a46c2fb9f18a1a237d4904b6916e",
            "  mode: 644 (rw-r--r--)",
            "  optional",
            "  file type: file",
            "  uname: root",
        ]

    def test_format_value_time_and_device(self):
        """Times show both raw and ISO forms; devices their manifest form."""
        assert format_value("time", Timestamp(0, 5)) == "0.000000005 (1970-01-01 00:00:00 UTC)"
        device = Device(DeviceFormat.LINUX, b"8", b"1", format_name=b"linux")
        assert format_value("device", device) == "linux,8,1"

    def test_format_value_time_out_of_range(self):
        """Times beyond datetime's range fall back to the raw form."""
        assert format_value("time", Timestamp(2**63, 0)) == f"{2**63}.000000000"

    def test_format_error(self):
        """Parse errors and I/O errors are labelled with the line number."""
        assert format_error(3, ParserError("bad thing")) == "line 3: bad thing"
        assert format_error(4, OSError("gone")) == "line 4: I/O error: gone"


# ============================================================================
# Commands
# ============================================================================


class TestCheckCommand:
    """Tests for `mtree check`."""

    def test_check_clean_manifest(self, runner, manifest_file):
        """A clean manifest exits 0 with a summary."""
        result = runner.invoke(mtree_cli, ["check", str(manifest_file)])
        assert result.exit_code == 0
        assert "4 entries, 0 errors" in result.output

    def test_check_gzip_manifest(self, runner, gzip_manifest_file):
        """gzip-compressed manifests are read transparently."""
        result = runner.invoke(mtree_cli, ["check", str(gzip_manifest_file)])
        assert result.exit_code == 0
        assert "4 entries" in result.output

    def test_check_reports_errors(self, runner, bad_manifest_file):
        """Failed lines are reported with their line numbers and exit 1."""
        result = runner.invoke(mtree_cli, ["check", str(bad_manifest_file)])
        assert result.exit_code == 1
        assert "line 2: unrecognized keyword 'bogus_key'" in result.output
        assert "2 entries, 1 errors" in result.output

    def test_check_missing_file(self, runner, tmp_path):
        """A missing manifest is a usage error."""
        result = runner.invoke(mtree_cli, ["check", str(tmp_path / "nope.mtree")])
        assert result.exit_code == 2

    def test_check_strict_dotdot(self, runner, tmp_path):
        """--strict-dotdot turns '..' at the root into an error."""
        path = tmp_path / "dotdot.mtree"
        path.write_bytes(b"..\nfoo\n")
        args = ["check", str(path), "--cwd", "/"]

        assert runner.invoke(mtree_cli, args + ["--no-strict-dotdot"]).exit_code == 0
        result = runner.invoke(mtree_cli, args + ["--strict-dotdot"])
        assert result.exit_code == 1
        assert "line 1:" in result.output

    def test_check_corrupt_xz(self, runner, tmp_path):
        """A damaged .xz manifest is reported as a line error, not a crash."""
        path = tmp_path / "corrupt.mtree.xz"
        path.write_bytes(b"this is not xz data\n" * 4)

        result = runner.invoke(mtree_cli, ["check", str(path)])
        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "line 1: I/O error: damaged compressed manifest" in result.output
        assert "0 entries, 1 errors" in result.output

    def test_bad_log_level_is_usage_error(self, runner, manifest_file, monkeypatch):
        """An unknown MTREE_LOG_LEVEL gives a clean usage error."""
        monkeypatch.setattr(MTreeConfig, "LOG_LEVEL", "CHATTY")
        result = runner.invoke(mtree_cli, ["check", str(manifest_file)])
        assert result.exit_code == 2
        assert "Invalid MTREE_LOG_LEVEL" in result.output


class TestShowCommand:
    """Tests for `mtree show`."""

    def test_show_entries(self, runner, manifest_file):
        """Entries are printed with paths resolved against --cwd."""
        result = runner.invoke(mtree_cli, ["show", str(manifest_file), "--cwd", "/srv/pkg"])
        assert result.exit_code == 0
        assert 'mtree entry for "/srv/pkg/.BUILDINFO"' in result.output
        assert "md5: 13c0a46c2fb9f18a1a237d4904b6916e" in result.output
        assert "mode: 755 (rwxr-xr-x)" in result.output
        assert "file type: directory" in result.output

    def test_show_with_errors(self, runner, bad_manifest_file):
        """Errors are reported and the exit status is 1."""
        result = runner.invoke(mtree_cli, ["show", str(bad_manifest_file), "--cwd", "/"])
        assert result.exit_code == 1
        assert 'mtree entry for "/c"' in result.output
        assert "bogus_key" in result.output

    def test_show_no_errors(self, runner, bad_manifest_file):
        """--no-errors hides failed lines but still exits 1."""
        result = runner.invoke(
            mtree_cli, ["show", str(bad_manifest_file), "--cwd", "/", "--no-errors"]
        )
        assert result.exit_code == 1
        assert "bogus_key" not in result.output

    def test_help(self, runner):
        """The group lists its subcommands."""
        result = runner.invoke(mtree_cli, ["--help"])
        assert result.exit_code == 0
        assert "check" in result.output
        assert "show" in result.output
