"""Tests for mtree record types."""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from mtree.core.models import (
    Device,
    DeviceFormat,
    Entry,
    FileMode,
    FileType,
    Keyword,
    Params,
    Perms,
    Timestamp,
)
from mtree.parsers.keywords import decode_mode


# ============================================================================
# FileMode Tests
# ============================================================================


class TestFileMode:
    """Tests for FileMode and Perms."""

    def test_display(self):
        """Modes render in rwx form."""
        assert str(FileMode.from_bits(0o644)) == "rw-r--r--"
        assert str(FileMode.from_bits(0o755)) == "rwxr-xr-x"
        assert str(FileMode.from_bits(0)) == "---------"

    def test_octal_display_round_trip(self):
        """Every three-digit octal mode survives display and back."""
        for bits in range(0o1000):
            mode = decode_mode(f"{bits:03o}".encode())
            assert int(mode) == bits
            assert FileMode.from_display(str(mode)) == mode
            assert mode.octal == f"{bits:03o}"

    def test_from_display_invalid(self):
        """Malformed display strings are rejected."""
        with pytest.raises(ValueError):
            FileMode.from_display("rw-r--r")
        with pytest.raises(ValueError):
            FileMode.from_display("rw-r--r-s")

    def test_from_bits_out_of_range(self):
        """Bits outside 0o777 are rejected."""
        with pytest.raises(ValueError):
            FileMode.from_bits(0o1000)

    def test_perms_symbolic(self):
        """Single permission sets render individually."""
        assert (Perms.READ | Perms.EXECUTE).symbolic() == "r-x"
        assert Perms(0).symbolic() == "---"


# ============================================================================
# Enum Tests
# ============================================================================


class TestFileType:
    """Tests for FileType lookup."""

    def test_from_bytes(self):
        """Every manifest name maps to its member."""
        expected = {
            b"block": FileType.BLOCK_DEVICE,
            b"char": FileType.CHARACTER_DEVICE,
            b"dir": FileType.DIRECTORY,
            b"fifo": FileType.FIFO,
            b"file": FileType.FILE,
            b"link": FileType.SYMBOLIC_LINK,
            b"socket": FileType.SOCKET,
        }
        for name, member in expected.items():
            assert FileType.from_bytes(name) is member

    def test_unknown(self):
        """Unknown names return None."""
        assert FileType.from_bytes(b"other") is None
        assert FileType.from_bytes(b"DIR") is None

    def test_display(self):
        """Types render as readable labels."""
        assert str(FileType.CHARACTER_DEVICE) == "character device"


class TestDeviceFormat:
    """Tests for DeviceFormat lookup."""

    def test_known_formats(self):
        """All sixteen named formats are recognized."""
        names = [
            b"native", b"386bsd", b"4bsd", b"bsdos", b"freebsd", b"hpux", b"isc", b"linux",
            b"netbsd", b"osf1", b"sco", b"solaris", b"sunos", b"svr3", b"svr4", b"ultrix",
        ]
        formats = [DeviceFormat.from_bytes(name) for name in names]
        assert None not in formats
        assert len(set(formats)) == 16
        assert DeviceFormat.from_bytes(b"386bsd") is DeviceFormat.BSD386

    def test_other_is_not_a_name(self):
        """OTHER is never returned by lookup, even for the text "other"."""
        assert DeviceFormat.from_bytes(b"other") is None

    def test_device_display(self):
        """Devices render as their comma-separated manifest form."""
        device = Device(DeviceFormat.LINUX, b"8", b"1", format_name=b"linux")
        assert str(device) == "linux,8,1"
        device = Device(DeviceFormat.NATIVE, b"1", b"2", subunit=b"3")
        assert str(device) == "native,1,2,3"


# ============================================================================
# Timestamp Tests
# ============================================================================


class TestTimestamp:
    """Tests for Timestamp."""

    def test_to_datetime(self):
        """Timestamps convert to aware UTC datetimes."""
        ts = Timestamp(1523250074, 300237174)
        assert ts.to_datetime() == datetime(2018, 4, 9, 5, 1, 14, 300237, tzinfo=timezone.utc)

    def test_total_nanoseconds(self):
        """Exact nanoseconds are preserved."""
        assert Timestamp(2, 5).total_nanoseconds == 2_000_000_005

    def test_ordering_and_display(self):
        """Timestamps order by seconds then nanoseconds."""
        assert Timestamp(1, 999) < Timestamp(2, 0)
        assert str(Timestamp(5, 25)) == "5.000000025"


# ============================================================================
# Params Tests
# ============================================================================


class TestParams:
    """Tests for Params defaults and merging."""

    def test_defaults(self):
        """Unset attributes are None, markers are False."""
        params = Params()
        assert params.size is None
        assert params.md5 is None
        assert params.ignore is False
        assert params.no_change is False
        assert params.optional is False
        assert list(params.present()) == []

    def test_merge_later_wins(self):
        """Later keywords for the same field overwrite earlier ones."""
        params = Params().merge([Keyword("size", 1), Keyword("uid", 0), Keyword("size", 2)])
        assert params.size == 2
        assert params.uid == 0

    def test_merge_does_not_mutate(self):
        """The base Params is left unchanged."""
        base = Params(uid=0, gid=0)
        merged = base.merge([Keyword("uid", 1000), Keyword("no_change", True)])
        assert base.uid == 0
        assert base.no_change is False
        assert merged.uid == 1000
        assert merged.gid == 0
        assert merged.no_change is True

    def test_merge_empty_returns_same(self):
        """Merging nothing returns an equal Params."""
        base = Params(size=5)
        assert base.merge([]) == base

    def test_present(self):
        """present() lists only set attributes, in field order."""
        params = Params(size=3, optional=True, uid=0)
        assert list(params.present()) == [("optional", True), ("size", 3), ("uid", 0)]


class TestEntry:
    """Tests for Entry."""

    def test_entry_is_frozen(self):
        """Entries cannot be modified after creation."""
        entry = Entry(Path("/a"), Params(size=1))
        with pytest.raises(AttributeError):
            entry.path = Path("/b")
