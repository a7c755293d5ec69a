"""Record types produced by the mtree parser.

An mtree manifest is a sequence of filesystem records. Each resolved record
is an :class:`Entry`: a path plus a :class:`Params` bag of optional
attributes. The value types used inside ``Params`` (device references,
permission triples, file types, timestamps) live here too.
"""

from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timedelta, timezone
from enum import Enum, IntFlag
from pathlib import Path
from typing import Any, ClassVar, Iterable, Iterator


class FileType(Enum):
    """The closed set of values accepted by the ``type`` keyword."""

    BLOCK_DEVICE = "block"
    CHARACTER_DEVICE = "char"
    DIRECTORY = "dir"
    FIFO = "fifo"
    FILE = "file"
    SYMBOLIC_LINK = "link"
    SOCKET = "socket"

    @classmethod
    def from_bytes(cls, data: bytes) -> "FileType | None":
        """Look up a type by its manifest name, or None if unrecognized."""
        return _FILE_TYPES_BY_NAME.get(data)

    def __str__(self) -> str:
        return _FILE_TYPE_LABELS[self]


_FILE_TYPES_BY_NAME = {member.value.encode("ascii"): member for member in FileType}

_FILE_TYPE_LABELS = {
    FileType.BLOCK_DEVICE: "block device",
    FileType.CHARACTER_DEVICE: "character device",
    FileType.DIRECTORY: "directory",
    FileType.FIFO: "fifo",
    FileType.FILE: "file",
    FileType.SYMBOLIC_LINK: "symbolic link",
    FileType.SOCKET: "socket",
}


class DeviceFormat(Enum):
    """Device number encodings understood by mtree(5).

    ``OTHER`` stands for any name outside the known list; the raw name is
    kept on :attr:`Device.format_name`.
    """

    NATIVE = "native"
    BSD386 = "386bsd"
    BSD4 = "4bsd"
    BSDOS = "bsdos"
    FREEBSD = "freebsd"
    HPUX = "hpux"
    ISC = "isc"
    LINUX = "linux"
    NETBSD = "netbsd"
    OSF1 = "osf1"
    SCO = "sco"
    SOLARIS = "solaris"
    SUNOS = "sunos"
    SVR3 = "svr3"
    SVR4 = "svr4"
    ULTRIX = "ultrix"
    OTHER = "other"

    @classmethod
    def from_bytes(cls, data: bytes) -> "DeviceFormat | None":
        """Look up a known format by name, or None if unrecognized."""
        return _DEVICE_FORMATS_BY_NAME.get(data)


_DEVICE_FORMATS_BY_NAME = {
    member.value.encode("ascii"): member
    for member in DeviceFormat
    if member is not DeviceFormat.OTHER
}


@dataclass(frozen=True)
class Device:
    """A device reference from the ``device`` or ``resdevice`` keyword.

    Major, minor and subunit are kept as raw bytes: their encoding depends
    on the device format and is not interpreted here.
    """

    format: DeviceFormat
    major: bytes
    minor: bytes
    subunit: bytes | None = None
    format_name: bytes = b""
    """Format name exactly as written in the manifest."""

    def __str__(self) -> str:
        name = self.format_name or self.format.value.encode("ascii")
        parts = [name, self.major, self.minor]
        if self.subunit is not None:
            parts.append(self.subunit)
        return b",".join(parts).decode("utf-8", errors="backslashreplace")


class Perms(IntFlag):
    """One read/write/execute permission set."""

    READ = 4
    WRITE = 2
    EXECUTE = 1

    def symbolic(self) -> str:
        """Render as ``rwx`` with ``-`` for missing permissions."""
        return "".join(
            ch if self & flag else "-"
            for ch, flag in (("r", Perms.READ), ("w", Perms.WRITE), ("x", Perms.EXECUTE))
        )


@dataclass(frozen=True)
class FileMode:
    """Owner, group and other permission sets of a file."""

    owner: Perms
    group: Perms
    other: Perms

    @classmethod
    def from_bits(cls, bits: int) -> "FileMode":
        """Build a mode from permission bits (e.g. ``0o644``)."""
        if not 0 <= bits <= 0o777:
            raise ValueError(f"permission bits out of range: {bits:#o}")
        return cls(Perms((bits >> 6) & 7), Perms((bits >> 3) & 7), Perms(bits & 7))

    @classmethod
    def from_display(cls, text: str) -> "FileMode":
        """Parse the nine-character display form produced by ``str()``.

        Examples:
            >>> int(FileMode.from_display("rw-r--r--")) == 0o644
            True
        """
        if len(text) != 9:
            raise ValueError(f"expected 9 permission characters, found {text!r}")
        sets = []
        for start in (0, 3, 6):
            chunk = text[start:start + 3]
            perms = Perms(0)
            for ch, expected, flag in zip(chunk, "rwx", (Perms.READ, Perms.WRITE, Perms.EXECUTE)):
                if ch == expected:
                    perms |= flag
                elif ch != "-":
                    raise ValueError(f"invalid permission character {ch!r} in {text!r}")
            sets.append(perms)
        return cls(*sets)

    def __int__(self) -> int:
        return (int(self.owner) << 6) | (int(self.group) << 3) | int(self.other)

    @property
    def octal(self) -> str:
        """Three-digit octal form, as written in manifests."""
        return f"{int(self):03o}"

    def __str__(self) -> str:
        return self.owner.symbolic() + self.group.symbolic() + self.other.symbolic()


@dataclass(frozen=True, order=True)
class Timestamp:
    """A modification time: seconds and nanoseconds since the Unix epoch."""

    NANOS_PER_SECOND: ClassVar[int] = 1_000_000_000

    seconds: int
    nanoseconds: int = 0

    @property
    def total_nanoseconds(self) -> int:
        return self.seconds * self.NANOS_PER_SECOND + self.nanoseconds

    def to_datetime(self) -> datetime:
        """Convert to an aware UTC datetime (truncated to microseconds).

        Raises:
            OverflowError: If the time is outside the range ``datetime`` supports
        """
        base = datetime(1970, 1, 1, tzinfo=timezone.utc)
        return base + timedelta(seconds=self.seconds, microseconds=self.nanoseconds // 1000)

    def __str__(self) -> str:
        return f"{self.seconds}.{self.nanoseconds:09d}"


@dataclass(frozen=True)
class Keyword:
    """One decoded keyword: the ``Params`` field it sets and its value."""

    field: str
    value: Any


@dataclass(frozen=True)
class Params:
    """All attributes an entry may carry.

    Every attribute is optional and ``None`` when absent. The ``ignore``,
    ``no_change`` and ``optional`` markers carry no value, so they are plain
    booleans whose ``True`` means the keyword was present.
    """

    checksum: int | None = None
    """``cksum``: checksum using the default cksum(1) algorithm."""

    device: Device | None = None
    """``device``: device number for block or char file types."""

    contents: Path | None = None
    """``contents``: path of a file holding this file's contents."""

    flags: bytes | None = None
    """``flags``: file flags as a symbolic name."""

    gid: int | None = None
    gname: bytes | None = None
    """``gname``: owning group name. Usually at most 32 bytes, but longer
    names are kept as-is."""

    ignore: bool = False
    """``ignore``: ignore any file hierarchy below this line."""

    inode: int | None = None
    link: Path | None = None
    """``link``: target of the symbolic link when type=link."""

    md5: bytes | None = None
    mode: FileMode | None = None
    nlink: int | None = None
    no_change: bool = False
    """``nochange``: the file must exist, all other attributes are ignored."""

    optional: bool = False
    """``optional``: do not complain if the file is missing."""

    resident_device: Device | None = None
    """``resdevice``: ID of the device that contains the file."""

    rmd160: bytes | None = None
    sha1: bytes | None = None
    sha256: bytes | None = None
    sha384: bytes | None = None
    sha512: bytes | None = None
    size: int | None = None
    time: Timestamp | None = None
    """``time``: last modification time."""

    file_type: FileType | None = None
    uid: int | None = None
    uname: bytes | None = None
    """``uname``: owning user name. Like ``gname``, the 32-byte length is
    a convention and is not enforced."""

    def merge(self, keywords: Iterable[Keyword]) -> "Params":
        """Return a copy with ``keywords`` applied in order.

        Later keywords for the same attribute overwrite earlier ones. The
        receiver is left unchanged.
        """
        updates = {keyword.field: keyword.value for keyword in keywords}
        if not updates:
            return self
        return replace(self, **updates)

    def present(self) -> Iterator[tuple[str, Any]]:
        """Yield ``(name, value)`` for each attribute that is set."""
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None or value is False:
                continue
            yield f.name, value


@dataclass(frozen=True)
class Entry:
    """A resolved manifest record."""

    path: Path
    params: Params = field(default_factory=Params)
