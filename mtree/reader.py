"""Streaming mtree reader: resolves classified lines into Entry records.

A reader owns the only mutable state of a parse session: the current
directory (moved by ``..`` lines) and the default params (changed by
``/set``). Nothing is shared between readers, so independent manifests can
be parsed side by side.

Example:
    >>> manifest = b"/set type=file uid=0\\nusr/bin size=1\\n"
    >>> [str(e.path) for e in MTree.from_bytes(manifest, cwd="/")]
    ['/usr/bin']
"""

import gzip
import io
import logging
import lzma
import os
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterable, Iterator

from .config import MTreeConfig
from .core.errors import ParserError, show_bytes
from .core.models import Entry, Params
from .parsers.lines import Directive, LineKind, classify_line

logger = logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"

# Raised by the gzip and lzma readers on damaged input
DECOMPRESSION_ERRORS = (EOFError, lzma.LZMAError, zlib.error)


def open_manifest(filepath: str | Path) -> BinaryIO:
    """Open a manifest for reading in binary mode, handling compression.

    ``.xz`` and ``.gz`` files are decompressed by suffix. Files without a
    known suffix are sniffed for the gzip magic number, since package
    ``.MTREE`` files are gzip-compressed without saying so in their name.
    """
    filepath = Path(filepath)
    if filepath.suffix == ".xz":
        return lzma.open(filepath, "rb")
    if filepath.suffix == ".gz":
        return gzip.open(filepath, "rb")
    with open(filepath, "rb") as f:
        magic = f.read(len(GZIP_MAGIC))
    if magic == GZIP_MAGIC:
        return gzip.open(filepath, "rb")
    return open(filepath, "rb", buffering=1024 * 1024)


def strip_line_ending(line: bytes) -> bytes:
    """Remove one trailing ``\\n`` and then one trailing ``\\r``."""
    if line.endswith(b"\n"):
        line = line[:-1]
    if line.endswith(b"\r"):
        line = line[:-1]
    return line


def _current_dir() -> Path | None:
    try:
        return Path(os.getcwd())
    except OSError:
        logger.debug("No current working directory; relative entries cannot be resolved")
        return None


@dataclass(frozen=True)
class ParseResult:
    """Outcome of one entry-producing or failing manifest line."""

    line_number: int
    entry: Entry | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class MTree:
    """Iterator over the entries of an mtree manifest (start here).

    ``next()`` returns the next :class:`Entry`. A line that cannot be
    decoded raises :class:`ParserError` (or the ``OSError`` from the
    underlying source, which also covers damaged gzip or xz data); the reader
    stays usable and the following ``next()`` carries on with the line after
    it.

    Args:
        source: Binary stream (anything with ``readline()``) or an iterable
            of lines as ``bytes``
        cwd: Starting directory for relative entries (default: the process
            working directory)
        strict_dotdot: Raise on ``..`` when already at the top directory
            (default: ``MTreeConfig.STRICT_DOTDOT``)
        strict_device_format: Reject unknown device formats (default:
            ``MTreeConfig.STRICT_DEVICE_FORMAT``)
    """

    def __init__(
        self,
        source: BinaryIO | Iterable[bytes],
        cwd: str | Path | None = None,
        strict_dotdot: bool | None = None,
        strict_device_format: bool | None = None,
        owns_source: bool = False,
    ):
        if hasattr(source, "readline"):
            self._stream = source
            self._lines = None
        else:
            self._stream = None
            self._lines = iter(source)
        self._owns_source = owns_source
        self._exhausted = False

        self.cwd: Path | None = Path(cwd) if cwd is not None else _current_dir()
        self.start_dir: Path | None = self.cwd
        self.defaults = Params()
        self.line_number = 0

        self.strict_dotdot = (
            MTreeConfig.STRICT_DOTDOT if strict_dotdot is None else strict_dotdot
        )
        self.strict_device_format = (
            MTreeConfig.STRICT_DEVICE_FORMAT if strict_device_format is None
            else strict_device_format
        )

    # ------------------------------------------------------------ Constructors
    @classmethod
    def from_reader(cls, reader: BinaryIO, **kwargs) -> "MTree":
        """Read from an open binary stream."""
        return cls(reader, **kwargs)

    @classmethod
    def from_bytes(cls, data: bytes, **kwargs) -> "MTree":
        """Read from an in-memory manifest."""
        return cls(io.BytesIO(data), **kwargs)

    @classmethod
    def from_lines(cls, lines: Iterable[bytes], **kwargs) -> "MTree":
        """Read from an iterable of lines (line endings optional)."""
        return cls(lines, **kwargs)

    @classmethod
    def from_path(cls, filepath: str | Path, **kwargs) -> "MTree":
        """Open and read a manifest file; the file is closed when exhausted."""
        logger.info(f"Reading mtree manifest: {filepath}")
        return cls(open_manifest(filepath), owns_source=True, **kwargs)

    # ------------------------------------------------------------ Resource handling
    def close(self):
        if self._owns_source and self._stream is not None:
            self._stream.close()
        self._exhausted = True

    def __enter__(self) -> "MTree":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # ------------------------------------------------------------ Iteration
    def __iter__(self) -> "MTree":
        return self

    def __next__(self) -> Entry:
        while True:
            raw = self._read_line()
            if raw is None:
                self.close()
                raise StopIteration
            self.line_number += 1
            try:
                entry = self._resolve(raw)
            except ParserError as e:
                e.at_line(self.line_number, raw)
                raise
            if entry is not None:
                return entry

    def results(self) -> Iterator[ParseResult]:
        """Yield a ParseResult for every entry and every failed line.

        Parse errors do not stop the iteration. An ``OSError`` from the source
        is yielded once and ends it, since the source may not be able to
        advance past the failure.
        """
        while True:
            try:
                entry = next(self)
            except StopIteration:
                return
            except ParserError as e:
                yield ParseResult(self.line_number, error=e)
            except OSError as e:
                yield ParseResult(self.line_number + 1, error=e)
                return
            else:
                yield ParseResult(self.line_number, entry=entry)

    def iter_entries(self) -> Iterator[Entry]:
        """Yield only the entries, logging and skipping lines that fail."""
        for result in self.results():
            if result.error is not None:
                error = result.error
                reason = error.message if isinstance(error, ParserError) else error
                logger.warning(f"Skipping manifest line {result.line_number}: {reason}")
                continue
            yield result.entry

    # ------------------------------------------------------------ Internals
    def _read_line(self) -> bytes | None:
        if self._exhausted:
            return None
        if self._stream is not None:
            try:
                line = self._stream.readline()
            except DECOMPRESSION_ERRORS as e:
                raise OSError(f"damaged compressed manifest: {e}") from e
            if not line:
                return None
        else:
            line = next(self._lines, None)
            if line is None:
                return None
        if isinstance(line, str):
            line = os.fsencode(line)
        return strip_line_ending(line)

    def _resolve(self, line: bytes) -> Entry | None:
        """Apply one line to the reader state; return an Entry if it yields one."""
        parsed = classify_line(line, strict_device_format=self.strict_device_format)

        if parsed.kind in (LineKind.BLANK, LineKind.COMMENT):
            return None

        if parsed.kind is LineKind.DIRECTIVE:
            if parsed.directive is Directive.UNSET:
                raise ParserError("the /unset directive is not supported", token=parsed.raw)
            self.defaults = self.defaults.merge(parsed.keywords)
            logger.debug(
                f"Line {self.line_number}: /set "
                + ", ".join(keyword.field for keyword in parsed.keywords)
            )
            return None

        if parsed.kind is LineKind.DOTDOT:
            self._pop_directory()
            return None

        name = Path(os.fsdecode(parsed.raw))
        if parsed.kind is LineKind.FULL:
            path = name if self.start_dir is None else self.start_dir / name
        else:
            if self.cwd is None:
                raise ParserError(
                    f"relative entry {show_bytes(parsed.raw)} has no current directory "
                    "to resolve against",
                    token=parsed.raw,
                )
            path = self.cwd / name

        return Entry(path=path, params=self.defaults.merge(parsed.keywords))

    def _pop_directory(self):
        if self.cwd is not None and self.cwd.parent != self.cwd:
            self.cwd = self.cwd.parent
            return
        if self.strict_dotdot:
            raise ParserError("'..' used at the top of the directory tree", token=b"..")
        logger.debug(f"Line {self.line_number}: '..' at the top of the tree ignored")
