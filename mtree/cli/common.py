"""
Shared CLI utilities for the mtree command.

Provides:
- Console output
- Logging setup
- Entry formatting
- Common CLI option decorators
"""

import logging
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.logging import RichHandler

from ..config import MTreeConfig
from ..core.errors import ParserError
from ..core.models import Entry, FileMode, Timestamp
from ..reader import MTree

# Shared console instance for all CLI output
console = Console()
err_console = Console(stderr=True)

# Params field -> display label
_LABELS = {
    "checksum": "checksum",
    "device": "device",
    "contents": "contents",
    "flags": "flags",
    "gid": "gid",
    "gname": "gname",
    "ignore": "ignore",
    "inode": "inode",
    "link": "link",
    "md5": "md5",
    "mode": "mode",
    "nlink": "nlink",
    "no_change": "no change",
    "optional": "optional",
    "resident_device": "resident device",
    "rmd160": "rmd160",
    "sha1": "sha1",
    "sha256": "sha256",
    "sha384": "sha384",
    "sha512": "sha512",
    "size": "size",
    "time": "modification time",
    "file_type": "file type",
    "uid": "uid",
    "uname": "uname",
}

_DIGEST_FIELDS = {"md5", "rmd160", "sha1", "sha256", "sha384", "sha512"}


def configure_logging(verbose: int = 0) -> None:
    """Send log records to stderr through rich.

    Each -v lowers the configured MTREE_LOG_LEVEL by one step (to INFO,
    then DEBUG). An unknown level name is a usage error.
    """
    try:
        configured = MTreeConfig.log_level()
    except ValueError as e:
        raise click.UsageError(str(e)) from e
    level = max(logging.DEBUG, configured - 10 * verbose)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def format_time(ts: Timestamp) -> str:
    """Format a manifest timestamp as ``seconds.nanos (ISO date)``."""
    try:
        iso = ts.to_datetime().strftime("%Y-%m-%d %H:%M:%S UTC")
    except OverflowError:
        return str(ts)
    return f"{ts} ({iso})"


def format_value(name: str, value: Any) -> str:
    """Format one Params attribute value for display."""
    if name in _DIGEST_FIELDS:
        return value.hex()
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="backslashreplace")
    if isinstance(value, Timestamp):
        return format_time(value)
    if isinstance(value, FileMode):
        return f"{value.octal} ({value})"
    # Device, FileType and Path render themselves
    return str(value)


def format_entry(entry: Entry) -> str:
    """Format an entry as a header line plus one line per present attribute."""
    lines = [f'mtree entry for "{entry.path}"']
    for name, value in entry.params.present():
        label = _LABELS[name]
        if value is True:
            lines.append(f"  {label}")
        else:
            lines.append(f"  {label}: {format_value(name, value)}")
    return "\n".join(lines)


def format_error(line_number: int, error: Exception) -> str:
    """Format a failed line for display (plain text, no markup)."""
    if isinstance(error, ParserError):
        return f"line {line_number}: {error.message}"
    return f"line {line_number}: I/O error: {error}"


def open_tree(manifest: Path, cwd: Path | None, strict_dotdot: bool | None,
              strict_device_format: bool | None) -> MTree:
    """Open a manifest with the parsing options shared by all subcommands."""
    try:
        return MTree.from_path(
            manifest,
            cwd=cwd,
            strict_dotdot=strict_dotdot,
            strict_device_format=strict_device_format,
        )
    except OSError as e:
        raise click.FileError(str(manifest), hint=str(e)) from e


# Common CLI option decorators
def parse_options(func):
    """Decorator adding the options shared by every parsing subcommand."""
    options = [
        click.option(
            "--cwd",
            "cwd",
            type=click.Path(file_okay=False, path_type=Path),
            help="Directory relative entries are resolved against (default: current directory)",
        ),
        click.option(
            "--strict-dotdot/--no-strict-dotdot",
            default=None,
            help="Treat '..' at the top of the tree as an error (or set MTREE_STRICT_DOTDOT)",
        ),
        click.option(
            "--strict-device-format/--no-strict-device-format",
            default=None,
            help="Reject unknown device formats (or set MTREE_STRICT_DEVICE_FORMAT)",
        ),
        click.option(
            "--verbose",
            "-v",
            count=True,
            help="Increase log verbosity (repeat for debug output)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func
