"""Record types, errors and primitive decoders shared by the mtree parser."""

from .errors import MTreeError, ParserError
from .models import (
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

__all__ = [
    "MTreeError",
    "ParserError",
    "Device",
    "DeviceFormat",
    "Entry",
    "FileMode",
    "FileType",
    "Keyword",
    "Params",
    "Perms",
    "Timestamp",
]
