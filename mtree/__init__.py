"""mtree - streaming parser for mtree(5) filesystem manifests."""

from .core import (
    Device,
    DeviceFormat,
    Entry,
    FileMode,
    FileType,
    Keyword,
    MTreeError,
    Params,
    ParserError,
    Perms,
    Timestamp,
)
from .config import MTreeConfig
from .reader import MTree, ParseResult, open_manifest

__all__ = [
    "MTree",
    "ParseResult",
    "open_manifest",
    "MTreeConfig",
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
