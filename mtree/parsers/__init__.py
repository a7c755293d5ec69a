"""Keyword decoding and line classification for mtree manifests."""

from .keywords import KNOWN_KEYWORDS, decode_device, decode_file_type, decode_keyword, decode_mode
from .lines import Directive, LineKind, MTreeLine, classify_line, tokenize

__all__ = [
    "KNOWN_KEYWORDS",
    "decode_device",
    "decode_file_type",
    "decode_keyword",
    "decode_mode",
    "Directive",
    "LineKind",
    "MTreeLine",
    "classify_line",
    "tokenize",
]
