"""Line classification for mtree manifests.

Each manifest line is one of:

- blank (no tokens)
- a comment (first token starts with ``#``)
- ``..``, which moves the current directory up one level
- a directive (``/set`` or ``/unset``) followed by keywords
- a full path entry (first token contains a ``/``)
- a relative entry (any other first token)

Entries and directives are followed by keyword tokens, which are decoded
here so that a line with a bad keyword fails as a whole.
"""

from dataclasses import dataclass, field
from enum import Enum

from ..core.errors import ParserError, show_bytes
from ..core.models import Keyword
from .keywords import decode_keyword


class LineKind(Enum):
    BLANK = "blank"
    COMMENT = "comment"
    DIRECTIVE = "directive"
    DOTDOT = "dotdot"
    FULL = "full"
    RELATIVE = "relative"


class Directive(Enum):
    SET = "set"
    UNSET = "unset"


_DIRECTIVES = {b"set": Directive.SET, b"unset": Directive.UNSET}


@dataclass(frozen=True)
class MTreeLine:
    """A classified manifest line.

    ``raw`` holds the comment text for COMMENT lines and the path bytes for
    FULL and RELATIVE lines. ``directive`` is only set for DIRECTIVE lines.
    """

    kind: LineKind
    raw: bytes = b""
    directive: Directive | None = None
    keywords: list[Keyword] = field(default_factory=list)


BLANK_LINE = MTreeLine(LineKind.BLANK)
DOTDOT_LINE = MTreeLine(LineKind.DOTDOT)


def tokenize(line: bytes) -> list[bytes]:
    """Split on single spaces, dropping empty tokens."""
    return [token for token in line.split(b" ") if token]


def classify_line(line: bytes, strict_device_format: bool = False) -> MTreeLine:
    """Classify one manifest line and decode its keywords.

    Args:
        line: Raw line with the trailing newline already removed
        strict_device_format: Reject unknown device formats in keywords

    Returns:
        The classified line

    Raises:
        ParserError: If any keyword fails to decode, or a directive name is
            neither ``set`` nor ``unset``
    """
    tokens = tokenize(line)
    if not tokens:
        return BLANK_LINE

    first = tokens[0]
    if first.startswith(b"#"):
        return MTreeLine(LineKind.COMMENT, raw=line)
    if first == b"..":
        return DOTDOT_LINE

    keywords = [
        decode_keyword(token, strict_device_format=strict_device_format)
        for token in tokens[1:]
    ]

    if first.startswith(b"/"):
        name = first[1:]
        directive = _DIRECTIVES.get(name)
        if directive is None:
            raise ParserError(
                f"unrecognized directive {show_bytes(first)} (expected /set or /unset)",
                token=first,
            )
        return MTreeLine(LineKind.DIRECTIVE, raw=first, directive=directive, keywords=keywords)

    if b"/" in first:
        return MTreeLine(LineKind.FULL, raw=first, keywords=keywords)
    return MTreeLine(LineKind.RELATIVE, raw=first, keywords=keywords)
