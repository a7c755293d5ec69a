"""Exception types raised while reading mtree manifests."""


class MTreeError(Exception):
    """Base class for all errors raised by the mtree package."""


class ParserError(MTreeError, ValueError):
    """A manifest line (or one keyword on it) could not be decoded.

    The message is meant for humans: it names the offending token and,
    where it applies, the byte offset of the bad character. The resolver
    attaches the line number and raw line once the failure is known to
    belong to a specific line.
    """

    def __init__(
        self,
        message: str,
        token: bytes | None = None,
        offset: int | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.token = token
        self.offset = offset
        self.line_number: int | None = None
        self.line: bytes | None = None

    def at_line(self, line_number: int, line: bytes) -> "ParserError":
        """Record where in the manifest this error occurred and return self."""
        self.line_number = line_number
        self.line = line
        return self

    def __str__(self) -> str:
        if self.line_number is None:
            return self.message
        return f"line {self.line_number}: {self.message}"


def show_bytes(data: bytes) -> str:
    """Render raw manifest bytes for an error message."""
    return repr(data.decode("utf-8", errors="backslashreplace"))
