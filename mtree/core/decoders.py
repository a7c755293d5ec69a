"""Primitive value decoders for mtree keyword values.

Every decoder works on raw ``bytes`` (manifests are not guaranteed to be
valid UTF-8) and raises :class:`ParserError` with the offset of the first
bad character rather than returning a partial value.
"""

from .errors import ParserError, show_bytes
from .models import Timestamp

U64_MAX = 2**64 - 1

_DEC_DIGITS = {ord(ch): value for value, ch in enumerate("0123456789")}

_HEX_DIGITS = {ord(ch): value for value, ch in enumerate("0123456789abcdef")}
_HEX_DIGITS.update({ord(ch): value for value, ch in enumerate("ABCDEF", start=10)})


def octal_digit(byte: int) -> int | None:
    """Decode a single octal digit character.

    Args:
        byte: Character code (an element of a ``bytes`` object)

    Returns:
        Digit value 0-7, or None if the character is not an octal digit

    Examples:
        >>> octal_digit(ord("7"))
        7
        >>> octal_digit(ord("8")) is None
        True
    """
    if 0x30 <= byte <= 0x37:
        return byte - 0x30
    return None


def decimal_from_bytes(data: bytes, bits: int = 64) -> int:
    """Decode an unsigned decimal integer that must fit in ``bits`` bits.

    Args:
        data: ASCII decimal digits, no sign and no whitespace
        bits: Width of the target unsigned integer

    Returns:
        The decoded value

    Raises:
        ParserError: On an empty input, a non-digit character (reporting its
            offset), or a value too large for the target width
    """
    if not data:
        raise ParserError("expected a decimal number, found empty text", token=data)
    limit = 2**bits - 1
    acc = 0
    for offset, byte in enumerate(data):
        digit = _DEC_DIGITS.get(byte)
        if digit is None:
            raise ParserError(
                f"invalid decimal digit {show_bytes(bytes([byte]))} at offset {offset} "
                f"in {show_bytes(data)}",
                token=data,
                offset=offset,
            )
        acc = acc * 10 + digit
        if acc > limit:
            raise ParserError(
                f"decimal value {show_bytes(data)} is too large for a {bits}-bit integer",
                token=data,
                offset=offset,
            )
    return acc


def hex_from_bytes(data: bytes, length: int) -> bytes:
    """Decode exactly ``length`` bytes from ``2 * length`` hex characters.

    Args:
        data: Hex text, upper or lower case
        length: Number of bytes expected in the output

    Returns:
        The decoded bytes

    Raises:
        ParserError: If the text is not exactly ``2 * length`` characters
            long, or on the first non-hex character (reporting its offset)
    """
    expected = 2 * length
    if len(data) != expected:
        raise ParserError(
            f"expected {expected} hex characters, found {len(data)} in {show_bytes(data)}",
            token=data,
        )
    out = bytearray(length)
    for idx in range(length):
        high = _HEX_DIGITS.get(data[2 * idx])
        if high is None:
            raise _bad_hex(data, 2 * idx)
        low = _HEX_DIGITS.get(data[2 * idx + 1])
        if low is None:
            raise _bad_hex(data, 2 * idx + 1)
        out[idx] = high * 16 + low
    return bytes(out)


def _bad_hex(data: bytes, offset: int) -> ParserError:
    return ParserError(
        f"invalid hex digit {show_bytes(data[offset:offset + 1])} at offset {offset} "
        f"in {show_bytes(data)}",
        token=data,
        offset=offset,
    )


def duration_from_bytes(data: bytes) -> Timestamp:
    """Decode a ``seconds.nanoseconds`` timestamp.

    The fractional part is an integer count of nanoseconds, not a decimal
    fraction: ``"5.25"`` is 5 seconds and 25 nanoseconds. Nanosecond counts
    of a second or more carry into the seconds.

    Raises:
        ParserError: If the ``.`` separator or either half is missing, a half
            is not decimal, or a half overflows (u64 seconds, u32 nanoseconds)
    """
    seconds_text, sep, nanos_text = data.partition(b".")
    if not sep:
        raise ParserError(
            f"time {show_bytes(data)} is missing the '.' between seconds and nanoseconds",
            token=data,
        )
    if not seconds_text:
        raise ParserError(f"time {show_bytes(data)} is missing the seconds", token=data)
    if not nanos_text:
        raise ParserError(f"time {show_bytes(data)} is missing the nanoseconds", token=data)
    seconds = decimal_from_bytes(seconds_text, bits=64)
    nanoseconds = decimal_from_bytes(nanos_text, bits=32)

    carry, nanoseconds = divmod(nanoseconds, Timestamp.NANOS_PER_SECOND)
    seconds += carry
    if seconds > U64_MAX:
        raise ParserError(f"time {show_bytes(data)} overflows the seconds counter", token=data)
    return Timestamp(seconds, nanoseconds)
