"""Keyword decoding: turns one ``key`` or ``key=value`` token into a Keyword."""

import logging
import os
from pathlib import Path
from typing import Any, Callable

from ..core.decoders import decimal_from_bytes, duration_from_bytes, hex_from_bytes, octal_digit
from ..core.errors import ParserError, show_bytes
from ..core.models import Device, DeviceFormat, FileMode, FileType, Keyword, Perms

logger = logging.getLogger(__name__)


def _decode_u64(value: bytes) -> int:
    return decimal_from_bytes(value, bits=64)


def _decode_path(value: bytes) -> Path:
    return Path(os.fsdecode(value))


def _decode_raw(value: bytes) -> bytes:
    return bytes(value)


def _digest(length: int) -> Callable[[bytes], bytes]:
    def decode(value: bytes) -> bytes:
        return hex_from_bytes(value, length)

    return decode


def decode_file_type(value: bytes) -> FileType:
    """Decode a ``type`` value.

    Raises:
        ParserError: If the name is not one of block, char, dir, fifo, file,
            link or socket
    """
    file_type = FileType.from_bytes(value)
    if file_type is None:
        known = ", ".join(member.value for member in FileType)
        raise ParserError(
            f"unrecognized file type {show_bytes(value)} (expected one of: {known})",
            token=value,
        )
    return file_type


def decode_mode(value: bytes) -> FileMode:
    """Decode a ``mode`` value from exactly three octal digits.

    Symbolic modes (``u=rwx,go=rx``) are not supported and are rejected.

    Raises:
        ParserError: If the value is not three octal digits
    """
    if len(value) != 3:
        raise ParserError(
            f"mode {show_bytes(value)} must be exactly 3 octal digits "
            "(symbolic modes are not supported)",
            token=value,
        )
    sets = []
    for offset, byte in enumerate(value):
        digit = octal_digit(byte)
        if digit is None:
            raise ParserError(
                f"invalid octal digit {show_bytes(bytes([byte]))} at offset {offset} "
                f"in mode {show_bytes(value)}",
                token=value,
                offset=offset,
            )
        sets.append(Perms(digit))
    return FileMode(*sets)


def decode_device(value: bytes, strict: bool = False) -> Device:
    """Decode a ``device``/``resdevice`` value: ``format,major,minor[,subunit]``.

    Args:
        value: The raw value after ``=``
        strict: Reject format names outside the known list instead of
            returning ``DeviceFormat.OTHER``

    Raises:
        ParserError: If the format, major or minor field is missing, or
            (in strict mode) the format is unrecognized
    """
    parts = value.split(b",", 3)
    for idx, name in enumerate(("format", "major", "minor")):
        if len(parts) <= idx or not parts[idx]:
            raise ParserError(
                f"device {show_bytes(value)} is missing the {name} field",
                token=value,
            )

    format_name = parts[0]
    device_format = DeviceFormat.from_bytes(format_name)
    if device_format is None:
        if strict:
            raise ParserError(
                f"unrecognized device format {show_bytes(format_name)} "
                f"in device {show_bytes(value)}",
                token=value,
            )
        logger.debug(f"Unrecognized device format {format_name!r}; keeping as OTHER")
        device_format = DeviceFormat.OTHER

    return Device(
        format=device_format,
        major=parts[1],
        minor=parts[2],
        subunit=parts[3] if len(parts) > 3 else None,
        format_name=format_name,
    )


# Marker keywords carry no value; they always set their field to True.
_MARKERS: dict[bytes, str] = {
    b"ignore": "ignore",
    b"nochange": "no_change",
    b"optional": "optional",
}

# key -> (Params field, value decoder)
_VALUE_KEYWORDS: dict[bytes, tuple[str, Callable[[bytes], Any]]] = {
    b"cksum": ("checksum", _decode_u64),
    b"contents": ("contents", _decode_path),
    b"flags": ("flags", _decode_raw),
    b"gid": ("gid", _decode_u64),
    b"gname": ("gname", _decode_raw),
    b"inode": ("inode", _decode_u64),
    b"link": ("link", _decode_path),
    b"md5": ("md5", _digest(16)),
    b"md5digest": ("md5", _digest(16)),
    b"mode": ("mode", decode_mode),
    b"nlink": ("nlink", _decode_u64),
    b"rmd160": ("rmd160", _digest(20)),
    b"rmd160digest": ("rmd160", _digest(20)),
    b"ripemd160digest": ("rmd160", _digest(20)),
    b"sha1": ("sha1", _digest(20)),
    b"sha1digest": ("sha1", _digest(20)),
    b"sha256": ("sha256", _digest(32)),
    b"sha256digest": ("sha256", _digest(32)),
    b"sha384": ("sha384", _digest(48)),
    b"sha384digest": ("sha384", _digest(48)),
    b"sha512": ("sha512", _digest(64)),
    b"sha512digest": ("sha512", _digest(64)),
    b"size": ("size", _decode_u64),
    b"time": ("time", duration_from_bytes),
    b"type": ("file_type", decode_file_type),
    b"uid": ("uid", _decode_u64),
    b"uname": ("uname", _decode_raw),
}

# Device keywords take the strict flag, so they are dispatched separately.
_DEVICE_KEYWORDS: dict[bytes, str] = {
    b"device": "device",
    b"resdevice": "resident_device",
}

KNOWN_KEYWORDS = frozenset(_MARKERS) | frozenset(_VALUE_KEYWORDS) | frozenset(_DEVICE_KEYWORDS)


def decode_keyword(token: bytes, strict_device_format: bool = False) -> Keyword:
    """Decode one keyword token such as ``size=8602`` or ``ignore``.

    Args:
        token: A single whitespace-delimited token
        strict_device_format: Passed through to :func:`decode_device`

    Returns:
        Keyword naming the ``Params`` field to set and its decoded value

    Raises:
        ParserError: If the key is unknown, a required value is missing, or
            the value fails to decode. The message names the key and token.
    """
    key, sep, value = token.partition(b"=")

    if key in _MARKERS:
        return Keyword(_MARKERS[key], True)

    if key in _DEVICE_KEYWORDS:
        field_name = _DEVICE_KEYWORDS[key]

        def decoder(raw: bytes) -> Device:
            return decode_device(raw, strict=strict_device_format)

    elif key in _VALUE_KEYWORDS:
        field_name, decoder = _VALUE_KEYWORDS[key]
    else:
        raise ParserError(
            f"unrecognized keyword {show_bytes(key)} in {show_bytes(token)}",
            token=token,
        )

    if not sep or not value:
        raise ParserError(
            f"keyword {show_bytes(key)} requires a value, found {show_bytes(token)}",
            token=token,
        )

    try:
        return Keyword(field_name, decoder(value))
    except ParserError as e:
        raise ParserError(
            f"invalid value for keyword {show_bytes(key)}: {e.message}",
            token=token,
            offset=None if e.offset is None else e.offset + len(key) + 1,
        ) from e
