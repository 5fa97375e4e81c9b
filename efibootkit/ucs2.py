"""UCS-2 and UTF-8 helpers for EFI strings (UCS-2 is little endian)."""

from __future__ import annotations

import struct
from itertools import islice, takewhile
from typing import Iterator


def _units(data: bytes, limit: int) -> Iterator[int]:
    """Yield the 16-bit units of *data*, at most *limit* of them if limit >= 0."""
    data = bytes(data)
    end = len(data) - len(data) % 2
    if limit >= 0:
        end = min(end, limit * 2)
    return (unit for (unit,) in struct.iter_unpack("<H", data[:end]))


def ucs2_len(data: bytes, limit: int = -1) -> int:
    """Number of UCS-2 characters before the NUL terminator.

    At most *limit* characters are examined when *limit* is non-negative.
    """
    return sum(1 for _ in takewhile(bool, _units(data, limit)))


def ucs2_size(data: bytes, limit: int = -1) -> int:
    """Bytes taken by the UCS-2 string including its terminator, capped at *limit*."""
    size = ucs2_len(data, limit) * 2 + 2
    if limit > 0 and size > limit:
        return limit
    return size


def utf8_len(data: bytes, limit: int = -1) -> int:
    """Number of UTF-8 characters before NUL, looking at most at *limit* bytes.

    Only sequences of up to three bytes are recognised.
    """
    data = bytes(data)
    bound = len(data) if limit < 0 else min(limit, len(data))
    position = count = 0
    while position < bound and data[position]:
        lead = data[position]
        if lead & 0xE0 == 0xC0:
            position += 1
        elif lead & 0xF0 == 0xE0:
            position += 2
        position += 1
        count += 1
    return count


def utf8_size(data: bytes, limit: int = -1) -> int:
    """Character count of the UTF-8 string plus one for NUL, bounded by *limit*."""
    length = utf8_len(data, limit)
    if length < (limit if limit >= 0 else length + 1):
        length += 1
    return length


def _encode_unit(unit: int) -> bytes:
    if unit <= 0x7F:
        return bytes([unit])
    if unit <= 0x7FF:
        return bytes([0xC0 | (unit >> 6) & 0x1F, 0x80 | unit & 0x3F])
    return bytes([0xE0 | (unit >> 12) & 0x0F, 0x80 | (unit >> 6) & 0x3F, 0x80 | unit & 0x3F])


def ucs2_to_utf8(data: bytes, limit: int = -1) -> bytes:
    """Convert a UCS-2 string to UTF-8 bytes (without a terminator).

    At most *limit* characters are converted when *limit* is non-negative.
    """
    if limit < 0:
        limit = ucs2_len(data)
    chars = takewhile(bool, islice(_units(data, -1), limit))
    return b"".join(_encode_unit(unit) for unit in chars)


def _byte_at(data: bytes, index: int) -> int:
    return data[index] if index < len(data) else 0


def utf8_to_ucs2(utf8: bytes | str, terminate: bool = False) -> bytes:
    """Convert UTF-8 (up to the first NUL) to little-endian UCS-2.

    A terminator is appended when *terminate* is true and the string is
    not empty; an empty string always yields empty output.
    """
    if isinstance(utf8, str):
        utf8 = utf8.encode("utf-8")
    data = bytes(utf8).split(b"\0", 1)[0]
    units: list[int] = []
    position = 0
    while position < len(data):
        lead = data[position]
        if lead & 0xF0 == 0xE0:
            value = ((lead & 0x0F) << 12
                     | (_byte_at(data, position + 1) & 0x3F) << 6
                     | (_byte_at(data, position + 2) & 0x3F))
            position += 3
        elif lead & 0xE0 == 0xC0:
            value = (lead & 0x1F) << 6 | (_byte_at(data, position + 1) & 0x3F)
            position += 2
        else:
            value = lead & 0x7F
            position += 1
        units.append(value & 0xFFFF)
    if not units:
        return b""
    if terminate:
        units.append(0)
    return struct.pack(f"<{len(units)}H", *units)