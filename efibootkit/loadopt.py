"""EFI load options: building, inspecting and their optional arguments."""

from __future__ import annotations

import struct
from pathlib import Path

from .ucs2 import ucs2_size, ucs2_to_utf8, utf8_len, utf8_to_ucs2

_HEADER = struct.Struct("<IH")
_PATH_LENGTH_OFFSET = 4
_DESCRIPTION_LIMIT = 1024
_END_TYPE = 0x7F
_END_ENTIRE = 0xFF


class LoadOptionError(ValueError):
    """A load option or its device path is malformed."""


def _device_path_size(data: bytes, limit: int) -> int:
    """Size of the device path at the start of *data*, up to its end node."""
    limit = min(limit, len(data))
    offset = 0
    while True:
        if offset + 4 > limit:
            raise LoadOptionError("device path node runs past the end")
        node_type, subtype, length = struct.unpack_from("<BBH", data, offset)
        if length < 4 or offset + length > limit:
            raise LoadOptionError("device path node has an invalid length")
        offset += length
        if node_type == _END_TYPE and subtype == _END_ENTIRE:
            return offset


def _is_valid_device_path(data: bytes, limit: int) -> bool:
    try:
        _device_path_size(data, limit)
    except LoadOptionError:
        return False
    return True


def _to_utf8(text: str | bytes) -> bytes:
    if isinstance(text, str):
        text = text.encode("utf-8")
    return bytes(text)


def create_load_option(
    attributes: int,
    device_path: bytes,
    description: str | bytes,
    optional_data: bytes = b"",
) -> bytes:
    """Build the binary form of a load option."""
    device_path = bytes(device_path)
    optional_data = bytes(optional_data)
    utf8 = _to_utf8(description)
    if not device_path:
        raise LoadOptionError("a device path is required")
    if _device_path_size(device_path, len(device_path)) != len(device_path):
        raise LoadOptionError("device path size does not match its contents")
    if utf8_len(utf8) > utf8_len(utf8, _DESCRIPTION_LIMIT):
        raise LoadOptionError("description is too long")

    desc_len = utf8_len(utf8, _DESCRIPTION_LIMIT) * 2 + 2
    encoded = utf8_to_ucs2(utf8, terminate=True)[:desc_len].ljust(desc_len, b"\0")
    return (
        _HEADER.pack(attributes & 0xFFFFFFFF, len(device_path))
        + encoded
        + device_path
        + optional_data
    )


class LoadOption:
    """A load option held in its binary form."""

    def __init__(self, data: bytes) -> None:
        self._data = bytearray(data)

    @classmethod
    def from_bytes(cls, data: bytes) -> "LoadOption":
        if len(data) < _HEADER.size:
            raise LoadOptionError("load option is too small for its header")
        return cls(data)

    def __bytes__(self) -> bytes:
        return bytes(self._data)

    @property
    def attributes(self) -> int:
        return _HEADER.unpack_from(self._data)[0]

    @attributes.setter
    def attributes(self, value: int) -> None:
        struct.pack_into("<I", self._data, 0, value & 0xFFFFFFFF)

    @property
    def file_path_list_length(self) -> int:
        return _HEADER.unpack_from(self._data)[1]

    @property
    def _description_bytes(self) -> bytes:
        return bytes(self._data[_HEADER.size:])

    def optional_data_size(self) -> int:
        """Number of optional data bytes; raises LoadOptionError if malformed."""
        size = len(self._data)
        path_len = self.file_path_list_length
        remaining = size - _HEADER.size
        if remaining < path_len:
            raise LoadOptionError(
                f"load option size is too small for path ({size}/{path_len})"
            )
        remaining -= path_len
        desc_size = ucs2_size(self._description_bytes, remaining)
        remaining -= desc_size
        if remaining < 0:
            raise LoadOptionError(f"leftover size is negative ({remaining})")

        path = bytes(self._data[_HEADER.size + desc_size:])
        if not _is_valid_device_path(path, path_len):
            raise LoadOptionError("efi device path is not valid")
        total = 0
        while total < path_len:
            total += _device_path_size(path[total:], path_len - total)
        if total != path_len:
            raise LoadOptionError(
                f"size does not match file path size ({total}/{path_len})"
            )
        return remaining

    def is_valid(self) -> bool:
        try:
            self.optional_data_size()
        except LoadOptionError:
            return False
        return True

    def set_attributes(self, attr: int) -> None:
        self.attributes = self.attributes | (attr & 0xFFFF)

    def clear_attributes(self, attr: int) -> None:
        self.attributes = self.attributes & ~(attr & 0xFFFF)

    def path_length(self, limit: int = -1) -> int:
        """Length of the file path list, or 0 if it cannot fit in *limit* bytes."""
        length = self.file_path_list_length
        if limit >= 0:
            if length > limit:
                return 0
            if limit - _PATH_LENGTH_OFFSET < length:
                return 0
        return length

    def path(self) -> bytes | None:
        """The device path list, or None if it is missing or invalid."""
        left = len(self._data)
        if left <= _HEADER.size:
            return None
        left -= _HEADER.size
        desc_size = ucs2_size(self._description_bytes, left)
        if desc_size >= left:
            return None
        left -= desc_size
        path_len = self.file_path_list_length
        if left < path_len:
            return None
        start = _HEADER.size + desc_size
        path = bytes(self._data[start:start + path_len])
        if not _is_valid_device_path(path, path_len):
            return None
        return path

    def description(self) -> str:
        return ucs2_to_utf8(self._description_bytes).decode("utf-8", "surrogatepass")

    def optional_data(self) -> bytes:
        """The optional data following the path; raises LoadOptionError if out of bounds."""
        size = len(self._data)
        offset = _HEADER.size
        if offset > size:
            raise LoadOptionError("load option is too small for its header")
        desc_size = ucs2_size(self._description_bytes, size - offset)
        path_len = self.file_path_list_length
        if path_len > size or desc_size > size or size - desc_size < path_len:
            raise LoadOptionError("load option fields exceed its size")
        offset += desc_size + path_len
        if offset > size:
            raise LoadOptionError("load option fields exceed its size")
        return bytes(self._data[offset:])


def args_from_file(filename: str | Path) -> bytes:
    """Read optional data for a load option from a file."""
    return Path(filename).read_bytes()


def args_as_utf8(text: str | bytes) -> bytes:
    """Optional data as UTF-8, up to the first NUL and without a terminator."""
    return _to_utf8(text).split(b"\0", 1)[0]


def args_as_ucs2(text: str | bytes) -> bytes:
    """Optional data as unterminated little-endian UCS-2."""
    return utf8_to_ucs2(_to_utf8(text), terminate=False)