"""Recognising virtio block devices."""

from __future__ import annotations

import re

from .model import DevFlags, DevProbe, Device, DeviceParseError, InterfaceType

_VIRTIO = re.compile(r"virtio[+-]?(?:0[xX])?[0-9a-fA-F]+")


def parse_virtblk(dev: Device, path: str, root: str) -> int:
    """Probe for a ``virtioN/`` segment; returns the characters consumed.

    Returns 0 if *path* is not a virtio device and raises
    DeviceParseError if the number is not followed by a slash.
    """
    match = _VIRTIO.match(path)
    if not match:
        return 0
    dev.interface_type = InterfaceType.virtblk
    if not path.startswith("/", match.end()):
        raise DeviceParseError(f"could not parse virtio segment in {path!r}")
    return match.end() + 1


VIRTBLK_PROBE = DevProbe(
    name="virtio block",
    iftypes=(InterfaceType.virtblk,),
    parse=parse_virtblk,
    flags=DevFlags.PROVIDES_HD,
)