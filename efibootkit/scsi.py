"""Recognising SCSI devices from their sysfs device links."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from .model import (
    DevFlags,
    DevProbe,
    Device,
    DeviceParseError,
    InterfaceType,
    ScsiInfo,
)

_HOST = re.compile(r"host(\d+)/")
_PORT = re.compile(r"port-(\d+)")
_PORT_FIELD = re.compile(r":(\d+)")
_EXPANDER = re.compile(r"expander-(\d+):(\d+)/")
_EXPANDER_PORT = re.compile(r"port-(\d+):(\d+):(\d+)/")
_END_DEVICE = re.compile(r"end_device-(\d+):(\d+)(?::(\d+))?")
_TARGET = re.compile(r"target(\d+):(\d+):(\d+)/")
_HCTL = re.compile(r"(\d+):(\d+):(\d+):(\d+)/")
_DEVICE_HCTL = re.compile(r"\.\./\.\./\.\./(\d+):(\d+):(\d+):(\d+)")

# (first major, last major, major the disk numbering is relative to)
_SCSI_MAJORS = ((65, 71, 64), (128, 135, 128))


@dataclass(frozen=True)
class ScsiLink:
    """What was found in the SCSI part of a device link.

    ``remote_target_id`` is None unless the device sits behind a port
    expander.
    """

    consumed: int
    host: int
    bus: int
    device: int
    target: int
    lun: int
    local_port_id: int = 0
    remote_port_id: int = 0
    remote_target_id: Optional[int] = None


def parse_scsi_link(path: str) -> ScsiLink:
    """Parse ``hostN/[port-.../][expander-.../port-.../][end_device-.../]targetX:Y:Z/H:C:T:L/``.

    Raises DeviceParseError when *path* does not have that shape.
    """
    match = _HOST.match(path)
    if not match:
        raise DeviceParseError(f"no scsi host in {path!r}")
    host = int(match[1])
    pos = match.end()

    local_port_id = 0
    remote_port_id = 0
    remote_target_id: Optional[int] = None

    # port-H:P or port-H:P:R
    if "port-".startswith(path[pos:]):
        raise DeviceParseError(f"truncated scsi link {path!r}")
    match = _PORT.match(path, pos)
    if match:
        second = _PORT_FIELD.match(path, match.end())
        if not second:
            raise DeviceParseError(f"could not parse scsi port in {path!r}")
        third = _PORT_FIELD.match(path, second.end())
        if third:
            remote_port_id = int(third[1])
            pos = third.end()
        else:
            local_port_id = int(second[1])
            pos = second.end()
    if path.startswith("/", pos):
        pos += 1

    # expander-H:T/port-H:T:P/
    match = _EXPANDER.match(path, pos)
    if match:
        remote_target_id = int(match[2])
        pos = match.end()
        match = _EXPANDER_PORT.match(path, pos)
        if not match:
            raise DeviceParseError("Couldn't parse port expander port string")
        pos = match.end()

    # end_device-H:P or end_device-H:P:R
    match = _END_DEVICE.match(path, pos)
    if match:
        if match[3] is not None:
            remote_port_id = int(match[3])
        else:
            local_port_id = int(match[2])
        pos = match.end()
    if path.startswith("/", pos):
        pos += 1

    match = _TARGET.match(path, pos)
    if not match:
        raise DeviceParseError(f"no scsi target in {path!r}")
    pos = match.end()

    match = _HCTL.match(path, pos)
    if not match:
        raise DeviceParseError(f"no scsi address in {path!r}")
    bus, device, target, lun = (int(value) for value in match.groups())

    return ScsiLink(
        consumed=match.end(),
        host=host,
        bus=bus,
        device=device,
        target=target,
        lun=lun,
        local_port_id=local_port_id,
        remote_port_id=remote_port_id,
        remote_target_id=remote_target_id,
    )


def _disk_number(major: int, minor: int) -> Optional[int]:
    if major == 8:
        return minor >> 4
    for first, last, base in _SCSI_MAJORS:
        if first <= major <= last:
            return 16 * (major - base) + (minor >> 4)
    return None


def parse_scsi(dev: Device, path: str, root: str) -> int:
    """Probe for a plain SCSI disk; returns the characters of *path* consumed."""
    match = _DEVICE_HCTL.match(dev.device)
    if not match:
        return 0
    dev.scsi_info = ScsiInfo(*(int(value) for value in match.groups()))

    try:
        link = parse_scsi_link(path)
    except DeviceParseError:
        return 0
    if link.remote_target_id is not None:
        # Devices behind a port expander are not plain SCSI disks.
        return 0

    disknum = _disk_number(dev.major, dev.minor)
    if disknum is None:
        raise DeviceParseError("couldn't parse scsi major/minor")
    dev.interface_type = InterfaceType.scsi
    dev.disknum = disknum
    # SCSI disks have up to 16 partitions, four bits of the minor number.
    dev.set_part(dev.minor & 0xF)
    return link.consumed


SCSI_PROBE = DevProbe(
    name="scsi",
    iftypes=(InterfaceType.scsi,),
    parse=parse_scsi,
    flags=DevFlags.PROVIDES_HD,
)