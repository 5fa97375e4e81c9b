"""Recognising SATA devices from their sysfs device links."""

from __future__ import annotations

import re

from .model import DevFlags, DevProbe, Device, DeviceParseError, InterfaceType

_ATA = re.compile(r"ata(\d+)/")
_HOST = re.compile(r"host(\d+)/")
_TARGET = re.compile(r"target(\d+):(\d+):(\d+)/")
_HCTL = re.compile(r"(\d+):(\d+):(\d+):(\d+)/")
_ATA_DEVICE = re.compile(r"dev([+-]?\d+)\.([+-]?\d+)(?:\.([+-]?\d+))?")
_PORT_NO = re.compile(rb"\s*([+-]?\d+)")

# The kernel reports devM.N rather than devM.N.O when there is no port
# multiplier; the specification spells that as this sentinel.
_NO_PMP = 0xFFFF
_MAX_PMP = 0x7FFF


def sata_port_info(dev: Device, print_id: int) -> None:
    """Fill in the ATA port, port multiplier and device number of *dev*.

    Raises DeviceParseError when sysfs does not describe the port.
    """
    sysfs = dev.sysfs
    try:
        names = sysfs.listdir("class/ata_device/")
    except OSError as exc:
        raise DeviceParseError("could not open /sys/class/ata_device/") from exc

    for name in names:
        match = _ATA_DEVICE.match(name)
        if not match:
            raise DeviceParseError(f"could not parse ata device {name!r}")
        found_print_id = int(match[1]) & 0xFFFFFFFF
        if found_print_id != print_id:
            continue
        dev.sata_info.ata_devno = 0
        if match[3] is not None:
            found_pmp = int(match[2]) & 0xFFFFFFFF
            if found_pmp > _MAX_PMP:
                raise DeviceParseError(f"invalid port multiplier in {name!r}")
            dev.sata_info.ata_pmp = found_pmp
        else:
            dev.sata_info.ata_pmp = _NO_PMP
        break

    try:
        data = sysfs.read_file(f"class/ata_port/ata{print_id}/port_no")
    except OSError as exc:
        raise DeviceParseError(f"could not read port number of ata{print_id}") from exc
    match = _PORT_NO.match(data)
    if not data or not match:
        raise DeviceParseError(f"could not parse port number of ata{print_id}")
    port = int(match[1])
    # libata numbers ports from 1; the specification numbers them from 0.
    if port == 0:
        raise DeviceParseError(f"invalid port number 0 for ata{print_id}")
    dev.sata_info.ata_port = port - 1


def parse_sata(dev: Device, path: str, root: str) -> int:
    """Probe for a SATA disk; returns the characters of *path* consumed.

    Returns 0 when *path* does not start with an ``ataN/`` segment and
    raises DeviceParseError when the rest of the link is malformed.
    """
    match = _ATA.match(path)
    if not match:
        return 0
    print_id = int(match[1])
    pos = match.end()

    match = _HOST.match(path, pos)
    if not match:
        raise DeviceParseError(f"no scsi host in {path!r}")
    scsi_bus = int(match[1])
    pos = match.end()

    match = _TARGET.match(path, pos)
    if not match:
        raise DeviceParseError(f"no scsi target in {path!r}")
    scsi_device, scsi_target, scsi_lun = (int(value) for value in match.groups())
    pos = match.end()

    match = _HCTL.match(path, pos)
    if not match:
        raise DeviceParseError(f"no scsi address in {path!r}")
    pos = match.end()

    sata_port_info(dev, print_id)

    info = dev.sata_info
    info.scsi_bus = scsi_bus
    info.scsi_device = scsi_device
    info.scsi_target = scsi_target
    info.scsi_lun = scsi_lun

    if dev.interface_type == InterfaceType.unknown:
        dev.interface_type = InterfaceType.sata
    return pos


SATA_PROBE = DevProbe(
    name="sata",
    iftypes=(InterfaceType.sata,),
    parse=parse_sata,
    flags=DevFlags.PROVIDES_HD,
)