"""Recognising SAS devices, directly attached or behind a port expander."""

from __future__ import annotations

import re
from typing import Optional

from .model import DevFlags, DevProbe, Device, DeviceParseError, InterfaceType, ScsiInfo
from .scsi import parse_scsi_link
from .sysfs import Sysfs

_HEX = re.compile(rb"\s*(?:0[xX])?([0-9a-fA-F]+)")


def _read_hex(sysfs: Sysfs, relative: str) -> Optional[int]:
    """Read a hexadecimal number from a sysfs file, or None."""
    try:
        data = sysfs.read_file(relative)
    except OSError:
        return None
    match = _HEX.match(data)
    if not match:
        return None
    return int(match[1], 16) & 0xFFFFFFFFFFFFFFFF


def _expander_address_path(host: int, local_port: int, remote_port: int,
                           remote_target: int) -> str:
    end_device = f"end_device-{host}:{remote_target}:{remote_port}"
    return (
        f"class/scsi_host/host{host}/device/port-{host}:{local_port}"
        f"/expander-{host}:{remote_target}"
        f"/port-{host}:{remote_target}:{remote_port}"
        f"/{end_device}/sas_device/{end_device}/sas_address"
    )


def parse_sas(dev: Device, path: str, root: str) -> int:
    """Probe for a SAS disk; returns the characters of *path* consumed."""
    try:
        link = parse_scsi_link(path)
    except DeviceParseError:
        return 0

    sysfs = dev.sysfs
    if sysfs.exists(f"class/scsi_host/host{link.host}/host_sas_address"):
        address = _read_hex(sysfs, f"class/block/{dev.disk_name}/device/sas_address")
    elif sysfs.exists(f"class/sas_host/host{link.host}"):
        # On a port expander the address comes from the remote port.
        address = _read_hex(
            sysfs,
            _expander_address_path(
                link.host,
                link.local_port_id,
                link.remote_port_id,
                link.remote_target_id or 0,
            ),
        )
    else:
        return 0
    if address is None:
        return 0

    dev.sas_address = address
    dev.scsi_info = ScsiInfo(link.bus, link.device, link.target, link.lun)
    dev.interface_type = InterfaceType.sas
    return link.consumed


SAS_PROBE = DevProbe(
    name="sas",
    iftypes=(InterfaceType.sas,),
    parse=parse_sas,
    flags=DevFlags.PROVIDES_HD,
)