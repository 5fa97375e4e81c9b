"""Recognising NVDIMM-P (pmem / btt) block devices."""

from __future__ import annotations

import os
import re
import uuid

from .guidtable import parse_guid
from .model import DevFlags, DevProbe, Device, DeviceParseError, InterfaceType
from .sysfs import Sysfs

_PMEM_LINK = re.compile(
    r"\.\./\.\./devices/LNXSYSTM:[0-9a-fA-F]+/LNXSYBUS:[0-9a-fA-F]+/"
    r"ACPI[0-9a-fA-F]+:[0-9a-fA-F]+/ndbus[+-]?\d+/region[+-]?\d+/"
    r"btt[+-]?\d+\.[+-]?\d+/"
)
_SWIZZLE_ENV = "LIBEFIBOOT_SWIZZLE_PMEM_UUID"


def _read_text(sysfs: Sysfs, relative: str) -> str:
    try:
        data = sysfs.read_file(relative)
    except OSError as exc:
        raise DeviceParseError(f"could not read /sys/{relative}") from exc
    if not data:
        raise DeviceParseError(f"/sys/{relative} is empty")
    return data.decode("ascii", "replace")


def _read_guid(sysfs: Sysfs, relative: str) -> uuid.UUID:
    words = _read_text(sysfs, relative).split()
    if not words:
        raise DeviceParseError(f"no uuid in /sys/{relative}")
    try:
        return parse_guid(words[0])
    except ValueError as exc:
        raise DeviceParseError(f"could not parse uuid in /sys/{relative}") from exc


def _swizzle(guid: uuid.UUID) -> uuid.UUID:
    """Reinterpret a mixed-endian GUID's text byte order as its memory layout."""
    return uuid.UUID(bytes_le=guid.bytes)


def parse_pmem(dev: Device, path: str, root: str) -> int:
    """Probe for an nd_pmem device; returns the characters of *path* consumed.

    Returns 0 for devices that are not pmem, and raises DeviceParseError
    when the namespace or its labels cannot be read.
    """
    if dev.driver != "nd_pmem":
        return 0

    match = _PMEM_LINK.match(path)
    if not match:
        return 0

    sysfs = dev.sysfs
    words = _read_text(sysfs, f"class/block/{dev.disk_name}/device/namespace").split()
    if not words:
        raise DeviceParseError(f"no nvdimm namespace for {dev.disk_name}")
    namespace = words[0]

    namespace_label = _read_guid(sysfs, f"bus/nd/devices/{namespace}/uuid")
    nvdimm_label = _read_guid(sysfs, f"class/block/{dev.disk_name}/device/uuid")

    # The binary encoding of NVDIMM labels is unclear; by default they stay
    # in EFI's mixed-endian GUID layout unless swizzling is requested.
    if os.environ.get(_SWIZZLE_ENV) is not None:
        namespace_label = _swizzle(namespace_label)
        nvdimm_label = _swizzle(nvdimm_label)

    dev.nvdimm_info.namespace_label = namespace_label
    dev.nvdimm_info.nvdimm_label = nvdimm_label
    dev.interface_type = InterfaceType.nd_pmem
    return match.end()


PMEM_PROBE = DevProbe(
    name="pmem",
    iftypes=(InterfaceType.nd_pmem,),
    parse=parse_pmem,
    flags=DevFlags.PROVIDES_ROOT | DevFlags.PROVIDES_HD,
)