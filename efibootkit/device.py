"""Finding a block device in sysfs and working out how it is attached."""

from __future__ import annotations

import os
import re
import stat
from typing import Optional

from .model import DevFlags, DevProbe, Device, DeviceParseError, InterfaceType
from .paths import pathseg
from .pci import PCI_PROBE
from .pmem import PMEM_PROBE
from .roots import SOC_ROOT_PROBE, VIRTUAL_ROOT_PROBE
from .sas import SAS_PROBE
from .sata import SATA_PROBE
from .scsi import SCSI_PROBE
from .sysfs import Sysfs
from .virtblk import VIRTBLK_PROBE

# pmem comes before PCI so that, when it provides the root, it is found first.
DEV_PROBES: tuple[DevProbe, ...] = (
    PMEM_PROBE,
    SOC_ROOT_PROBE,
    VIRTUAL_ROOT_PROBE,
    PCI_PROBE,
    VIRTBLK_PROBE,
    SAS_PROBE,
    SATA_PROBE,
    SCSI_PROBE,
)

_PARTITION = re.compile(rb"\s*([+-]?\d+)")
_ENDS_PROBING = (DevFlags.PROVIDES_HD | DevFlags.PROVIDES_ROOT | DevFlags.ABBREV_ONLY)


def find_parent_devpath(child: str, sysfs: Optional[Sysfs] = None) -> str:
    """The /dev path of the disk that holds the partition *child*."""
    sysfs = sysfs or Sysfs()
    if "/" not in child:
        raise DeviceParseError(f"{child!r} is not a device path")
    node = child.rsplit("/", 1)[1]
    try:
        link = sysfs.readlink(f"class/block/{node}")
    except OSError as exc:
        raise DeviceParseError(f"readlink of /sys/class/block/{node} failed") from exc
    if "/" not in link:
        raise DeviceParseError(f"no parent in link {link!r}")
    head = link.rsplit("/", 1)[0]
    if "/" not in head:
        raise DeviceParseError(f"no parent in link {link!r}")
    return "/dev/" + head.rsplit("/", 1)[1]


def _at_end(rest: str) -> bool:
    return not rest or rest.startswith("block/")


def _skip_segment(rest: str) -> int:
    """Characters to skip past one unrecognised link segment and its slashes."""
    skip = 0
    first_slash = rest.find("/")
    if first_slash > 0:
        skip = first_slash + 1
    while rest.startswith("/", skip):
        skip += 1
    if skip == 0 or skip >= len(rest):
        raise DeviceParseError(f'Cannot parse device link segment "{rest}"')
    return skip


def probe_device(dev: Device) -> None:
    """Run the probes along ``dev.link``, recording what each one matched.

    Segments that no probe understands are skipped, which limits the
    device to abbreviated paths. Raises DeviceParseError when a probe
    fails or the storage interface cannot be identified.
    """
    link = dev.link
    pos = 0
    needs_root = True
    last_successful = -1
    index = 0
    while index < len(DEV_PROBES) and pos < len(link):
        probe = DEV_PROBES[index]
        if not needs_root and probe.flags & DevFlags.PROVIDES_ROOT:
            index += 1
            continue

        consumed = probe.parse(dev, link[pos:], link)
        if consumed > 0:
            dev.flags |= probe.flags
            if probe.flags & _ENDS_PROBING:
                needs_root = False
            dev.probes.append(probe)
            pos += consumed
            last_successful = index
            if _at_end(link[pos:]):
                break
            index += 1
            continue

        if index + 1 == len(DEV_PROBES) and dev.interface_type == InterfaceType.unknown:
            pos += _skip_segment(link[pos:])
            dev.flags |= DevFlags.ABBREV_ONLY
            index = last_successful
            if _at_end(link[pos:]):
                break
        index += 1

    if (
        dev.interface_type == InterfaceType.unknown
        and not dev.flags & DevFlags.ABBREV_ONLY
        and link[pos:] == "block/"
    ):
        raise DeviceParseError("unknown storage interface")


def _device_numbers(path: str | os.PathLike[str]) -> tuple[int, int]:
    try:
        info = os.stat(path)
    except OSError as exc:
        raise DeviceParseError(f"stat of {os.fspath(path)} failed") from exc
    if stat.S_ISBLK(info.st_mode):
        number = info.st_rdev
    elif stat.S_ISREG(info.st_mode):
        number = info.st_dev
    else:
        raise DeviceParseError("device is not a block device or regular file")
    return os.major(number), os.minor(number)


def _read_partition(sysfs: Sysfs, link: str) -> Optional[int]:
    try:
        data = sysfs.read_file(f"dev/block/{link}/partition")
    except OSError:
        return None
    match = _PARTITION.match(data)
    return int(match[1]) if match else None


def get_device(
    path: str | os.PathLike[str],
    partition: int = -1,
    sysfs: Optional[Sysfs] = None,
) -> Device:
    """Describe the block device holding *path* (a device node or a file).

    A *partition* of -1 means the partition number is read from sysfs.
    """
    sysfs = sysfs or Sysfs()
    dev = Device(part=partition, sysfs=sysfs)
    dev.major, dev.minor = _device_numbers(path)

    try:
        dev.link = sysfs.readlink(f"dev/block/{dev.major}:{dev.minor}")
    except OSError as exc:
        raise DeviceParseError(
            f"readlink of /sys/dev/block/{dev.major}:{dev.minor} failed"
        ) from exc

    if dev.part == -1:
        found = _read_partition(sysfs, dev.link)
        if found is not None:
            dev.part = found

    dev.set_disk_and_part_name()

    try:
        dev.device = sysfs.readlink(f"block/{dev.disk_name}/device")
    except OSError:
        dev.device = ""

    filepath = sysfs.find_device_file("driver", f"block/{dev.disk_name}")
    if filepath is not None:
        try:
            target = sysfs.readlink(filepath)
        except OSError as exc:
            raise DeviceParseError(f"readlink of /sys/{filepath} failed") from exc
        driver = pathseg(target, -1)
        if driver is None:
            raise DeviceParseError(f'could not get segment -1 of "{target}"')
        dev.driver = driver
    else:
        dev.driver = ""

    probe_device(dev)
    return dev