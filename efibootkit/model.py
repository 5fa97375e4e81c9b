"""Device description built while walking a block device's sysfs link."""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field
from typing import Callable, Optional

from .paths import pathseg
from .sysfs import Sysfs


class InterfaceType(enum.IntEnum):
    """Kind of interface a device is attached through."""

    unknown = 0
    isa = enum.auto()
    acpi_root = enum.auto()
    pci_root = enum.auto()
    soc_root = enum.auto()
    virtual_root = enum.auto()
    pci = enum.auto()
    network = enum.auto()
    ata = enum.auto()
    atapi = enum.auto()
    scsi = enum.auto()
    sata = enum.auto()
    sas = enum.auto()
    usb = enum.auto()
    i1394 = enum.auto()
    fibre = enum.auto()
    i2o = enum.auto()
    md = enum.auto()
    virtblk = enum.auto()
    nvme = enum.auto()
    nd_pmem = enum.auto()
    emmc = enum.auto()


class DevFlags(enum.IntFlag):
    """What a matched probe contributes to the device path."""

    NONE = 0
    PROVIDES_ROOT = 1
    PROVIDES_HD = 2
    ABBREV_ONLY = 4


class DeviceParseError(ValueError):
    """A device or its sysfs link could not be understood."""


@dataclass
class PciDevInfo:
    domain: int
    bus: int
    device: int
    function: int
    driverlink: Optional[str] = None


@dataclass
class ScsiInfo:
    bus: int = 0
    device: int = 0
    target: int = 0
    lun: int = 0


@dataclass
class SataInfo:
    scsi_bus: int = 0
    scsi_device: int = 0
    scsi_target: int = 0
    scsi_lun: int = 0
    ata_devno: int = 0
    ata_port: int = 0
    ata_pmp: int = 0
    ata_print_id: int = 0


@dataclass
class NvdimmInfo:
    namespace_label: Optional[uuid.UUID] = None
    nvdimm_label: Optional[uuid.UUID] = None


ParseFunc = Callable[["Device", str, str], int]
CreateFunc = Callable[["Device"], bytes]
PartNameFunc = Callable[["Device"], str]


@dataclass(frozen=True)
class DevProbe:
    """A recogniser for one kind of segment in a device link.

    ``parse`` returns how many characters of the remaining link it
    consumed (0 when it does not apply) and raises DeviceParseError when
    the segment is of its kind but malformed.
    """

    name: str
    iftypes: tuple[InterfaceType, ...]
    parse: ParseFunc
    flags: DevFlags = DevFlags.NONE
    create: Optional[CreateFunc] = None
    make_part_name: Optional[PartNameFunc] = None


@dataclass
class Device:
    """A block device (or network interface) and what probing found about it."""

    interface_type: InterfaceType = InterfaceType.unknown
    flags: DevFlags = DevFlags.NONE
    link: str = ""
    device: str = ""
    driver: str = ""
    probes: list[DevProbe] = field(default_factory=list)

    major: int = 0
    minor: int = 0
    controllernum: int = 0
    disknum: int = 0
    part: int = 0
    edd10_devicenum: int = 0

    disk_name: Optional[str] = None
    part_name: Optional[str] = None

    pci_root_domain: int = 0xFFFF
    pci_root_bus: int = 0xFF
    pci_devs: list[PciDevInfo] = field(default_factory=list)

    scsi_info: ScsiInfo = field(default_factory=ScsiInfo)
    sata_info: SataInfo = field(default_factory=SataInfo)
    nvdimm_info: NvdimmInfo = field(default_factory=NvdimmInfo)
    sas_address: int = 0

    ifname: Optional[str] = None
    sysfs: Sysfs = field(default_factory=Sysfs)

    def set_part_name(self, name: str) -> None:
        """Record *name* as the partition name, if this is a partition."""
        if self.part <= 0:
            return
        self.part_name = name

    def reset_part_name(self) -> None:
        """Recompute the partition name from the disk name and number."""
        self.part_name = None
        if self.part < 1:
            return
        last = self.probes[-1] if self.probes else None
        if last is not None and last.make_part_name is not None:
            self.part_name = last.make_part_name(self)
        else:
            self.part_name = f"{self.disk_name}{self.part}"

    def set_part(self, value: int) -> None:
        """Change the partition number, refreshing the partition name."""
        if self.part == value:
            return
        self.part = value
        self.reset_part_name()

    def set_disk_and_part_name(self) -> None:
        """Derive disk and partition names from the last segments of the link."""
        link = self.link
        ultimate = pathseg(link, -1)
        penultimate = pathseg(link, -2)
        approximate = pathseg(link, -3)
        proximate = pathseg(link, -4)
        psl5 = pathseg(link, -5)

        if ultimate and penultimate and (proximate == "nvme" or approximate == "block"):
            # .../nvme/nvme0/nvme0n1/nvme0n1p1 or .../block/sda/sda1
            self.disk_name = penultimate
            self.set_part_name(ultimate)
        elif ultimate and approximate == "nvme":
            # .../nvme/nvme0/nvme0n1
            self.disk_name = ultimate
            self.set_part_name(f"{ultimate}p{self.part}")
        elif ultimate and penultimate == "block":
            # .../block/sda
            self.disk_name = ultimate
            self.set_part_name(f"{ultimate}{self.part}")
        elif ultimate and approximate == "mtd":
            # .../mtd/mtd0/mtdblock0
            self.disk_name = ultimate
        elif ultimate and (proximate == "nvme-fabrics" or approximate == "nvme-subsystem"):
            # .../nvme-fabrics/ctl/nvme0/nvme0n1 or .../nvme-subsystem/nvme-subsys0/nvme0n1
            self.disk_name = ultimate
        elif ultimate and penultimate and (
            psl5 == "nvme-fabrics" or proximate == "nvme-subsystem"
        ):
            # the same two layouts with a partition below the namespace
            self.disk_name = penultimate
            self.set_part_name(ultimate)
        else:
            raise DeviceParseError(f'Could not parse disk name:"{link}"')