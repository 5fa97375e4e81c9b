import os

import pytest

from efibootkit.device import find_parent_devpath, get_device, probe_device
from efibootkit.model import DevFlags, Device, DeviceParseError, InterfaceType
from efibootkit.sysfs import Sysfs

VIRTIO_LINK = "../../devices/pci0000:00/0000:00:07.0/virtio2/block/vda/vda1"
SOC_LINK = (
    "../../devices/platform/soc/1a400000.sata/ata1/host0/"
    "target0:0:0/0:0:0:0/block/sda/sda1"
)


def _link(path, target):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.symlink_to(target)


def _write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)


def test_find_parent_devpath(tmp_path):
    _link(
        tmp_path / "class/block/sda1",
        "../../devices/pci0000:00/0000:00:17.0/ata2/host1/"
        "target1:0:0/1:0:0:0/block/sda/sda1",
    )
    assert find_parent_devpath("/dev/sda1", Sysfs(tmp_path)) == "/dev/sda"


def test_find_parent_devpath_needs_slash(tmp_path):
    with pytest.raises(DeviceParseError):
        find_parent_devpath("sda1", Sysfs(tmp_path))


def test_find_parent_devpath_short_link(tmp_path):
    _link(tmp_path / "class/block/sda1", "block/sda1")
    with pytest.raises(DeviceParseError):
        find_parent_devpath("/dev/sda1", Sysfs(tmp_path))


def test_find_parent_devpath_missing(tmp_path):
    with pytest.raises(DeviceParseError):
        find_parent_devpath("/dev/sdz1", Sysfs(tmp_path))


def test_probe_soc_sata(tmp_path):
    (tmp_path / "class/ata_device/dev1.0").mkdir(parents=True)
    _write(tmp_path / "class/ata_port/ata1/port_no", "1\n")
    dev = Device(link=SOC_LINK, disk_name="sda", sysfs=Sysfs(tmp_path))
    probe_device(dev)
    assert [probe.name for probe in dev.probes] == ["soc_root", "sata"]
    assert dev.interface_type == InterfaceType.sata
    assert dev.sata_info.ata_port == 0
    assert dev.flags & DevFlags.PROVIDES_ROOT
    assert dev.flags & DevFlags.PROVIDES_HD


def test_probe_skips_unknown_segments(tmp_path):
    dev = Device(link=VIRTIO_LINK, disk_name="vda", sysfs=Sysfs(tmp_path))
    probe_device(dev)
    assert [probe.name for probe in dev.probes] == ["pci", "virtio block"]
    assert dev.flags & DevFlags.ABBREV_ONLY
    assert dev.interface_type == InterfaceType.virtblk
    assert dev.pci_devs[0].device == 7
    assert dev.pci_devs[0].driverlink is None


def test_probe_unknown_storage_interface(tmp_path):
    dev = Device(link="0000:00:07.0/block/", sysfs=Sysfs(tmp_path))
    with pytest.raises(DeviceParseError, match="unknown storage interface"):
        probe_device(dev)


def test_probe_unparseable_segment(tmp_path):
    dev = Device(link="../", sysfs=Sysfs(tmp_path))
    with pytest.raises(DeviceParseError, match="Cannot parse"):
        probe_device(dev)


def test_probe_segment_without_slash(tmp_path):
    dev = Device(link="garbage", sysfs=Sysfs(tmp_path))
    with pytest.raises(DeviceParseError):
        probe_device(dev)


@pytest.fixture
def virtio_tree(tmp_path):
    disk = tmp_path / "disk.img"
    disk.write_bytes(b"\0" * 16)
    info = os.stat(disk)
    sys_root = tmp_path / "sys"
    _link(sys_root / f"dev/block/{os.major(info.st_dev)}:{os.minor(info.st_dev)}", VIRTIO_LINK)
    _write(
        sys_root / "devices/pci0000:00/0000:00:07.0/virtio2/block/vda/vda1/partition",
        "1\n",
    )
    (sys_root / "devices/virtio2").mkdir(parents=True)
    (sys_root / "bus/virtio/drivers/virtio_blk").mkdir(parents=True)
    _link(sys_root / "devices/virtio2/driver", "../../bus/virtio/drivers/virtio_blk")
    _link(sys_root / "block/vda/device", "../../devices/virtio2")
    return disk, Sysfs(sys_root)


def test_get_device_virtio(virtio_tree):
    disk, sysfs = virtio_tree
    dev = get_device(disk, -1, sysfs)
    assert dev.link == VIRTIO_LINK
    assert dev.part == 1
    assert dev.disk_name == "vda"
    assert dev.part_name == "vda1"
    assert dev.device == "../../devices/virtio2"
    assert dev.driver == "virtio_blk"
    assert dev.interface_type == InterfaceType.virtblk
    assert [probe.name for probe in dev.probes] == ["pci", "virtio block"]


def test_get_device_explicit_partition(virtio_tree):
    disk, sysfs = virtio_tree
    dev = get_device(disk, 0, sysfs)
    assert dev.part == 0
    assert dev.part_name is None
    assert dev.disk_name == "vda"


def test_get_device_rejects_directory(tmp_path):
    with pytest.raises(DeviceParseError):
        get_device(tmp_path, -1, Sysfs(tmp_path / "sys"))


def test_get_device_missing_link(tmp_path):
    disk = tmp_path / "disk.img"
    disk.write_bytes(b"\0")
    with pytest.raises(DeviceParseError, match="readlink"):
        get_device(disk, -1, Sysfs(tmp_path / "sys"))