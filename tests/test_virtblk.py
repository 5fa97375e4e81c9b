import pytest

from efibootkit.model import DevFlags, Device, DeviceParseError, InterfaceType
from efibootkit.virtblk import VIRTBLK_PROBE, parse_virtblk


def test_virtio_segment_is_consumed():
    dev = Device()
    path = "virtio2/block/vda/vda1"
    consumed = parse_virtblk(dev, path, path)
    assert path[consumed:] == "block/vda/vda1"
    assert dev.interface_type == InterfaceType.virtblk


def test_hex_virtio_number():
    dev = Device()
    path = "virtio1f/block/vdb"
    assert path[parse_virtblk(dev, path, path):] == "block/vdb"


def test_other_path_is_not_claimed():
    dev = Device()
    path = "ata1/host0/target0:0:0/0:0:0:0/block/sda"
    assert parse_virtblk(dev, path, path) == 0
    assert dev.interface_type == InterfaceType.unknown


def test_missing_slash_raises():
    dev = Device()
    with pytest.raises(DeviceParseError):
        parse_virtblk(dev, "virtio2", "virtio2")


def test_probe_parses_through_its_entry():
    dev = Device()
    path = "virtio2/block/vda"
    assert VIRTBLK_PROBE.name == "virtio block"
    assert VIRTBLK_PROBE.flags == DevFlags.PROVIDES_HD
    assert VIRTBLK_PROBE.create is None
    assert path[VIRTBLK_PROBE.parse(dev, path, path):] == "block/vda"
    assert dev.interface_type == InterfaceType.virtblk