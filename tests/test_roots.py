import pytest

from efibootkit.model import DevFlags, Device
from efibootkit.roots import (
    SOC_ROOT_PROBE,
    VIRTUAL_ROOT_PROBE,
    parse_soc_root,
    parse_virtual_root,
)


def test_soc_root_is_consumed():
    path = "../../devices/platform/soc/1a400000.sata/ata1/host0/target0:0:0/0:0:0:0/block/sda/sda1"
    consumed = parse_soc_root(Device(), path, path)
    assert path[consumed:] == "ata1/host0/target0:0:0/0:0:0:0/block/sda/sda1"


@pytest.mark.parametrize(
    "path",
    [
        "../../devices/pci0000:00/0000:00:1f.2/ata1/host0",
        "../../devices/platform/soc/",
        "../../devices/platform/soc/1a400000.sata",
    ],
)
def test_soc_root_rejects_other_paths(path):
    assert parse_soc_root(Device(), path, path) == 0


@pytest.mark.parametrize(
    "path, rest",
    [
        ("../../devices/virtual/nvme-fabrics/ctl/nvme0/nvme0n1", "nvme0/nvme0n1"),
        (
            "../../devices/virtual/nvme-subsystem/nvme-subsys0/nvme0n1/nvme0n1p1",
            "nvme-subsys0/nvme0n1/nvme0n1p1",
        ),
        ("nvme-subsystem/nvme-subsys0/nvme0n1", "nvme-subsys0/nvme0n1"),
    ],
)
def test_virtual_root_is_consumed(path, rest):
    consumed = parse_virtual_root(Device(), path, path)
    assert path[consumed:] == rest


@pytest.mark.parametrize(
    "path",
    [
        "../../devices/virtual/block/dm-0",
        "../../devices/pci0000:00/0000:00:1d.0/0000:05:00.0/nvme/nvme0/nvme0n1",
    ],
)
def test_virtual_root_rejects_other_paths(path):
    assert parse_virtual_root(Device(), path, path) == 0


def test_root_probes_parse_through_their_entries():
    expected = DevFlags.ABBREV_ONLY | DevFlags.PROVIDES_ROOT
    assert SOC_ROOT_PROBE.flags == expected
    assert VIRTUAL_ROOT_PROBE.flags == expected

    soc = "../../devices/platform/soc/1a400000.sata/ata1/host0"
    assert soc[SOC_ROOT_PROBE.parse(Device(), soc, soc):] == "ata1/host0"

    virt = "../../devices/virtual/nvme-fabrics/ctl/nvme0/nvme0n1"
    assert virt[VIRTUAL_ROOT_PROBE.parse(Device(), virt, virt):] == "nvme0/nvme0n1"