from efibootkit.model import Device, InterfaceType, ScsiInfo
from efibootkit.sas import SAS_PROBE, parse_sas
from efibootkit.sysfs import Sysfs

LOCAL = "host4/port-4:0/end_device-4:0/target4:0:0/4:1:2:3/block/sdc/sdc1"
EXPANDER = (
    "host2/port-2:0/expander-2:5/port-2:5:3/end_device-2:5:3/"
    "target2:0:0/2:0:0:0/block/sda"
)
EXPANDER_ADDRESS = (
    "class/scsi_host/host2/device/port-2:0/expander-2:5/port-2:5:3/"
    "end_device-2:5:3/sas_device/end_device-2:5:3/sas_address"
)


def _write(root, relative, content):
    target = root / relative
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content)


def _device(tmp_path, disk_name="sdc"):
    return Device(sysfs=Sysfs(tmp_path), disk_name=disk_name)


def test_local_sas_device(tmp_path):
    _write(tmp_path, "class/scsi_host/host4/host_sas_address", "0x1\n")
    _write(tmp_path, "class/block/sdc/device/sas_address", "0x5000c50012345678\n")
    dev = _device(tmp_path)
    assert parse_sas(dev, LOCAL, LOCAL) == LOCAL.index("block/")
    assert dev.sas_address == 0x5000C50012345678
    assert dev.scsi_info == ScsiInfo(4, 1, 2, 3)
    assert dev.interface_type == InterfaceType.sas


def test_address_without_prefix(tmp_path):
    _write(tmp_path, "class/scsi_host/host4/host_sas_address", "0x1\n")
    _write(tmp_path, "class/block/sdc/device/sas_address", "5000c500abcdef01\n")
    dev = _device(tmp_path)
    assert parse_sas(dev, LOCAL, LOCAL) == LOCAL.index("block/")
    assert dev.sas_address == int("5000c500abcdef01", 16)


def test_expander_sas_device(tmp_path):
    (tmp_path / "class/sas_host/host2").mkdir(parents=True)
    _write(tmp_path, EXPANDER_ADDRESS, "0x500605b000000abc\n")
    dev = _device(tmp_path, "sda")
    assert parse_sas(dev, EXPANDER, EXPANDER) == EXPANDER.index("block/")
    assert dev.sas_address == 0x500605B000000ABC
    assert dev.interface_type == InterfaceType.sas


def test_expander_without_address(tmp_path):
    (tmp_path / "class/sas_host/host2").mkdir(parents=True)
    dev = _device(tmp_path, "sda")
    assert parse_sas(dev, EXPANDER, EXPANDER) == 0
    assert dev.interface_type == InterfaceType.unknown


def test_not_a_sas_host(tmp_path):
    dev = _device(tmp_path)
    assert parse_sas(dev, LOCAL, LOCAL) == 0
    assert dev.interface_type == InterfaceType.unknown
    assert dev.sas_address == 0


def test_missing_local_address(tmp_path):
    _write(tmp_path, "class/scsi_host/host4/host_sas_address", "0x1\n")
    dev = _device(tmp_path)
    assert parse_sas(dev, LOCAL, LOCAL) == 0


def test_unparsable_address(tmp_path):
    _write(tmp_path, "class/scsi_host/host4/host_sas_address", "0x1\n")
    _write(tmp_path, "class/block/sdc/device/sas_address", "none\n")
    dev = _device(tmp_path)
    assert parse_sas(dev, LOCAL, LOCAL) == 0
    assert dev.interface_type == InterfaceType.unknown


def test_non_scsi_path(tmp_path):
    dev = _device(tmp_path)
    path = "ata1/host0/target0:0:0/0:0:0:0/block/sda"
    assert parse_sas(dev, path, path) == 0


def test_probe_uses_parser(tmp_path):
    _write(tmp_path, "class/scsi_host/host4/host_sas_address", "0x1\n")
    _write(tmp_path, "class/block/sdc/device/sas_address", "0x10\n")
    dev = _device(tmp_path)
    assert SAS_PROBE.parse(dev, LOCAL, LOCAL) == LOCAL.index("block/")
    assert InterfaceType.sas in SAS_PROBE.iftypes