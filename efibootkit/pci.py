"""Recognising chains of PCI devices in sysfs device links."""

from __future__ import annotations

import re

from .model import DevProbe, Device, DeviceParseError, InterfaceType, PciDevInfo

_PCI_DEVICE = re.compile(
    r"([0-9a-fA-F]+):([0-9a-fA-F]+):([0-9a-fA-F]+)\.([0-9a-fA-F]+)/"
)


def parse_pci(dev: Device, path: str, root: str) -> int:
    """Consume ``DDDD:BB:DD.F/`` segments from the start of *path*.

    *path* is the unparsed tail of the full link *root*. Each device found
    is appended to ``dev.pci_devs`` together with its driver link, if any.
    Returns the number of characters consumed.
    """
    prefix = root[: len(root) - len(path)]
    sysfs = dev.sysfs
    pos = 0
    while True:
        match = _PCI_DEVICE.match(path, pos)
        if not match:
            break
        pos = match.end()
        domain, bus, device, function = (int(value, 16) for value in match.groups())

        node = prefix + path[:pos]
        driver = f"class/block/{node}/driver"
        if sysfs.exists(driver):
            try:
                driverlink = sysfs.readlink(driver)
            except OSError as exc:
                raise DeviceParseError(
                    f"Could not find driver for pci device {node}"
                ) from exc
        else:
            # Some platform core drivers have no driver link.
            driverlink = None

        dev.pci_devs.append(
            PciDevInfo(
                domain=domain & 0xFFFF,
                bus=bus & 0xFF,
                device=device & 0xFF,
                function=function & 0xFF,
                driverlink=driverlink,
            )
        )
    return pos


PCI_PROBE = DevProbe(
    name="pci",
    iftypes=(InterfaceType.pci,),
    parse=parse_pci,
)