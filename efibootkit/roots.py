"""Probes for device links rooted at SoC platforms or virtual devices."""

from __future__ import annotations

import re

from .model import DevFlags, DevProbe, Device, InterfaceType

_SOC_ROOT = re.compile(r"\.\./\.\./devices/platform/soc/[^/]+/")
_VIRTUAL = "../../devices/virtual/"
_VIRTUAL_SUBDIRS = ("nvme-subsystem/", "nvme-fabrics/ctl/")


def parse_soc_root(dev: Device, path: str, root: str) -> int:
    """Consume ``../../devices/platform/soc/<node>/``; 0 if absent."""
    match = _SOC_ROOT.match(path)
    return match.end() if match else 0


def parse_virtual_root(dev: Device, path: str, root: str) -> int:
    """Consume a virtual NVMe root such as ``../../devices/virtual/nvme-fabrics/ctl/``.

    The ``../../devices/virtual/`` prefix is optional, but one of the NVMe
    subdirectories must follow; otherwise nothing is consumed.
    """
    consumed = len(_VIRTUAL) if path.startswith(_VIRTUAL) else 0
    for subdir in _VIRTUAL_SUBDIRS:
        if path.startswith(subdir, consumed):
            return consumed + len(subdir)
    return 0


SOC_ROOT_PROBE = DevProbe(
    name="soc_root",
    iftypes=(InterfaceType.soc_root,),
    parse=parse_soc_root,
    flags=DevFlags.ABBREV_ONLY | DevFlags.PROVIDES_ROOT,
)

VIRTUAL_ROOT_PROBE = DevProbe(
    name="virtual_root",
    iftypes=(InterfaceType.virtual_root,),
    parse=parse_virtual_root,
    flags=DevFlags.ABBREV_ONLY | DevFlags.PROVIDES_ROOT,
)