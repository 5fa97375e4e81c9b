# efibootkit

A pure-Python library for working with EFI boot data on Linux. It has no
runtime dependencies and provides no command-line program; everything is
used by importing it.

## What is in it

- `efibootkit.loadopt`: build and take apart binary EFI load options (the
  records kept in `Boot####` variables).
- `efibootkit.ucs2`: measure and convert between UTF-8 and little-endian
  UCS-2, the text encoding firmware uses.
- `efibootkit.guidtable`: read tab-separated tables of well-known GUIDs.
- `efibootkit.paths`: split slash-separated paths, such as sysfs links,
  into segments.
- `efibootkit.sysfs`: read links, files and directories below a sysfs
  mount point (`/sys` by default, or any other directory).
- `efibootkit.model`, `efibootkit.device` and the probe modules
  (`scsi`, `sas`, `sata`, `pci`, `virtblk`, `roots`, `pmem`): follow a block
  device's sysfs link and work out how it is attached.

## Installing

```
pip install .
```

Install the `test` extra to get pytest, then run `pytest`.

## Load options

```python
from efibootkit.loadopt import LoadOption, create_load_option

# An end-of-entire-path node on its own is the shortest valid device path.
device_path = bytes([0x7F, 0xFF, 0x04, 0x00])

data = create_load_option(0x1, device_path, "Fedora", b"\x01\x02")
option = LoadOption.from_bytes(data)

option.description()        # "Fedora"
option.path()               # the device path bytes, or None if invalid
option.optional_data()      # b"\x01\x02"
option.optional_data_size() # 2
option.is_valid()           # True
option.set_attributes(0x8)
option.clear_attributes(0x1)
option.attributes           # 0x8
bytes(option)               # the option in binary form again
```

`create_load_option` raises `LoadOptionError` (a `ValueError`) when the
device path is empty, does not end exactly at an end-of-entire-path node, or
the description is longer than 1024 bytes. `optional_data_size` and
`optional_data` raise `LoadOptionError` for options whose fields do not fit;
`path` returns `None` in that case. `set_attributes` and `clear_attributes`
only touch the low 16 bits.

Optional data can be prepared with `args_from_file(filename)` (the file's
bytes), `args_as_utf8(text)` (UTF-8 up to the first NUL) and
`args_as_ucs2(text)` (unterminated UCS-2).

## UCS-2 strings

```python
from efibootkit.ucs2 import ucs2_len, ucs2_size, ucs2_to_utf8, utf8_len, utf8_to_ucs2

encoded = utf8_to_ucs2("Boot entry".encode(), True)   # with a NUL terminator
ucs2_len(encoded)        # 10
ucs2_size(encoded)       # 22, terminator included
ucs2_to_utf8(encoded)    # b"Boot entry"
utf8_len("héllo".encode())  # 5
```

Every length function takes an optional `limit`; when it is non-negative no
more than that many units are examined. Only UTF-8 sequences of up to three
bytes are understood.

## GUID tables

A table has one entry per line: a GUID, a tab, a name, and optionally a tab
and a description.

```python
from efibootkit.guidtable import parse_guid, parse_guid_table, read_guids

index = parse_guid_table(
    "8be4df61-93ca-11d2-aa0d-00e098032b8c\tglobal\tEFI Global Variable\n"
)
entry = next(iter(index))
entry.name     # "global"
entry.symbol   # "efi_guid_global"
entry.guid     # a uuid.UUID

index.well_known_by_guid()  # entries before the "zzignore-this-guid" sentinel
index.well_known_by_name()  # the same entries ordered by name
index.aliases()             # e.g. {"efi_guid_empty": <guid of "zero">}
```

`read_guids(path)` does the same for a file. Malformed lines raise
`ValueError`, as does a table with no entries.

## Path segments

```python
from efibootkit.paths import pathseg, split_spans

pathseg("../../devices/pci0000:00/0000:00:1f.2/ata1", -1)   # "ata1"
split_spans("/foo/bar", "/")                                # ["/", "foo", "bar"]
```

`pathseg` returns `None` for a segment that does not exist;
`find_path_segment` returns `(offset, length)` and raises `IndexError`
instead.

## Probing block devices

```python
from efibootkit.device import find_parent_devpath, get_device
from efibootkit.sysfs import Sysfs

dev = get_device("/dev/sda1", -1, Sysfs("/sys"))
print(dev.interface_type, dev.disk_name, dev.part_name, dev.driver)

find_parent_devpath("/dev/sda1")   # "/dev/sda"
```

`get_device` accepts a device node or any regular file (it then looks at the
device holding the file). A partition of `-1` reads the partition number from
sysfs. Passing a `Sysfs` with another root lets the whole walk run against a
copy of the tree.

The link is matched, in order, by these probes (`DEV_PROBES` in
`efibootkit.device`): NVDIMM pmem/btt, SoC platform root, virtual NVMe root
(`nvme-subsystem` and `nvme-fabrics`), PCI device chains, virtio block, SAS
(direct or behind a port expander), SATA and plain SCSI. What each one finds
is stored on the `Device`: `pci_devs`, `scsi_info`, `sata_info`,
`sas_address`, `nvdimm_info`, `interface_type` and `flags`. Segments no probe
understands are skipped and the device is flagged `DevFlags.ABBREV_ONLY`.
`probe_device(dev)` runs this walk on a `Device` that already has its link
and names set.

Setting the environment variable `LIBEFIBOOT_SWIZZLE_PMEM_UUID` makes the pmem
probe store its labels with the GUID byte order swapped.

Failures raise `DeviceParseError` (a `ValueError`).

## What it does not do

- It does not read or write EFI variables.
- It does not encode EFI device paths: probing describes a device, but no
  device path bytes are built from it, and there is no MAC address path for
  network interfaces.
- There are no probes for ACPI or PCI root bridges, directly attached NVMe,
  PATA, I2O or eMMC devices; such links are only partly recognised and end up
  abbreviated or rejected.
- GUID tables are parsed into Python objects; no other output is generated
  from them.