"""EFI load options, UCS-2 strings, GUID tables and Linux sysfs block-device probing."""

__version__ = "0.1.0"