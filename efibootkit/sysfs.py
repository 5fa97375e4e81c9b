"""Access to a sysfs tree, rooted at /sys by default."""

from __future__ import annotations

import os
import posixpath
from pathlib import Path


class Sysfs:
    """Reads links, files and directories below a sysfs mount point."""

    def __init__(self, root: str | os.PathLike[str] = "/sys") -> None:
        self.root = Path(root)

    def __repr__(self) -> str:
        return f"Sysfs({str(self.root)!r})"

    def path(self, relative: str) -> Path:
        """The absolute path of *relative* inside the tree."""
        return self.root / relative.lstrip("/")

    def readlink(self, relative: str) -> str:
        """Target of the symbolic link at *relative*; raises OSError if absent."""
        return os.readlink(self.path(relative))

    def read_file(self, relative: str) -> bytes:
        """Contents of the file at *relative*; raises OSError if unreadable."""
        return self.path(relative).read_bytes()

    def exists(self, relative: str) -> bool:
        """Whether *relative* exists, following symbolic links."""
        return self.path(relative).exists()

    def listdir(self, relative: str) -> list[str]:
        """Sorted entry names of the directory at *relative*."""
        return sorted(os.listdir(self.path(relative)))

    def find_device_file(self, name: str, base: str) -> str | None:
        """Find *name* under base/device, base/device/device, and so on.

        Each level is tried in turn while both the ``device`` directory and
        *name* inside it exist; the deepest match is returned as a path
        relative to the tree, or None if the first level has no match.
        """
        found: str | None = None
        slashdev = "device"
        while True:
            candidate_dir = posixpath.join(base, slashdev)
            if not self.exists(candidate_dir):
                break
            candidate = posixpath.join(candidate_dir, name)
            if not self.exists(candidate):
                break
            found = candidate
            slashdev += "/device"
        return found