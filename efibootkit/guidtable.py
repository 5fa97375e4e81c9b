"""Tables of well-known EFI GUIDs with their names and descriptions."""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

_GUID_RE = re.compile(
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
)
_SYMBOL_PREFIX = "efi_guid_"
_IGNORE_SYMBOL = "efi_guid_zzignore-this-guid"
_FIELD_LIMIT = 255

# alias symbol -> the symbol it duplicates
_ALIASES = {
    "efi_guid_empty": "efi_guid_zero",
    "efi_guid_redhat_2": "efi_guid_redhat",
}


def parse_guid(text: str) -> uuid.UUID:
    """Parse a GUID written as xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx."""
    if not _GUID_RE.fullmatch(text):
        raise ValueError(f"unparsable guid {text!r}")
    return uuid.UUID(text)


def _guid_key(guid: uuid.UUID) -> bytes:
    """Ordering key: the GUID's in-memory (mixed-endian) byte layout."""
    return guid.bytes_le


@dataclass(frozen=True)
class GuidEntry:
    """One row of the GUID table."""

    guid: uuid.UUID
    name: str
    symbol: str
    description: str

    def _clipped(self) -> "GuidEntry":
        return GuidEntry(
            guid=self.guid,
            name=self.name[:_FIELD_LIMIT],
            symbol=self.symbol[:_FIELD_LIMIT],
            description=self.description[:_FIELD_LIMIT],
        )


@dataclass(frozen=True)
class GuidIndex:
    """All entries of a GUID table, sorted by GUID."""

    entries: tuple[GuidEntry, ...]

    def __iter__(self) -> Iterator[GuidEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def _well_known(self) -> list[GuidEntry]:
        known: list[GuidEntry] = []
        for entry in self.entries:
            if entry.symbol == _IGNORE_SYMBOL:
                break
            known.append(entry._clipped())
        return known

    def well_known_by_guid(self) -> list[GuidEntry]:
        """Entries before the ignore sentinel, ordered by GUID."""
        return sorted(self._well_known(), key=lambda entry: _guid_key(entry.guid))

    def well_known_by_name(self) -> list[GuidEntry]:
        """Entries before the ignore sentinel, ordered by name."""
        return sorted(self._well_known(), key=lambda entry: entry.name)

    def aliases(self) -> dict[str, uuid.UUID]:
        """Extra symbols that share the GUID of a well-known entry."""
        found: dict[str, uuid.UUID] = {}
        for entry in self._well_known():
            for alias, target in _ALIASES.items():
                if target == entry.symbol:
                    found[alias] = entry.guid
        return found


def parse_guid_table(text: str) -> GuidIndex:
    """Parse lines of ``guid<TAB>name[<TAB>description]`` into a GuidIndex."""
    text = text.split("\0", 1)[0]
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()

    entries: list[GuidEntry] = []
    for number, line in enumerate(lines):
        guid_text, tab, rest = line.partition("\t")
        if not tab:
            raise ValueError(f"invalid guid string data on line {number}")
        name, _, description = rest.partition("\t")
        try:
            guid = parse_guid(guid_text[:36])
        except ValueError as exc:
            raise ValueError(f"unparsable guid on line {number}") from exc
        entries.append(
            GuidEntry(
                guid=guid,
                name=name,
                symbol=_SYMBOL_PREFIX + name,
                description=description,
            )
        )

    if not entries:
        raise ValueError("guid table produced no strings")

    entries.sort(key=lambda entry: _guid_key(entry.guid))
    return GuidIndex(tuple(entries))


def read_guids(path: str | Path) -> GuidIndex:
    """Read and parse a GUID table file."""
    return parse_guid_table(Path(path).read_text(encoding="utf-8"))