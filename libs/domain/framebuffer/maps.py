"""
Parsing of ``/proc/<pid>/maps`` and selection of the framebuffer base address.

Each line looks like::

    7f1c2000-7f3c2000 rw-s 00000000 00:06 210   /dev/fb0

i.e. ``start-end perms offset dev inode [path]``. Only the address range and
the backing path matter here.
"""

from __future__ import annotations

import logging
from typing import Final, Literal

from domain.errors import AddressParseError, MappingNotFound
from domain.types import MemoryMapping

LOG: Final = logging.getLogger("rmsnap.maps")

MappingPick = Literal["last", "after_last"]


def _parse_address(text: str) -> int:
    """Leading hex address up to the range separator."""
    head = text.strip().split("-", 1)[0]
    if not head:
        raise AddressParseError("empty mapping address")
    try:
        return int(head, 16)
    except ValueError as e:
        raise AddressParseError(f"unparsable mapping address: {head!r}") from e


def parse_line(line: str) -> MemoryMapping:
    parts = line.split(maxsplit=5)
    if not parts:
        raise AddressParseError("empty maps line")
    rng = parts[0]
    if "-" not in rng:
        raise AddressParseError(f"no address range in maps line: {line!r}")
    start = _parse_address(rng)
    end = _parse_address(rng.split("-", 1)[1])
    if start >= end:
        raise AddressParseError(f"inverted mapping range: {rng}")
    path = parts[5].strip() if len(parts) == 6 else ""
    return MemoryMapping(start_offset=start, end_offset=end, backing_device_path=path)


def parse_maps(text: str, strict: bool = True) -> list[MemoryMapping]:
    """Parse a whole maps table in file order. Non-strict mode drops bad lines."""
    out: list[MemoryMapping] = []
    for line in text.splitlines():
        if not line.strip():
            continue
        try:
            out.append(parse_line(line))
        except AddressParseError:
            if strict:
                raise
            LOG.debug("Skipping malformed maps line: %r", line)
    return out


def _path_of(line: str) -> str:
    parts = line.split(maxsplit=5)
    return parts[5].strip() if len(parts) == 6 else ""


def locate_framebuffer(
    maps_text: str, device_path: str, pick: MappingPick = "last"
) -> int:
    """Start offset of the framebuffer mapping (without skip correction).

    ``last`` takes the final line backed by ``device_path``; ``after_last``
    takes the line immediately after it.
    """
    lines = [ln for ln in maps_text.splitlines() if ln.strip()]
    hits = [i for i, ln in enumerate(lines) if _path_of(ln) == device_path]
    if not hits:
        raise MappingNotFound(f"no {device_path} mapping in maps table")

    idx = hits[-1]
    if pick == "after_last":
        idx += 1
        if idx >= len(lines):
            raise MappingNotFound(f"no mapping follows the last {device_path} mapping")
    return _parse_address(lines[idx])
