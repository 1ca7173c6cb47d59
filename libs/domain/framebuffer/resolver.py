# libs/domain/framebuffer/resolver.py
from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Final, TypeVar

from ports.remote import RemoteExecPort

from domain.errors import MappingNotFound, ProcessNotFound
from domain.types import RemoteProcessId

from .maps import parse_maps

LOG: Final = logging.getLogger("rmsnap.resolver")

T = TypeVar("T")


def first_valid(candidates: Iterable[T], is_valid: Callable[[T], bool]) -> T | None:
    """Return the first candidate (in order) that passes ``is_valid``."""
    for c in candidates:
        if is_valid(c):
            return c
    return None


def list_pids(remote: RemoteExecPort, process_name: str) -> list[RemoteProcessId]:
    out = remote.execute("pidof", [process_name])
    return out.decode("utf-8", errors="replace").split()


def read_maps(remote: RemoteExecPort, pid: RemoteProcessId) -> str:
    # A vanished process just yields empty output; cat's exit status is ignored.
    return remote.execute("cat", [f"/proc/{pid}/maps"]).decode("utf-8", errors="replace")


def has_device_mapping(maps_text: str, device_path: str) -> bool:
    return any(m.backing_device_path == device_path for m in parse_maps(maps_text, strict=False))


def resolve_process(
    remote: RemoteExecPort, process_name: str, device_path: str
) -> RemoteProcessId:
    """Find the pid of ``process_name`` whose address space maps ``device_path``."""
    pids = list_pids(remote, process_name)
    if not pids:
        raise ProcessNotFound(f"no '{process_name}' process on the device")
    LOG.info("Found %s PID(s): %s", process_name, " ".join(pids))

    pid = first_valid(pids, lambda p: has_device_mapping(read_maps(remote, p), device_path))
    if pid is None:
        raise MappingNotFound(f"no '{process_name}' process has a {device_path} mapping")
    if pid != pids[0]:
        LOG.info("Switching to PID %s which has the %s mapping", pid, device_path)
    return pid
