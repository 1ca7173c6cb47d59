# libs/domain/framebuffer/streamer.py
from __future__ import annotations

import logging
from typing import Final

from ports.remote import RemoteExecPort

from domain.errors import IncompleteCapture
from domain.types import FrameGeometry, RawFrame, RemoteProcessId

LOG: Final = logging.getLogger("rmsnap.streamer")


def dd_script(pid: RemoteProcessId, offset: int, count: int) -> str:
    """Skip ``offset`` bytes of the memory image, then read exactly ``count``.

    The first dd seeks without copying; the second does one bounded read.
    Errors from reading unmapped memory are silenced so they only shorten
    the output.
    """
    return (
        f"{{ dd bs=1 skip={offset} count=0 && dd bs={count} count=1; }}"
        f" < /proc/{pid}/mem 2>/dev/null"
    )


def check_frame(data: bytes, geometry: FrameGeometry) -> RawFrame:
    frame = RawFrame(data=data, geometry=geometry)
    if not frame.is_complete():
        raise IncompleteCapture(expected=geometry.frame_bytes, got=len(data))
    return frame


def stream_frame(
    remote: RemoteExecPort, pid: RemoteProcessId, offset: int, geometry: FrameGeometry
) -> RawFrame:
    count = geometry.frame_bytes
    LOG.info(
        "Window size: %dx%d (%dB per pixel, %d total)",
        geometry.width,
        geometry.height,
        geometry.bytes_per_pixel,
        count,
    )
    LOG.info("Extracting framebuffer data...")
    data = remote.execute("sh", ["-c", dd_script(pid, offset, count)])
    return check_frame(data, geometry)
