# libs/domain/snap/service.py
from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from ports.decoder import FrameDecoderPort
from ports.remote import RemoteExecPort
from ports.storage import ImageSinkPort
from ports.time import ClockPort
from shared.contracts.v1.report import BoxOut, SnapReport

from domain.extract import extract_content
from domain.framebuffer import locate_framebuffer, resolve_process, stream_frame
from domain.framebuffer.maps import MappingPick
from domain.framebuffer.resolver import read_maps
from domain.types import Correction, ExtractConfig, Extraction, FrameGeometry, RawFrame

LOG: Final = logging.getLogger("rmsnap.service")


@dataclass(frozen=True)
class DeviceProfile:
    process_name: str = "xochitl"
    device_path: str = "/dev/fb0"
    mapping_pick: MappingPick = "last"
    geometry: FrameGeometry = FrameGeometry()


@dataclass(frozen=True)
class CapturedFrame:
    pid: str
    base_address: int
    frame: RawFrame


class SnapService:
    """Resolver -> locator -> streamer -> decoder -> extractor, once per run.

    Talks to the outside world only through ports. Nothing is retried here;
    any ``SnapError`` aborts the run before a file is written.
    """

    def __init__(
        self,
        remote: RemoteExecPort,
        decoder: FrameDecoderPort,
        sink: ImageSinkPort,
        clock: ClockPort,
        device: DeviceProfile | None = None,
        corrections: Sequence[Correction] = (),
        extract: ExtractConfig | None = None,
        keep_full: bool = True,
    ) -> None:
        self.remote: Final = remote
        self.decoder: Final = decoder
        self.sink: Final = sink
        self.clock: Final = clock
        self.device: Final = device or DeviceProfile()
        self.corrections: Final = tuple(corrections)
        self.extract: Final = extract or ExtractConfig()
        self.keep_full = keep_full

    def capture(self) -> CapturedFrame:
        dev = self.device
        pid = resolve_process(self.remote, dev.process_name, dev.device_path)
        LOG.info("Using %s PID: %s", dev.process_name, pid)

        base = locate_framebuffer(read_maps(self.remote, pid), dev.device_path, dev.mapping_pick)
        offset = base + dev.geometry.skip_correction
        LOG.info(
            "Found framebuffer at address: 0x%x + %d = %d",
            base,
            dev.geometry.skip_correction,
            offset,
        )
        frame = stream_frame(self.remote, pid, offset, dev.geometry)
        return CapturedFrame(pid=pid, base_address=base, frame=frame)

    def run(self) -> SnapReport:
        captured = self.capture()
        image = self.decoder.decode(captured.frame, self.corrections)

        stem = self.clock.now().strftime("%m-%d-%Y-%H-%M-%S") + "-remarkable-screen"
        full_path: Path | None = None
        if self.keep_full:
            full_path = self.sink.write(f"{stem}.png", image)
            LOG.info("Converted framebuffer to image: %s", full_path)

        result = extract_content(image, self.extract)
        report = SnapReport(
            status="no_content",
            pid=captured.pid,
            base_address=captured.base_address,
            full_path=str(full_path) if full_path else None,
            found_regions=result.found_regions,
        )
        if not isinstance(result, Extraction):
            return report

        cropped_path = self.sink.write(f"{stem}_cropped.png", result.image)
        LOG.info("Saved cropped content to: %s", cropped_path)
        box = result.box
        return report.model_copy(
            update={
                "status": "cropped",
                "cropped_path": str(cropped_path),
                "box": BoxOut(
                    min_x=box.min_x, min_y=box.min_y, max_x=box.max_x, max_y=box.max_y
                ),
                "kept_regions": result.kept_regions,
            }
        )
