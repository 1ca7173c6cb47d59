from __future__ import annotations

import logging
import shutil
import subprocess
import tempfile
from collections.abc import Sequence
from pathlib import Path
from typing import Final

import cv2
from domain.errors import DecodeFailure
from domain.types import Correction, DecodedImage, Flip, RawFrame, ToneCurve, Transpose
from ports.decoder import FrameDecoderPort

LOG: Final = logging.getLogger("rmsnap.ffmpeg")


def filter_chain(corrections: Sequence[Correction]) -> str:
    """``-vf`` argument, e.g. ``transpose=2,hflip,curves=all=0.045/0 0.06/1``."""
    parts: list[str] = []
    for c in corrections:
        if isinstance(c, Transpose):
            parts.append(f"transpose={c.mode}")
        elif isinstance(c, Flip):
            parts.append("hflip" if c.axis == "h" else "vflip")
        elif isinstance(c, ToneCurve):
            pts = " ".join(f"{x:g}/{y:g}" for x, y in c.points)
            parts.append(f"curves=all={pts}")
        else:
            raise TypeError(f"unknown correction: {c!r}")
    return ",".join(parts)


class FfmpegFrameDecoder(FrameDecoderPort):
    def __init__(
        self, ffmpeg_bin: str = "ffmpeg", workdir: Path | None = None, timeout_s: float = 60.0
    ) -> None:
        self._bin = ffmpeg_bin
        self._workdir = workdir
        self._timeout_s = float(timeout_s)

    def available(self) -> bool:
        return shutil.which(self._bin) is not None

    def command(
        self, raw: Path, out: Path, frame: RawFrame, corrections: Sequence[Correction]
    ) -> list[str]:
        g = frame.geometry
        cmd = [
            self._bin,
            "-f",
            "rawvideo",
            "-pixel_format",
            g.pixel_format,
            "-video_size",
            f"{g.width}x{g.height}",
            "-i",
            str(raw),
        ]
        vf = filter_chain(corrections)
        if vf:
            cmd += ["-vf", vf]
        cmd += ["-y", str(out)]
        return cmd

    def decode(self, frame: RawFrame, corrections: Sequence[Correction]) -> DecodedImage:
        with tempfile.TemporaryDirectory(prefix="rmsnap-", dir=self._workdir) as tmp:
            raw = Path(tmp) / "remarkable_fb.raw"
            out = Path(tmp) / "frame.png"
            raw.write_bytes(frame.data)
            cmd = self.command(raw, out, frame, corrections)
            LOG.debug("running %s", " ".join(cmd))
            try:
                proc = subprocess.run(
                    cmd,
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.PIPE,
                    timeout=self._timeout_s,
                    check=False,
                )
            except FileNotFoundError as e:
                raise DecodeFailure(f"ffmpeg binary not found: {self._bin}") from e
            except subprocess.TimeoutExpired as e:
                raise DecodeFailure(f"ffmpeg timed out after {self._timeout_s}s") from e

            if proc.returncode != 0:
                tail = proc.stderr.decode("utf-8", errors="replace").strip().splitlines()[-3:]
                raise DecodeFailure(
                    f"Failed to convert framebuffer to image (exit {proc.returncode}): "
                    + " | ".join(tail)
                )
            img = cv2.imread(str(out), cv2.IMREAD_UNCHANGED)
        if img is None:
            raise DecodeFailure("ffmpeg produced no readable image")
        return img
