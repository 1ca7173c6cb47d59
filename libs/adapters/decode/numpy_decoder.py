from __future__ import annotations

from collections.abc import Sequence

import numpy as np
from domain.errors import DecodeFailure
from domain.types import Correction, DecodedImage, Flip, RawFrame, ToneCurve, Transpose
from ports.decoder import FrameDecoderPort

_DTYPES: dict[str, str] = {
    "gray": "u1",
    "gray8": "u1",
    "gray16le": "<u2",
    "gray16be": ">u2",
    "gray16": "<u2",
}


def apply_correction(img: np.ndarray, c: Correction) -> np.ndarray:
    """Same semantics as the matching ffmpeg filter, on a float image in [0, 1]."""
    if isinstance(c, Transpose):
        if c.mode == 0:
            return img.T
        if c.mode == 1:
            return np.rot90(img, -1)
        if c.mode == 2:
            return np.rot90(img, 1)
        return np.flipud(np.rot90(img, -1))
    if isinstance(c, Flip):
        return np.fliplr(img) if c.axis == "h" else np.flipud(img)
    if isinstance(c, ToneCurve):
        # piecewise linear; exact for the usual two-point curve
        xs = [p[0] for p in c.points]
        ys = [p[1] for p in c.points]
        return np.interp(img, xs, ys).astype(np.float32)
    raise TypeError(f"unknown correction: {c!r}")


class NumpyFrameDecoder(FrameDecoderPort):
    """In-process decoder; no external binary needed."""

    def decode(self, frame: RawFrame, corrections: Sequence[Correction]) -> DecodedImage:
        g = frame.geometry
        dtype = _DTYPES.get(g.pixel_format)
        if dtype is None:
            raise DecodeFailure(f"unsupported pixel format: {g.pixel_format}")
        if np.dtype(dtype).itemsize != g.bytes_per_pixel:
            raise DecodeFailure(
                f"{g.pixel_format} does not have {g.bytes_per_pixel} bytes per pixel"
            )
        if not frame.is_complete():
            raise DecodeFailure(f"frame has {len(frame.data)} bytes, want {g.frame_bytes}")

        arr = np.frombuffer(frame.data, dtype=dtype).reshape(g.height, g.width)
        img = arr.astype(np.float32) / float(np.iinfo(arr.dtype).max)
        for c in corrections:
            img = apply_correction(img, c)
        return np.ascontiguousarray((img * 255.0).round().clip(0, 255).astype(np.uint8))
