from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

import numpy as np

# 2-D uint8 pixel grid (H, W) or (H, W, C). Kept as a plain alias so adapters
# can hand arrays straight through.
DecodedImage = np.ndarray

RemoteProcessId = str


@dataclass(frozen=True)
class MemoryMapping:
    start_offset: int
    end_offset: int
    backing_device_path: str


@dataclass(frozen=True)
class FrameGeometry:
    width: int = 1872
    height: int = 1404
    bytes_per_pixel: int = 2
    pixel_format: str = "gray16le"
    # empirically determined; not derived from any documented header size
    skip_correction: int = 7

    @property
    def frame_bytes(self) -> int:
        return self.width * self.height * self.bytes_per_pixel


@dataclass(frozen=True)
class RawFrame:
    data: bytes
    geometry: FrameGeometry

    def is_complete(self) -> bool:
        return len(self.data) == self.geometry.frame_bytes


# --- decode corrections -------------------------------------------------------


@dataclass(frozen=True)
class Transpose:
    """ffmpeg transpose modes: 0 cclock_flip, 1 clock, 2 cclock, 3 clock_flip."""

    mode: Literal[0, 1, 2, 3]


@dataclass(frozen=True)
class Flip:
    axis: Literal["h", "v"] = "h"


@dataclass(frozen=True)
class ToneCurve:
    # (input, output) pairs in [0, 1], ascending input
    points: tuple[tuple[float, float], ...]


Correction = Transpose | Flip | ToneCurve


# --- extraction ---------------------------------------------------------------


@dataclass(frozen=True)
class ExtractConfig:
    threshold: int = 200
    exclude_w: int = 200
    exclude_h: int = 200
    min_region_points: int = 100
    padding: int = 50
    # lower bound for max_x before any region is seen (device UI layout)
    floor_max_x: int = 150


@dataclass(frozen=True, eq=False)
class Region:
    # (N, 2) int array of (x, y) boundary points
    points: np.ndarray = field(repr=False)

    @property
    def size(self) -> int:
        return int(len(self.points))


@dataclass(frozen=True)
class BoundingBox:
    min_x: int
    min_y: int
    max_x: int
    max_y: int

    @property
    def width(self) -> int:
        return self.max_x - self.min_x + 1

    @property
    def height(self) -> int:
        return self.max_y - self.min_y + 1

    def is_degenerate(self) -> bool:
        return self.min_x >= self.max_x or self.min_y >= self.max_y


@dataclass(frozen=True, eq=False)
class Extraction:
    box: BoundingBox
    image: DecodedImage = field(repr=False)
    found_regions: int
    kept_regions: int


@dataclass(frozen=True)
class NoSignificantContent:
    found_regions: int = 0
