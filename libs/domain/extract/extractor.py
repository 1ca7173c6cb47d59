# libs/domain/extract/extractor.py
from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Final

import cv2
import numpy as np

from domain.types import (
    BoundingBox,
    DecodedImage,
    ExtractConfig,
    Extraction,
    NoSignificantContent,
    Region,
)

LOG: Final = logging.getLogger("rmsnap.extract")


def to_intensity(image: DecodedImage) -> np.ndarray:
    """Single-channel uint8 view of ``image``."""
    img = np.asarray(image)
    if img.dtype == np.uint16:
        img = (img.astype(np.float32) / 257.0).round().astype(np.uint8)
    elif img.dtype != np.uint8:
        img = np.clip(img, 0, 255).astype(np.uint8)

    if img.ndim == 2:
        return img
    if img.ndim == 3 and img.shape[2] == 1:
        return img[:, :, 0]
    if img.ndim == 3 and img.shape[2] == 3:
        return cv2.cvtColor(img, cv2.COLOR_BGR2GRAY)
    if img.ndim == 3 and img.shape[2] == 4:
        return cv2.cvtColor(img, cv2.COLOR_BGRA2GRAY)
    raise ValueError(f"unsupported image shape: {img.shape}")


def binarize(gray: np.ndarray, cfg: ExtractConfig) -> np.ndarray:
    """Boolean ink mask; the top-left exclusion zone is always background."""
    mask = gray < cfg.threshold
    mask[: cfg.exclude_h, : cfg.exclude_w] = False
    return mask


def find_regions(mask: np.ndarray) -> list[Region]:
    """Every border (outer and hole) of every connected ink component."""
    u8 = mask.astype(np.uint8) * 255
    contours, _ = cv2.findContours(u8, cv2.RETR_LIST, cv2.CHAIN_APPROX_NONE)
    return [Region(points=c.reshape(-1, 2)) for c in contours]


def significant(regions: Iterable[Region], min_points: int) -> list[Region]:
    """Regions whose point count exceeds ``min_points``."""
    return [r for r in regions if r.size > min_points]


def bounding_box(
    regions: Sequence[Region], width: int, height: int, cfg: ExtractConfig
) -> BoundingBox | None:
    """Padded, clamped box over all points of ``regions``; None when nothing survives."""
    if not regions:
        return None
    pts = np.concatenate([r.points for r in regions], axis=0)
    xs = pts[:, 0]
    ys = pts[:, 1]
    inside = (xs >= 0) & (ys >= 0) & (xs < width) & (ys < height)
    if not inside.any():
        return None
    xs = xs[inside]
    ys = ys[inside]

    min_x = int(xs.min())
    min_y = int(ys.min())
    max_x = max(int(xs.max()), cfg.floor_max_x)
    max_y = int(ys.max())

    box = BoundingBox(
        min_x=max(0, min_x - cfg.padding),
        min_y=max(0, min_y - cfg.padding),
        max_x=min(width - 1, max_x + cfg.padding),
        max_y=min(height - 1, max_y + cfg.padding),
    )
    return None if box.is_degenerate() else box


def crop(image: DecodedImage, box: BoundingBox) -> DecodedImage:
    return np.ascontiguousarray(image[box.min_y : box.max_y + 1, box.min_x : box.max_x + 1])


def extract_content(
    image: DecodedImage, cfg: ExtractConfig | None = None
) -> Extraction | NoSignificantContent:
    """Isolate the inked part of ``image``.

    Thresholds to an ink mask (minus the exclusion zone), traces region
    borders, drops regions at or below the noise threshold and crops the
    original image to the padded box around what is left.
    """
    cfg = cfg or ExtractConfig()
    gray = to_intensity(image)
    height, width = gray.shape[:2]

    regions = find_regions(binarize(gray, cfg))
    kept = significant(regions, cfg.min_region_points)
    LOG.info("Found %d contours, %d significant", len(regions), len(kept))

    box = bounding_box(kept, width, height, cfg)
    if box is None:
        LOG.info("No significant content found in the image")
        return NoSignificantContent(found_regions=len(regions))

    LOG.info(
        "Content bounding box: (%d, %d) to (%d, %d), size: %dx%d",
        box.min_x,
        box.min_y,
        box.max_x,
        box.max_y,
        box.width,
        box.height,
    )
    return Extraction(
        box=box,
        image=crop(image, box),
        found_regions=len(regions),
        kept_regions=len(kept),
    )
