#!/usr/bin/env python3
"""
crop_png.py
Run the content extractor on an image that is already on disk.

Handy for tuning threshold / padding against saved full screenshots without
touching the tablet. Optionally writes a debug overlay with the kept region
borders in red and the final box in blue.

Usage examples:
  python scripts/crop_png.py 03-01-2024-12-30-45-remarkable-screen.png
  python scripts/crop_png.py shot.png --threshold 180 --padding 20 --debug overlay.png
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import cv2
import numpy as np
from domain.extract import binarize, extract_content, find_regions, significant, to_intensity
from domain.types import ExtractConfig, Extraction


def _overlay(image: np.ndarray, cfg: ExtractConfig, result: Extraction | None) -> np.ndarray:
    gray = to_intensity(image)
    vis = np.full((*gray.shape, 3), 255, dtype=np.uint8)
    kept = significant(find_regions(binarize(gray, cfg)), cfg.min_region_points)
    for r in kept:
        vis[r.points[:, 1], r.points[:, 0]] = (0, 0, 255)
    if result is not None:
        b = result.box
        cv2.rectangle(vis, (b.min_x, b.min_y), (b.max_x, b.max_y), (255, 0, 0), 2)
    return vis


def main() -> int:
    ap = argparse.ArgumentParser(prog="crop_png")
    ap.add_argument("image", type=Path)
    ap.add_argument("--out", type=Path, help="Cropped output (default: <stem>_cropped.png).")
    ap.add_argument("--threshold", type=int, default=200)
    ap.add_argument("--padding", type=int, default=50)
    ap.add_argument("--min-points", type=int, default=100)
    ap.add_argument("--debug", type=Path, help="Write a region/box overlay here.")
    args = ap.parse_args()

    img = cv2.imread(str(args.image), cv2.IMREAD_UNCHANGED)
    if img is None:
        print(f"[crop] cannot read {args.image}", file=sys.stderr)
        return 2

    cfg = ExtractConfig(
        threshold=args.threshold, padding=args.padding, min_region_points=args.min_points
    )
    result = extract_content(img, cfg)
    extraction = result if isinstance(result, Extraction) else None

    if args.debug:
        cv2.imwrite(str(args.debug), _overlay(img, cfg, extraction))
        print(f"[crop] overlay -> {args.debug}")

    if extraction is None:
        print("[crop] no significant content")
        return 0

    out = args.out or args.image.with_name(f"{args.image.stem}_cropped.png")
    cv2.imwrite(str(out), extraction.image)
    b = extraction.box
    print(f"[crop] box=({b.min_x},{b.min_y})-({b.max_x},{b.max_y}) -> {out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
