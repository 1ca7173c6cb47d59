from __future__ import annotations

from pathlib import Path

import numpy as np
from domain.types import DecodedImage
from ports.storage import ImageSinkPort


class MemoryImageSink(ImageSinkPort):
    """Keeps written images in a dict keyed by name."""

    def __init__(self, root: str = "/memory") -> None:
        self.root = Path(root)
        self.images: dict[str, np.ndarray] = {}

    def write(self, name: str, image: DecodedImage) -> Path:
        self.images[name] = np.array(image, copy=True)
        return self.root / name
