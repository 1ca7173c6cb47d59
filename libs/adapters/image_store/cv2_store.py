from __future__ import annotations

from pathlib import Path

import cv2
from domain.types import DecodedImage
from ports.storage import ImageSinkPort


class FileImageSink(ImageSinkPort):
    """Writes images into one directory; format follows the file suffix."""

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def write(self, name: str, image: DecodedImage) -> Path:
        path = self.directory / name
        if not cv2.imwrite(str(path), image):
            raise OSError(f"failed to write image: {path}")
        return path
