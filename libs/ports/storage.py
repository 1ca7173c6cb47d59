from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from domain.types import DecodedImage


class ImageSinkPort(ABC):
    @abstractmethod
    def write(self, name: str, image: DecodedImage) -> Path: ...
