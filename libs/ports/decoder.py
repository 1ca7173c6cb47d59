from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from domain.types import Correction, DecodedImage, RawFrame


class FrameDecoderPort(ABC):
    """Raw interleaved samples + geometry + corrections -> pixel grid."""

    @abstractmethod
    def decode(self, frame: RawFrame, corrections: Sequence[Correction]) -> DecodedImage: ...
