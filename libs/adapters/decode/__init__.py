from .ffmpeg import FfmpegFrameDecoder, filter_chain
from .numpy_decoder import NumpyFrameDecoder, apply_correction

__all__ = ["FfmpegFrameDecoder", "NumpyFrameDecoder", "filter_chain", "apply_correction"]
