from .cv2_store import FileImageSink
from .fakes import MemoryImageSink

__all__ = ["FileImageSink", "MemoryImageSink"]
