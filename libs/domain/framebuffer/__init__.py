from .maps import locate_framebuffer, parse_maps
from .resolver import first_valid, resolve_process
from .streamer import check_frame, stream_frame

__all__ = [
    "first_valid",
    "resolve_process",
    "parse_maps",
    "locate_framebuffer",
    "stream_frame",
    "check_frame",
]
