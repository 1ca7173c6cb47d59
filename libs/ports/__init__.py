from .decoder import FrameDecoderPort
from .remote import RemoteExecPort
from .storage import ImageSinkPort
from .time import ClockPort, SleeperPort

__all__ = [
    "RemoteExecPort",
    "FrameDecoderPort",
    "ImageSinkPort",
    "ClockPort",
    "SleeperPort",
]
