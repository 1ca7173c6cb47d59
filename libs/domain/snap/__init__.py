from .service import CapturedFrame, DeviceProfile, SnapService

__all__ = ["SnapService", "DeviceProfile", "CapturedFrame"]
