from .report import BoxOut, SnapReport

__all__ = ["SnapReport", "BoxOut"]
