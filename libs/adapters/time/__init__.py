from .fakes import FakeClockPort, FakeSleeperPort
from .system import SystemClockPort, SystemSleeperPort

__all__ = ["FakeClockPort", "FakeSleeperPort", "SystemClockPort", "SystemSleeperPort"]
