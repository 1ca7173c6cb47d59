from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime


class ClockPort(ABC):
    @abstractmethod
    def now(self) -> datetime: ...


class SleeperPort(ABC):
    @abstractmethod
    def sleep(self, seconds: float) -> None: ...
