from __future__ import annotations

import time
from datetime import UTC, datetime

from ports.time import ClockPort, SleeperPort


class SystemClockPort(ClockPort):
    def now(self) -> datetime:
        return datetime.now(UTC)


class SystemSleeperPort(SleeperPort):
    def sleep(self, seconds: float) -> None:
        time.sleep(seconds)
