from __future__ import annotations

from datetime import UTC, datetime

from ports.time import ClockPort, SleeperPort


class FakeClockPort(ClockPort):
    """Always reports the same instant."""

    def __init__(self, fixed: datetime | None = None) -> None:
        self.fixed = fixed or datetime(2024, 3, 1, 12, 30, 45, tzinfo=UTC)

    def now(self) -> datetime:
        return self.fixed


class FakeSleeperPort(SleeperPort):
    def __init__(self) -> None:
        self.slept: list[float] = []

    def sleep(self, seconds: float) -> None:
        self.slept.append(seconds)
