from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_checkin(self, *, now: datetime, today: date, work_start: time, grace_minutes: int) -> AttendanceStrategy:
        start = datetime.combine(today, work_start)
        if now > start + timedelta(minutes=grace_minutes):
            return LateStrategy()
        return NormalStrategy()

    def for_checkout(self, *, now: datetime, today: date) -> AttendanceStrategy:
        return NormalStrategy()
