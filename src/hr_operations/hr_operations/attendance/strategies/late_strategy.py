from __future__ import annotations

from datetime import date, datetime, time

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late check-in."""

    def decide_checkin(self, *, now: datetime, today: date, work_start: time, grace_minutes: int) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.LATE, note=f"Checked in after {work_start.strftime('%H:%M')}")

    def decide_checkout(self, *, now: datetime, today: date, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=current)
