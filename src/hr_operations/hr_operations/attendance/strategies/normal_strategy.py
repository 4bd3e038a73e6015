from __future__ import annotations

from datetime import date, datetime, time

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class NormalStrategy(AttendanceStrategy):
    """On-time check-in, normal check-out."""

    def decide_checkin(self, *, now: datetime, today: date, work_start: time, grace_minutes: int) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)

    def decide_checkout(self, *, now: datetime, today: date, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=current)
