from __future__ import annotations

import calendar
import math
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal

from ..core.exceptions import ValidationError


def parse_hhmm(value: str) -> time:
    try:
        return datetime.strptime(value.strip(), "%H:%M").time()
    except (AttributeError, ValueError):
        raise ValidationError(f"Invalid time (HH:MM): {value!r}")


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def inclusive_days(start: date, end: date) -> int:
    """Number of calendar days in [start, end], counting both endpoints.

    Datetimes are accepted; a partial day rounds up like the stored requests do.
    """
    if isinstance(start, datetime) or isinstance(end, datetime):
        seconds = abs((end - start).total_seconds())
        return math.ceil(seconds / 86400) + 1
    return abs((end - start).days) + 1


def days_in_year(year: int) -> int:
    return 366 if calendar.isleap(year) else 365


def month_bounds(day: date) -> tuple[date, date]:
    last = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last)


def year_bounds(year: int) -> tuple[date, date]:
    return date(year, 1, 1), date(year, 12, 31)


def hours_between(start: datetime, end: datetime) -> float:
    """Elapsed hours rounded half-up to 2 decimals."""
    hours = Decimal(str((end - start) / timedelta(hours=1)))
    return float(hours.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
