from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Optional, Type, TypeVar

from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_positive(value: float, field_name: str) -> float:
    if value is None or value <= 0:
        raise ValidationError(f"{field_name} must be positive")
    return value


def require_non_negative(value: Optional[float], field_name: str) -> float:
    if value is None:
        return 0.0
    if value < 0:
        raise ValidationError(f"{field_name} cannot be negative")
    return value


def require_date_order(start: date, end: date, *, start_name: str = "Start date", end_name: str = "End date") -> None:
    if end < start:
        raise ValidationError(f"{end_name} must be on or after {start_name.lower()}")


def require_enum(value, enum_cls: Type[E], field_name: str) -> E:
    """Coerce a raw value into ``enum_cls``; accepts members or their values."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}")
