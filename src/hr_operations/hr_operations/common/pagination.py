from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Generic, Sequence, TypeVar

from ..core.exceptions import ValidationError

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    items: Sequence[T]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def normalize_paging(page: int, limit: int) -> tuple[int, int]:
    """Return (offset, limit) for 1-based ``page``."""
    page, limit = int(page), int(limit)
    if page < 1 or limit < 1:
        raise ValidationError("page and limit must be >= 1")
    return (page - 1) * limit, limit
