from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import EmployeeStatus


@dataclass(frozen=True)
class Employee:
    """Bản ghi nhân viên lấy từ danh bạ (employee service).

    Lưu ý: ``salary`` là lương năm.
    """

    employee_id: int
    first_name: str
    last_name: str
    email: str
    department: str
    position: str
    salary: float
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    manager_id: Optional[int] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_active(self) -> bool:
        return self.status == EmployeeStatus.ACTIVE
