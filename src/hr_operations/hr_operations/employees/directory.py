from __future__ import annotations

from typing import Protocol

from .model import Employee


class EmployeeDirectory(Protocol):
    """Giao diện tới danh bạ nhân sự (employee service).

    Lưu ý (DIP): service phụ thuộc vào interface này, không phụ thuộc URL cụ thể.
    Implementations raise ``NotFoundError`` for unknown ids and
    ``UpstreamError`` when the lookup itself fails.
    """

    def get_employee(self, employee_id: int) -> Employee:
        raise NotImplementedError

    def is_hr_privileged(self, employee_id: int) -> bool:
        raise NotImplementedError
