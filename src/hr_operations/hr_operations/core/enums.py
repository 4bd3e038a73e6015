from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Vai trò dùng cho phân quyền; suy ra từ chức danh trong danh bạ nhân sự."""

    EMPLOYEE = "employee"
    HR = "hr"
    ADMIN = "admin"


class Capability(str, Enum):
    DECIDE_LEAVE = "decide_leave"
    VIEW_ALL_LEAVE = "view_all_leave"
    MANAGE_ATTENDANCE = "manage_attendance"
    VIEW_REPORTS = "view_reports"
    MANAGE_PAYROLL = "manage_payroll"


class EmployeeStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    TERMINATED = "terminated"


class LeaveType(str, Enum):
    ANNUAL = "annual"
    SICK = "sick"
    MATERNITY = "maternity"
    PATERNITY = "paternity"
    PERSONAL = "personal"
    EMERGENCY = "emergency"


class LeaveStatus(str, Enum):
    """Trạng thái luồng duyệt nghỉ phép."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class AttendanceStatus(str, Enum):
    """Trạng thái chấm công chuẩn hoá lưu trong CSDL."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    HALF_DAY = "half-day"
    HOLIDAY = "holiday"


class PayrollStatus(str, Enum):
    DRAFT = "draft"
    PROCESSED = "processed"
    PAID = "paid"
