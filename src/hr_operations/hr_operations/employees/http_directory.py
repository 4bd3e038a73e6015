from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from ..core.enums import EmployeeStatus
from ..core.exceptions import NotFoundError, UpstreamError
from .directory import EmployeeDirectory
from .model import Employee
from .roles import is_hr_privileged, role_from_position

logger = logging.getLogger(__name__)


class HttpEmployeeDirectory(EmployeeDirectory):
    """Looks employees up through the employee service REST API.

    ``GET {base_url}/api/employees/{id}`` answers
    ``{"data": {"employee": {...}}}`` with camelCase fields.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 5.0,
        auth_token: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = float(timeout)
        self._session = session or requests.Session()
        if auth_token:
            self._session.headers["Authorization"] = f"Bearer {auth_token}"

    def _fetch(self, employee_id: int) -> dict[str, Any]:
        url = f"{self._base_url}/api/employees/{int(employee_id)}"
        try:
            resp = self._session.get(url, timeout=self._timeout)
        except requests.RequestException as exc:
            logger.error("Employee service unreachable for employee %s: %s", employee_id, exc)
            raise UpstreamError("Employee service is unavailable") from exc

        if resp.status_code == 404:
            raise NotFoundError(f"Employee {employee_id} not found")
        if resp.status_code >= 400:
            logger.error("Employee service answered %s for employee %s", resp.status_code, employee_id)
            raise UpstreamError(f"Employee service error ({resp.status_code})")

        try:
            employee = (resp.json().get("data") or {}).get("employee")
        except (AttributeError, ValueError) as exc:
            raise UpstreamError("Employee service returned invalid JSON") from exc
        if not employee:
            raise NotFoundError(f"Employee {employee_id} not found")
        return employee

    @staticmethod
    def _to_employee(raw: dict[str, Any]) -> Employee:
        try:
            return Employee(
                employee_id=int(raw["id"]),
                first_name=str(raw.get("firstName", "")),
                last_name=str(raw.get("lastName", "")),
                email=str(raw.get("email", "")),
                department=str(raw.get("department", "")),
                position=str(raw.get("position", "")),
                salary=float(raw.get("salary") or 0),
                status=EmployeeStatus(raw.get("status", EmployeeStatus.ACTIVE.value)),
                manager_id=raw.get("managerId"),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise UpstreamError("Employee service returned a malformed employee") from exc

    def get_employee(self, employee_id: int) -> Employee:
        return self._to_employee(self._fetch(employee_id))

    def is_hr_privileged(self, employee_id: int) -> bool:
        employee = self.get_employee(employee_id)
        return is_hr_privileged(role_from_position(employee.position))
