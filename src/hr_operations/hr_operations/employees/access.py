from __future__ import annotations

from ..core.enums import Capability
from ..core.exceptions import AuthorizationError
from .directory import EmployeeDirectory
from .roles import has_capability, role_from_position


def require_hr_privilege(directory: EmployeeDirectory, actor_id: int, message: str) -> None:
    """Raise AuthorizationError unless ``actor_id`` holds the HR capability set.

    Lookup failures (UpstreamError) propagate: a privileged action is never
    granted on a failed check.
    """
    if not directory.is_hr_privileged(int(actor_id)):
        raise AuthorizationError(message)


def require_capability(directory: EmployeeDirectory, actor_id: int, capability: Capability, message: str) -> None:
    """Raise AuthorizationError unless the actor's role grants ``capability``."""
    employee = directory.get_employee(int(actor_id))
    if not has_capability(role_from_position(employee.position), capability):
        raise AuthorizationError(message)
