"""Role resolution and capability checks.

The employee directory only knows a free-text ``position``. Roles are derived
from it with the same rule the employee service uses: a position containing
"hr" (case-insensitive) or equal to "admin" is privileged. Titles such as
"HR Intern" therefore count as HR.
"""

from __future__ import annotations

from typing import FrozenSet

from ..core.enums import Capability, Role

ROLE_CAPABILITIES: dict[Role, FrozenSet[Capability]] = {
    Role.EMPLOYEE: frozenset(),
    Role.HR: frozenset(
        {
            Capability.DECIDE_LEAVE,
            Capability.VIEW_ALL_LEAVE,
            Capability.MANAGE_ATTENDANCE,
            Capability.VIEW_REPORTS,
            Capability.MANAGE_PAYROLL,
        }
    ),
    Role.ADMIN: frozenset(Capability),
}

HR_PRIVILEGED_CAPABILITIES = ROLE_CAPABILITIES[Role.HR]


def role_from_position(position: str | None) -> Role:
    p = (position or "").strip().lower()
    if p == "admin":
        return Role.ADMIN
    if "hr" in p:
        return Role.HR
    return Role.EMPLOYEE


def has_capability(role: Role, capability: Capability) -> bool:
    return capability in ROLE_CAPABILITIES.get(role, frozenset())


def is_hr_privileged(role: Role) -> bool:
    return HR_PRIVILEGED_CAPABILITIES <= ROLE_CAPABILITIES.get(role, frozenset())
