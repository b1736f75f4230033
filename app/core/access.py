# app/core/access.py

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Union

from app.models.enums import PermissionAction, UserRole


class Policy(str, Enum):
    ANY = "any"
    ALL = "all"


@dataclass(frozen=True)
class PermissionState:
    role: UserRole
    permissions: frozenset[PermissionAction] = field(default_factory=frozenset)
    is_department_manager: bool = False


@dataclass(frozen=True)
class RoleRequirement:
    roles: frozenset[UserRole]

    def __init__(self, roles: Iterable[UserRole]):
        object.__setattr__(self, "roles", frozenset(UserRole(r) for r in roles))


@dataclass(frozen=True)
class PermissionRequirement:
    permission: PermissionAction


@dataclass(frozen=True)
class PermissionsRequirement:
    permissions: frozenset[PermissionAction]
    policy: Policy = Policy.ANY

    def __init__(self, permissions: Iterable[PermissionAction], policy: Policy = Policy.ANY):
        object.__setattr__(self, "permissions", frozenset(PermissionAction(p) for p in permissions))
        object.__setattr__(self, "policy", Policy(policy))


Requirement = Union[RoleRequirement, PermissionRequirement, PermissionsRequirement]


def allow(state: Optional[PermissionState], requirement: Requirement) -> bool:
    """Pure access decision. ``state is None`` means not resolved yet: deny."""
    if state is None:
        return False

    if isinstance(requirement, RoleRequirement):
        return state.role in requirement.roles

    if isinstance(requirement, PermissionRequirement):
        return requirement.permission in state.permissions

    if isinstance(requirement, PermissionsRequirement):
        if requirement.policy == Policy.ALL:
            return requirement.permissions <= state.permissions
        return not requirement.permissions.isdisjoint(state.permissions)

    raise TypeError(f"Unsupported requirement: {requirement!r}")
