# app/services/permission_service.py

from typing import Awaitable, Callable, Iterable, Optional, Protocol

from loguru import logger

from app.core.access import PermissionState
from app.core.constants import ADMIN_PERMISSIONS, MANAGER_DEFAULT_PERMISSIONS
from app.models.department import Department
from app.models.enums import PermissionAction, UserRole


class ProfileLike(Protocol):
    id: str
    role: UserRole
    department_id: Optional[str]


DepartmentLookup = Callable[[str], Awaitable[Optional[Department]]]


def is_department_manager(profile: ProfileLike, department: Optional[Department]) -> bool:
    if department is None or not department.manager_id:
        return False
    return department.manager_id == profile.id


def parse_permissions(values: Iterable[str]) -> frozenset[PermissionAction]:
    parsed = set()
    for value in values or ():
        try:
            parsed.add(PermissionAction(value))
        except ValueError:
            logger.warning(f"Ignoring unknown permission action '{value}'")
    return frozenset(parsed)


async def resolve_permission_state(
    profile: ProfileLike,
    department_lookup: DepartmentLookup,
    manager_defaults: frozenset[PermissionAction] = MANAGER_DEFAULT_PERMISSIONS,
) -> PermissionState:
    """
    Effective permissions for ``profile``; first matching rule wins:

    1. admin                         -> every action
    2. staff with a department       -> the department's list, plus
                                        ``manager_defaults`` for its manager
                                        (missing department -> nothing)
    3. staff without a department    -> nothing
    4. any other role                -> nothing
    """
    role = UserRole(profile.role)

    if role == UserRole.Admin:
        return PermissionState(role=role, permissions=ADMIN_PERMISSIONS)

    if role != UserRole.Staff or not profile.department_id:
        return PermissionState(role=role, permissions=frozenset())

    department = await department_lookup(profile.department_id)
    if department is None:
        logger.warning(f"Profile {profile.id} references missing department {profile.department_id}")
        return PermissionState(role=role, permissions=frozenset())

    permissions = parse_permissions(department.permissions)
    if is_department_manager(profile, department):
        return PermissionState(
            role=role,
            permissions=permissions | frozenset(manager_defaults),
            is_department_manager=True,
        )

    return PermissionState(role=role, permissions=permissions)


async def resolve_permissions(
    profile: ProfileLike,
    department_lookup: DepartmentLookup,
    manager_defaults: frozenset[PermissionAction] = MANAGER_DEFAULT_PERMISSIONS,
) -> frozenset[PermissionAction]:
    state = await resolve_permission_state(profile, department_lookup, manager_defaults)
    return state.permissions
