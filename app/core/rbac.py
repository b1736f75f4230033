# app/core/rbac.py

from fastapi import Depends, HTTPException, status

from app.api.deps import get_current_user, get_permission_state
from app.core.access import (
    PermissionRequirement,
    PermissionState,
    PermissionsRequirement,
    Policy,
    RoleRequirement,
    allow,
)
from app.models.enums import PermissionAction, UserRole
from app.models.user import Profile


def AllowRoles(*allowed_roles: UserRole):
    """
    Dependency factory: the current profile's role must be one of
    ``allowed_roles``. Returns the profile.
    """
    requirement = RoleRequirement(allowed_roles)

    async def role_checker(
        current_user: Profile = Depends(get_current_user),
        state: PermissionState = Depends(get_permission_state),
    ):
        if not allow(state, requirement):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied for role '{current_user.role.value}'"
            )
        return current_user

    return role_checker


def RequirePermissions(*required: PermissionAction, policy: Policy = Policy.ANY):
    """
    Dependency factory over permissions. One action checks membership;
    several are combined with ``policy`` (any / all).
    """
    if len(required) == 1:
        requirement = PermissionRequirement(required[0])
    else:
        requirement = PermissionsRequirement(required, policy)

    async def permission_checker(
        current_user: Profile = Depends(get_current_user),
        state: PermissionState = Depends(get_permission_state),
    ):
        if not allow(state, requirement):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have permission to access this resource"
            )
        return current_user

    return permission_checker
