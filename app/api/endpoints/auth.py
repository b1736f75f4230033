# app/api/endpoints/auth.py

import uuid

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import (
    get_backend,
    get_current_user,
    get_department_store,
    get_db_session,
    get_hr_client,
    get_permission_state,
    get_session_holder,
)
from app.core.access import PermissionState
from app.core.config import settings
from app.core.rate_limiter import limiter
from app.core.security import create_access_token
from app.core.session import SessionBackend, SessionHolder
from app.models.user import Profile
from app.schemas.auth import LoginRequest, RegisterRequest, TokenWithUser
from app.schemas.user import PermissionsRead, ProfileRead
from app.services.auth_service import IdentityResolver, register_profile, sign_out
from app.services.hr_client import HRClient
from app.services.permission_service import resolve_permission_state
from app.services.profile_store import DepartmentStore, ProfileStore

router = APIRouter(prefix="/api/auth", tags=["Auth"])


# -------------------------------------------------------------------
# LOGIN (HR federation first, local credentials as fallback)
# -------------------------------------------------------------------
@router.post("/login", response_model=TokenWithUser)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    payload: LoginRequest,
    session: AsyncSession = Depends(get_db_session),
    hr_client: HRClient = Depends(get_hr_client),
    backend: SessionBackend = Depends(get_backend),
):
    session_id = uuid.uuid4().hex
    holder = SessionHolder(backend, session_id)

    resolver = IdentityResolver(ProfileStore(session), hr_client, holder)
    profile = await resolver.resolve(payload.identifier, payload.password)

    state = await resolve_permission_state(profile, DepartmentStore(session).get)

    token = create_access_token(
        subject=profile.id,
        data={"sid": session_id, "role": profile.role.value},
    )

    return TokenWithUser(
        access_token=token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user=ProfileRead.model_validate(profile),
        permissions=sorted(state.permissions, key=lambda p: p.value),
    )


# -------------------------------------------------------------------
# REGISTER (student or teacher, pending approval)
# -------------------------------------------------------------------
@router.post("/register", response_model=ProfileRead, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def register(
    request: Request,
    data: RegisterRequest,
    session: AsyncSession = Depends(get_db_session),
):
    return await register_profile(
        ProfileStore(session),
        email=data.email,
        secret=data.password,
        display_name=data.display_name,
        role=data.role,
    )


# -------------------------------------------------------------------
# LOGOUT
# -------------------------------------------------------------------
@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(holder: SessionHolder = Depends(get_session_holder)):
    await sign_out(holder)
    return None


# -------------------------------------------------------------------
# CURRENT PROFILE
# -------------------------------------------------------------------
@router.get("/me", response_model=ProfileRead)
async def me(current_user: Profile = Depends(get_current_user)):
    return current_user


@router.get("/permissions", response_model=PermissionsRead)
async def my_permissions(
    state: PermissionState = Depends(get_permission_state),
    current_user: Profile = Depends(get_current_user),
    departments: DepartmentStore = Depends(get_department_store),
):
    managed = await departments.get_by_manager(current_user.id)
    return PermissionsRead(
        role=state.role,
        is_department_manager=state.is_department_manager,
        permissions=sorted(state.permissions, key=lambda p: p.value),
        managed_departments=sorted(d.id for d in managed),
    )
