# app/api/endpoints/admin.py

from typing import List

from fastapi import APIRouter, Depends

from app.api.deps import get_hr_client, get_profile_store
from app.core.database import AsyncSessionLocal
from app.core.rbac import AllowRoles, RequirePermissions
from app.models.enums import PermissionAction, UserRole
from app.models.user import Profile
from app.schemas.sync import RosterSyncReport
from app.schemas.user import ProfileRead
from app.services.auth_service import approve_profile
from app.services.hr_client import HRClient
from app.services.profile_store import ProfileStore
from app.services.sync_service import sync_roster

router = APIRouter(prefix="/api/admin", tags=["Admin"])


# -------------------------------------------------------------------
# LIST PROFILES
# -------------------------------------------------------------------
@router.get("/users", response_model=List[ProfileRead])
async def list_users(
    store: ProfileStore = Depends(get_profile_store),
    _: Profile = Depends(RequirePermissions(PermissionAction.VIEW_USERS)),
):
    return await store.list_profiles()


@router.get("/users/pending", response_model=List[ProfileRead])
async def list_pending_users(
    store: ProfileStore = Depends(get_profile_store),
    _: Profile = Depends(RequirePermissions(PermissionAction.APPROVE_USERS)),
):
    profiles = await store.list_profiles()
    return [p for p in profiles if not p.approved and p.role != UserRole.Admin]


# -------------------------------------------------------------------
# APPROVE A PENDING PROFILE
# -------------------------------------------------------------------
@router.post("/users/{profile_id}/approve", response_model=ProfileRead)
async def approve_user(
    profile_id: str,
    store: ProfileStore = Depends(get_profile_store),
    _: Profile = Depends(RequirePermissions(PermissionAction.APPROVE_USERS)),
):
    return await approve_profile(store, profile_id)


# -------------------------------------------------------------------
# BULK HR ROSTER SYNC
# -------------------------------------------------------------------
@router.post("/sync-roster", response_model=RosterSyncReport)
async def run_roster_sync(
    hr_client: HRClient = Depends(get_hr_client),
    _: Profile = Depends(AllowRoles(UserRole.Admin)),
):
    return await sync_roster(hr_client, AsyncSessionLocal)
