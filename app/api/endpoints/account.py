# app/api/endpoints/account.py
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from app.api.deps import get_current_user, get_profile_store, get_session_holder
from app.core.session import SessionHolder
from app.models.user import Profile
from app.schemas.user import ProfileRead, ProfileUpdate
from app.services.auth_service import update_own_profile
from app.services.profile_store import ProfileStore

router = APIRouter(prefix="/api/account", tags=["Account"])


class ChangePasswordRequest(BaseModel):
    old_password: str
    new_password: str


@router.patch("/profile", response_model=ProfileRead)
async def update_profile(
    payload: ProfileUpdate,
    current_user: Profile = Depends(get_current_user),
    store: ProfileStore = Depends(get_profile_store),
    holder: SessionHolder = Depends(get_session_holder),
):
    updated = await update_own_profile(store, current_user.id, payload)
    # Keep the session copy in step with the store
    await holder.set(updated)
    return updated


@router.post("/change-password")
async def change_password(
    payload: ChangePasswordRequest,
    current_user: Profile = Depends(get_current_user),
    store: ProfileStore = Depends(get_profile_store),
):
    if not store.verify_secret(current_user, payload.old_password):
        raise HTTPException(status_code=400, detail="Old password incorrect")

    if payload.old_password == payload.new_password:
        raise HTTPException(status_code=400, detail="New password must be different")

    store.set_secret(current_user, payload.new_password)
    await store.save(current_user)

    return {"detail": "Password changed successfully"}
