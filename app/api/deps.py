# app/api/deps.py

from typing import AsyncGenerator
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import jwt
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.access import PermissionState
from app.core.database import get_session
from app.core.security import decode_token
from app.core.session import SessionBackend, SessionHolder, get_session_backend
from app.models.user import Profile
from app.services.hr_client import HRClient
from app.services.permission_service import resolve_permission_state
from app.services.profile_store import DepartmentStore, ProfileStore


# ------------------------------------------------------------
# HTTP Bearer Authentication
# ------------------------------------------------------------
bearer_scheme = HTTPBearer(auto_error=True)


# ------------------------------------------------------------
# DB Session / stores
# ------------------------------------------------------------
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_session():
        yield session


def get_profile_store(session: AsyncSession = Depends(get_db_session)) -> ProfileStore:
    return ProfileStore(session)


def get_department_store(session: AsyncSession = Depends(get_db_session)) -> DepartmentStore:
    return DepartmentStore(session)


# ------------------------------------------------------------
# External collaborators
# ------------------------------------------------------------
def get_hr_client() -> HRClient:
    return HRClient()


def get_backend() -> SessionBackend:
    return get_session_backend()


# ------------------------------------------------------------
# Token -> session holder -> current profile
# ------------------------------------------------------------
def get_token_payload(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> dict:
    try:
        payload = decode_token(credentials.credentials)
    except jwt.InvalidTokenError:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Could not validate credentials")

    if not payload.get("sub") or not payload.get("sid"):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid token payload")
    return payload


async def get_session_holder(
    payload: dict = Depends(get_token_payload),
    backend: SessionBackend = Depends(get_backend),
) -> SessionHolder:
    holder = SessionHolder(backend, payload["sid"])
    await holder.load()
    return holder


async def get_current_user(
    payload: dict = Depends(get_token_payload),
    holder: SessionHolder = Depends(get_session_holder),
    store: ProfileStore = Depends(get_profile_store),
) -> Profile:
    # Signed-out sessions are gone from the holder even if the JWT is still valid
    if holder.current is None or holder.current.id != payload["sub"]:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Session expired or signed out")

    user = await store.get_by_id(holder.current.id)
    if not user:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "User not found")

    return user


async def get_permission_state(
    current_user: Profile = Depends(get_current_user),
    departments: DepartmentStore = Depends(get_department_store),
) -> PermissionState:
    return await resolve_permission_state(current_user, departments.get)
