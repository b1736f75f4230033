# app/services/auth_service.py

import time
import uuid
from typing import Optional

from loguru import logger

from app.core.constants import ADMIN_ID_PREFIX, USER_ID_PREFIX
from app.core.exceptions import (
    AccountDisabled,
    EmailAlreadyRegistered,
    FederationError,
    InvalidCredentials,
    PendingApproval,
    ProfileNotFound,
)
from app.core.session import SessionHolder
from app.models.enums import UserRole
from app.models.user import Profile, utcnow
from app.schemas.employee import ExternalEmployeeRecord
from app.schemas.user import ProfileUpdate
from app.services.hr_client import HRClient
from app.services.profile_store import ProfileStore
from app.services.sync_service import is_present, new_staff_id, provision_profile, sync_profile


# ============================================================================
# IDENTITY RESOLVER
# ============================================================================
class IdentityResolver:
    """
    Resolves (identifier, secret) into a profile.

    The HR service is tried first. A 403 from HR ends the attempt with
    AccountDisabled; every other HR failure falls back to local credentials.
    The resolved profile is installed in the session holder.
    """

    def __init__(self, store: ProfileStore, hr_client: HRClient, session_holder: SessionHolder):
        self.store = store
        self.hr_client = hr_client
        self.session_holder = session_holder

    async def resolve(self, identifier: str, secret: str) -> Profile:
        identifier = identifier.strip()

        # 1) HR federation (AccountDisabled propagates)
        record = await self._federate(identifier, secret)

        # 2) Local lookup
        profile = await self.store.get_by_email(identifier)
        if profile is None and record is not None and record.email and record.email != identifier:
            # Logged in with an HR employee id rather than an email
            profile = await self.store.get_by_email(record.email)
        if profile is None and record is not None and record.id:
            # Provisioned earlier under an email HR has since changed
            profile = await self.store.get_by_id(new_staff_id(record))
            if profile is not None and record.email and profile.email != record.email:
                logger.info(f"HR email for {profile.id} changed from {profile.email} to {record.email}")
                profile.email = record.email

        # 3) First federated contact: provision
        if profile is None and record is not None:
            profile = await provision_profile(self.store, record.with_secret(secret), email=identifier)
            await self.session_holder.set(profile)
            return profile

        # 4) Nobody anywhere
        if profile is None:
            raise InvalidCredentials()

        # 5) Local secret only matters without HR confirmation
        if record is None and not self.store.verify_secret(profile, secret):
            raise InvalidCredentials()

        # 6) Approval gate
        if profile.role != UserRole.Admin and not profile.approved:
            raise PendingApproval()

        # 7) Refresh employment data from HR
        if record is not None:
            profile = await sync_profile(self.store, profile, record.with_secret(secret))

        # 8) Install session
        await self.session_holder.set(profile)
        return profile

    async def _federate(self, identifier: str, secret: str) -> Optional[ExternalEmployeeRecord]:
        try:
            record = await self.hr_client.authenticate(identifier, secret)
        except AccountDisabled:
            logger.warning(f"HR reports account disabled for {identifier}")
            raise
        except FederationError as e:
            logger.info(f"HR federation unavailable for {identifier} ({e.message}); using local auth")
            return None

        logger.info(f"HR federation succeeded for {identifier}")
        return record


# ============================================================================
# REGISTRATION
# ============================================================================
async def register_profile(
    store: ProfileStore,
    email: str,
    secret: str,
    display_name: str,
    role: UserRole,
) -> Profile:
    if await store.get_by_email(email):
        raise EmailAlreadyRegistered()

    prefix = ADMIN_ID_PREFIX if role == UserRole.Admin else USER_ID_PREFIX
    profile = Profile(
        id=f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:6]}",
        email=email,
        display_name=display_name,
        role=role,
        # Only administrators skip the approval queue
        approved=role == UserRole.Admin,
        total_learning_hours=0,
    )
    store.set_secret(profile, secret)
    created = await store.create(profile)
    logger.info(f"Registered {role.value} profile {created.id} ({'approved' if created.approved else 'pending'})")
    return created


# ============================================================================
# SIGN OUT
# ============================================================================
async def sign_out(session_holder: SessionHolder) -> None:
    await session_holder.clear()


# ============================================================================
# APPROVAL (administrative)
# ============================================================================
async def approve_profile(store: ProfileStore, profile_id: str) -> Profile:
    profile = await store.get_by_id(profile_id)
    if not profile:
        raise ProfileNotFound()

    if profile.approved:
        return profile

    profile.approved = True
    profile.updated_at = utcnow()
    saved = await store.save(profile)
    logger.info(f"Profile {profile_id} approved")
    return saved


# ============================================================================
# SELF-SERVICE EDIT
# ============================================================================
async def update_own_profile(store: ProfileStore, profile_id: str, changes: ProfileUpdate) -> Profile:
    profile = await store.get_by_id(profile_id)
    if not profile:
        raise ProfileNotFound()

    # Blank or missing values keep what is stored
    for attribute, value in changes.model_dump().items():
        if is_present(value):
            setattr(profile, attribute, value)

    profile.updated_at = utcnow()
    return await store.save(profile)


# ============================================================================
# SUPER ADMIN SEEDING
# ============================================================================
async def ensure_super_admin(store: ProfileStore, email: str, secret: str, display_name: str) -> Optional[Profile]:
    existing = await store.get_by_email(email)
    if existing:
        return None
    return await register_profile(store, email, secret, display_name, UserRole.Admin)
