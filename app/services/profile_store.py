# app/services/profile_store.py

from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from loguru import logger

from app.core.exceptions import EmailAlreadyRegistered, StoreError
from app.core.security import hash_password, verify_password
from app.models.department import Department
from app.models.user import Profile


# ============================================================================
# PROFILES ("users")
# ============================================================================
class ProfileStore:
    """Typed access to the ``users`` collection.

    This is also the credential boundary: secrets enter as plaintext and are
    only ever stored as bcrypt hashes.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, profile_id: str) -> Profile | None:
        try:
            result = await self.session.execute(select(Profile).where(Profile.id == profile_id))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to load profile {profile_id}") from e

    async def get_by_email(self, email: str) -> Profile | None:
        try:
            # Duplicates cannot exist (unique index), first() guards legacy data
            result = await self.session.execute(select(Profile).where(Profile.email == email))
            return result.scalars().first()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to look up profile by email {email}") from e

    async def list_profiles(self) -> list[Profile]:
        try:
            result = await self.session.execute(select(Profile).order_by(Profile.created_at))
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise StoreError("Failed to list profiles") from e

    async def create(self, profile: Profile) -> Profile:
        """Insert-only; an existing id or email is a conflict, never an overwrite."""
        self.session.add(profile)
        try:
            await self.session.commit()
            await self.session.refresh(profile)
            return profile
        except IntegrityError as e:
            await self.session.rollback()
            raise EmailAlreadyRegistered(
                f"A profile with id {profile.id} or email {profile.email} already exists"
            ) from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StoreError(f"Failed to create profile {profile.id}") from e

    async def save(self, profile: Profile) -> Profile:
        """Document-level upsert keyed by ``profile.id``."""
        try:
            merged = await self.session.merge(profile)
            await self.session.commit()
            await self.session.refresh(merged)
            return merged
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning(f"Integrity error saving profile {profile.id}: {e.orig}")
            raise EmailAlreadyRegistered(f"Email {profile.email} is already in use") from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StoreError(f"Failed to save profile {profile.id}") from e

    # ------------------------------------------------------------------
    # Credential boundary
    # ------------------------------------------------------------------
    @staticmethod
    def set_secret(profile: Profile, secret: str | None) -> bool:
        """Store ``secret`` as a hash; returns True when the stored hash changed.

        An already-matching hash is left alone so repeated syncs do not churn.
        """
        if not secret:
            return False
        if verify_password(secret, profile.secret_hash):
            return False
        profile.secret_hash = hash_password(secret)
        return True

    @staticmethod
    def verify_secret(profile: Profile, secret: str) -> bool:
        return verify_password(secret, profile.secret_hash)


# ============================================================================
# DEPARTMENTS
# ============================================================================
class DepartmentStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, department_id: str) -> Department | None:
        try:
            result = await self.session.execute(
                select(Department).where(Department.id == department_id)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to load department {department_id}") from e

    async def get_by_manager(self, profile_id: str) -> list[Department]:
        try:
            result = await self.session.execute(
                select(Department).where(Department.manager_id == profile_id)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to look up departments managed by {profile_id}") from e

    async def save(self, department: Department) -> Department:
        try:
            merged = await self.session.merge(department)
            await self.session.commit()
            await self.session.refresh(merged)
            return merged
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StoreError(f"Failed to save department {department.id}") from e
