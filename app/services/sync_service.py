# app/services/sync_service.py

import asyncio
import time
import uuid
from dataclasses import dataclass
from typing import Any, Callable

from loguru import logger
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import settings
from app.core.constants import STAFF_ID_PREFIX
from app.models.enums import UserRole
from app.models.user import Profile, utcnow
from app.schemas.employee import ExternalEmployeeRecord
from app.schemas.sync import RosterSyncError, RosterSyncReport
from app.services.hr_client import HRClient
from app.services.profile_store import ProfileStore


# ============================================================================
# FIELD MERGE TABLE
# ============================================================================
@dataclass(frozen=True)
class FieldSync:
    attribute: str
    getter: Callable[[ExternalEmployeeRecord], Any]

    def apply(self, profile: Profile, record: ExternalEmployeeRecord) -> None:
        value = self.getter(record)
        if is_present(value):
            setattr(profile, self.attribute, value)


# One entry per synchronized profile attribute
SYNC_FIELDS: tuple[FieldSync, ...] = (
    FieldSync("phone_number", lambda r: r.phone),
    FieldSync("address", lambda r: r.address),
    FieldSync("country", lambda r: r.country),
    FieldSync("photo_url", lambda r: r.avatar_url),
    FieldSync("date_of_birth", lambda r: r.birthday),
    FieldSync("monthly_salary", lambda r: r.base_salary),
    FieldSync("employment_status", lambda r: r.employment_status),
    FieldSync("employment_start_date", lambda r: r.start_date),
    FieldSync("employment_marital_status", lambda r: r.marital_status),
    FieldSync("employment_branch", lambda r: r.branch),
    FieldSync("employment_team", lambda r: r.team),
    FieldSync("employment_salary_percentage", lambda r: r.salary_percentage),
    FieldSync("employment_active", lambda r: r.active),
    FieldSync("employment_department", lambda r: r.department),
    FieldSync("position", lambda r: r.position),
)


def is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


# ============================================================================
# MERGE ONE RECORD
# ============================================================================
def merge(profile: Profile, record: ExternalEmployeeRecord) -> Profile:
    """Apply ``record`` onto ``profile`` in place and return it.

    Present external values win, absent ones keep the stored value. The
    external secret (if any) replaces the stored one. Running it twice with
    the same record leaves the same data behind.
    """
    for field in SYNC_FIELDS:
        field.apply(profile, record)

    ProfileStore.set_secret(profile, record.secret)

    profile.employment = record.snapshot()
    profile.updated_at = utcnow()
    return profile


async def sync_profile(store: ProfileStore, profile: Profile, record: ExternalEmployeeRecord) -> Profile:
    merge(profile, record)
    return await store.save(profile)


# ============================================================================
# PROVISIONING
# ============================================================================
def new_staff_id(record: ExternalEmployeeRecord) -> str:
    if record.id:
        return f"{STAFF_ID_PREFIX}_{record.id}"
    return f"{STAFF_ID_PREFIX}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:6]}"


def build_staff_profile(record: ExternalEmployeeRecord, email: str) -> Profile:
    profile = Profile(
        id=new_staff_id(record),
        email=record.email or email,
        display_name=record.full_name or record.email or email,
        role=UserRole.Staff,
        approved=True,
        total_learning_hours=0,
    )
    for field in SYNC_FIELDS:
        field.apply(profile, record)
    ProfileStore.set_secret(profile, record.secret)
    profile.employment = record.snapshot()
    return profile


async def provision_profile(store: ProfileStore, record: ExternalEmployeeRecord, email: str | None = None) -> Profile:
    """Create the local staff profile for an employee seen for the first time."""
    profile = build_staff_profile(record, email or record.email)
    created = await store.create(profile)
    logger.info(f"Provisioned staff profile {created.id} for {created.email}")
    return created


# ============================================================================
# BULK ROSTER SYNC
# ============================================================================
async def sync_roster(
    hr_client: HRClient,
    session_factory: async_sessionmaker[AsyncSession],
    concurrency: int | None = None,
) -> RosterSyncReport:
    """
    Pull the full HR roster and reconcile every employee with the profile store.

    Each record runs in its own DB session; a failing record is reported
    in ``errors`` and the rest of the batch continues.
    """
    rows = await hr_client.fetch_roster()
    limit = max(1, concurrency or settings.ROSTER_SYNC_CONCURRENCY)
    semaphore = asyncio.Semaphore(limit)

    async def worker(index: int, row: Any):
        async with semaphore:
            return await _sync_row(index, row, session_factory)

    outcomes = await asyncio.gather(*(worker(i, row) for i, row in enumerate(rows)))

    report = RosterSyncReport(total=len(rows))
    for outcome in outcomes:
        if isinstance(outcome, RosterSyncError):
            report.errors.append(outcome)
        elif outcome == "created":
            report.created += 1
        elif outcome == "updated":
            report.updated += 1
        else:
            report.skipped += 1

    logger.info(
        f"Roster sync finished: {report.created} created, {report.updated} updated, "
        f"{report.skipped} skipped, {report.failed} failed"
    )
    return report


async def _sync_row(index: int, row: Any, session_factory: async_sessionmaker[AsyncSession]):
    try:
        record = ExternalEmployeeRecord.model_validate(row)
    except ValidationError as e:
        logger.warning(f"Roster entry #{index} is malformed: {e.error_count()} error(s)")
        return RosterSyncError(error=f"Malformed roster entry #{index}")

    if not record.email:
        return "skipped"

    try:
        async with session_factory() as session:
            store = ProfileStore(session)
            existing = await store.get_by_email(record.email)
            if existing is None:
                await provision_profile(store, record)
                return "created"
            await sync_profile(store, existing, record)
            return "updated"
    except Exception as e:
        logger.exception(f"Roster sync failed for {record.email}")
        return RosterSyncError(employee_id=record.id, email=record.email, error=str(e))
