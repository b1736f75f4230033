import pytest

from app.core.exceptions import EmailAlreadyRegistered, StoreError
from app.models.department import Department
from app.models.enums import UserRole
from app.models.user import Profile
from app.services.profile_store import DepartmentStore, ProfileStore


def student(id="user_1", email="s@example.com") -> Profile:
    return Profile(id=id, email=email, display_name="Student", role=UserRole.Student)


# ---------------------------------------------------------------
# DEPARTMENTS BY MANAGER
# ---------------------------------------------------------------
@pytest.mark.asyncio
async def test_departments_are_queryable_by_manager(departments):
    await departments.save(Department(id="sales", name="Sales", manager_id="boss", permissions=[]))
    await departments.save(Department(id="ops", name="Ops", manager_id="boss", permissions=[]))
    await departments.save(Department(id="hr", name="HR", manager_id="other", permissions=[]))

    managed = await departments.get_by_manager("boss")

    assert sorted(d.id for d in managed) == ["ops", "sales"]
    assert await departments.get_by_manager("nobody") == []


# ---------------------------------------------------------------
# CONFLICTS
# ---------------------------------------------------------------
@pytest.mark.asyncio
async def test_create_never_overwrites(store):
    await store.create(student())

    with pytest.raises(EmailAlreadyRegistered):
        await store.create(student(id="user_2"))

    assert (await store.get_by_id("user_1")).email == "s@example.com"


# ---------------------------------------------------------------
# DATABASE FAILURES
# ---------------------------------------------------------------
@pytest.mark.asyncio
async def test_read_failure_is_store_error(broken_session):
    store = ProfileStore(broken_session)

    with pytest.raises(StoreError):
        await store.get_by_id("user_1")
    with pytest.raises(StoreError):
        await store.get_by_email("s@example.com")


@pytest.mark.asyncio
async def test_write_failure_is_store_error_and_rolls_back(broken_session):
    store = ProfileStore(broken_session)

    with pytest.raises(StoreError) as exc:
        await store.create(student())

    assert exc.value.status_code == 500
    assert broken_session.rolled_back is True


@pytest.mark.asyncio
async def test_department_failure_is_store_error(broken_session):
    with pytest.raises(StoreError):
        await DepartmentStore(broken_session).get_by_manager("boss")
