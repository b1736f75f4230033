import pytest

from app.core.constants import ADMIN_PERMISSIONS, MANAGER_DEFAULT_PERMISSIONS
from app.models.department import Department
from app.models.enums import PermissionAction as P, UserRole
from app.models.user import Profile
from app.services.permission_service import (
    is_department_manager,
    parse_permissions,
    resolve_permission_state,
    resolve_permissions,
)


def profile(role=UserRole.Staff, department_id=None, id="p1") -> Profile:
    return Profile(id=id, email=f"{id}@example.com", display_name=id, role=role, department_id=department_id)


def lookup(*departments: Department):
    by_id = {d.id: d for d in departments}

    async def get(department_id):
        return by_id.get(department_id)

    return get


SALES = Department(id="sales", name="Sales", manager_id="boss", permissions=["view_courses", "view_salary"])


@pytest.mark.asyncio
async def test_admin_gets_everything():
    perms = await resolve_permissions(profile(role=UserRole.Admin), lookup())

    assert perms == ADMIN_PERMISSIONS == frozenset(P)


@pytest.mark.asyncio
async def test_staff_gets_exactly_department_permissions():
    perms = await resolve_permissions(profile(department_id="sales"), lookup(SALES))

    assert perms == {P.VIEW_COURSES, P.VIEW_SALARY}


@pytest.mark.asyncio
async def test_manager_gets_union_with_defaults():
    perms = await resolve_permissions(profile(id="boss", department_id="sales"), lookup(SALES))

    assert perms >= {P.VIEW_COURSES, P.VIEW_SALARY}
    assert perms >= MANAGER_DEFAULT_PERMISSIONS


@pytest.mark.asyncio
async def test_manager_scenario_with_custom_defaults():
    dept = Department(id="d", name="D", manager_id="P", permissions=["view_courses"])

    perms = await resolve_permissions(
        profile(id="P", department_id="d"), lookup(dept), manager_defaults=frozenset({P.VIEW_USERS})
    )

    assert perms == {P.VIEW_COURSES, P.VIEW_USERS}


@pytest.mark.asyncio
async def test_manager_override_does_not_duplicate():
    dept = Department(id="d", name="D", manager_id="P", permissions=["view_users", "view_users"])

    state = await resolve_permission_state(
        profile(id="P", department_id="d"), lookup(dept), manager_defaults=frozenset({P.VIEW_USERS})
    )

    assert state.permissions == {P.VIEW_USERS}
    assert state.is_department_manager is True


@pytest.mark.asyncio
async def test_staff_without_department_has_nothing():
    # Even while some department names this profile as its manager
    managed = Department(id="x", name="X", manager_id="p1", permissions=["view_users"])

    perms = await resolve_permissions(profile(department_id=None), lookup(managed, SALES))

    assert perms == frozenset()


@pytest.mark.asyncio
async def test_missing_department_has_nothing():
    perms = await resolve_permissions(profile(department_id="gone"), lookup(SALES))

    assert perms == frozenset()


@pytest.mark.asyncio
@pytest.mark.parametrize("role", [UserRole.Teacher, UserRole.Student])
async def test_other_roles_have_nothing(role):
    perms = await resolve_permissions(profile(role=role, department_id="sales"), lookup(SALES))

    assert perms == frozenset()


@pytest.mark.asyncio
async def test_resolve_through_department_store(departments):
    await departments.save(Department(id="ops", name="Ops", manager_id=None, permissions=["view_attendance"]))

    perms = await resolve_permissions(profile(department_id="ops"), departments.get)

    assert perms == {P.VIEW_ATTENDANCE}


def test_unknown_permission_strings_are_dropped():
    assert parse_permissions(["view_users", "launch_rockets"]) == {P.VIEW_USERS}


def test_is_department_manager_requires_reference_equality():
    assert is_department_manager(profile(id="boss"), SALES)
    assert not is_department_manager(profile(id="someone"), SALES)
    assert not is_department_manager(profile(id="boss"), None)
    assert not is_department_manager(profile(id="boss"), Department(id="n", name="N"))
