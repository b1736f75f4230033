import pytest

from app.core.config import settings
from app.core.session import MemorySessionBackend, SessionHolder
from app.models.enums import UserRole
from app.models.user import Profile


def profile() -> Profile:
    return Profile(
        id="user_1",
        email="u@example.com",
        display_name="User",
        role=UserRole.Teacher,
        approved=True,
        secret_hash="$2b$12$notarealhash",
    )


@pytest.mark.asyncio
async def test_fresh_holder_has_nothing():
    holder = SessionHolder(MemorySessionBackend(), "abc")

    assert holder.loaded is False
    assert await holder.load() is None
    assert holder.loaded is True


@pytest.mark.asyncio
async def test_set_persists_for_the_next_holder():
    backend = MemorySessionBackend()
    await SessionHolder(backend, "abc").set(profile())

    restored = await SessionHolder(backend, "abc").load()

    assert restored.id == "user_1"
    assert restored.role == UserRole.Teacher


@pytest.mark.asyncio
async def test_serialized_session_never_contains_secret():
    backend = MemorySessionBackend()
    holder = SessionHolder(backend, "abc")
    await holder.set(profile())

    raw = await backend.get(holder.key)

    assert "notarealhash" not in raw
    assert "secret" not in raw


@pytest.mark.asyncio
async def test_clear_removes_persisted_entry():
    backend = MemorySessionBackend()
    holder = SessionHolder(backend, "abc")
    await holder.set(profile())

    await holder.clear()

    assert holder.current is None
    assert await SessionHolder(backend, "abc").load() is None


@pytest.mark.asyncio
async def test_sessions_are_keyed_per_client():
    backend = MemorySessionBackend()
    await SessionHolder(backend, "one").set(profile())

    assert await SessionHolder(backend, "two").load() is None


def test_default_key_is_well_known():
    holder = SessionHolder(MemorySessionBackend())

    assert holder.key == settings.SESSION_KEY_PREFIX
    assert SessionHolder(MemorySessionBackend(), "xyz").key == f"{settings.SESSION_KEY_PREFIX}:xyz"


@pytest.mark.asyncio
async def test_unreadable_entry_is_discarded():
    backend = MemorySessionBackend()
    holder = SessionHolder(backend, "abc")
    await backend.set(holder.key, '{"not": "a profile"}')

    assert await holder.load() is None
    assert await backend.get(holder.key) is None


def test_holders_for_one_session_share_a_lock():
    backend = MemorySessionBackend()
    first = SessionHolder(backend, "shared")
    second = SessionHolder(backend, "shared")

    assert first._lock is second._lock
    assert SessionHolder(backend, "other")._lock is not first._lock
