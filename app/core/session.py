# app/core/session.py

import asyncio
import weakref
from typing import Optional, Protocol

import redis.asyncio as redis
from loguru import logger
from pydantic import ValidationError

from app.core.config import settings
from app.schemas.user import ProfileRead


# ----------------------------------------------------------------
# 1. PERSISTENCE BACKENDS
# ----------------------------------------------------------------
class SessionBackend(Protocol):
    async def get(self, key: str) -> Optional[str]: ...
    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None: ...
    async def delete(self, key: str) -> None: ...


class MemorySessionBackend:
    """Process-local storage, used when no REDIS_URL is configured."""

    def __init__(self):
        self._data: dict[str, str] = {}

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)


class RedisSessionBackend:
    def __init__(self, url: str):
        self.client = redis.from_url(url, decode_responses=True, socket_connect_timeout=5)

    async def get(self, key: str) -> Optional[str]:
        return await self.client.get(key)

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        await self.client.set(key, value, ex=ttl)

    async def delete(self, key: str) -> None:
        await self.client.delete(key)


_backend: Optional[SessionBackend] = None


def get_session_backend() -> SessionBackend:
    global _backend
    if _backend is None:
        if settings.REDIS_URL:
            logger.info("Session storage: Redis")
            _backend = RedisSessionBackend(settings.REDIS_URL)
        else:
            logger.warning("REDIS_URL not found. Sessions are kept in process memory.")
            _backend = MemorySessionBackend()
    return _backend


_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()


def _lock_for(key: str) -> asyncio.Lock:
    lock = _locks.get(key)
    if lock is None:
        lock = asyncio.Lock()
        _locks[key] = lock
    return lock


# ----------------------------------------------------------------
# 2. SESSION HOLDER
# ----------------------------------------------------------------
class SessionHolder:
    """
    Holds the currently authenticated profile for one client session.

    Lifecycle: ``load()`` restores the persisted profile (if any),
    ``set()`` installs a freshly resolved one, ``clear()`` signs out.
    Holders for the same session key share one lock, so load, set and clear
    from concurrent requests on one session run one at a time within a
    process.
    """

    def __init__(self, backend: SessionBackend, session_id: Optional[str] = None, ttl: Optional[int] = None):
        self.backend = backend
        self.session_id = session_id
        self.ttl = ttl if ttl is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
        self._current: Optional[ProfileRead] = None
        self._loaded = False
        self._lock = _lock_for(self.key)

    @property
    def key(self) -> str:
        if self.session_id:
            return f"{settings.SESSION_KEY_PREFIX}:{self.session_id}"
        return settings.SESSION_KEY_PREFIX

    @property
    def current(self) -> Optional[ProfileRead]:
        return self._current

    @property
    def loaded(self) -> bool:
        return self._loaded

    async def load(self) -> Optional[ProfileRead]:
        async with self._lock:
            raw = await self.backend.get(self.key)
            profile = None
            if raw:
                try:
                    profile = ProfileRead.model_validate_json(raw)
                except ValidationError:
                    # Stale format from an older release; treat as signed out
                    logger.warning(f"Discarding unreadable session entry {self.key}")
                    await self.backend.delete(self.key)
            self._current = profile
            self._loaded = True
            return profile

    async def set(self, profile) -> ProfileRead:
        snapshot = profile if isinstance(profile, ProfileRead) else ProfileRead.model_validate(profile)
        async with self._lock:
            await self.backend.set(self.key, snapshot.model_dump_json(), ttl=self.ttl)
            self._current = snapshot
            self._loaded = True
            return snapshot

    async def clear(self) -> None:
        async with self._lock:
            await self.backend.delete(self.key)
            self._current = None
            self._loaded = True
