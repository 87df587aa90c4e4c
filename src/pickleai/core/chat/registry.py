"""Live chat sessions held by the API process.

Each session gets its own ``asyncio.Lock``.  A turn holds the lock for its
whole duration; a second request for the same session while it is held is
refused with ``SessionBusy`` instead of queueing behind it.

Clients that vanish without deleting their session would hold a slot
forever, so every ``create`` first evicts sessions idle for longer than
``idle_timeout``.  Sessions in the middle of a turn are never evicted.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import timedelta

from pickleai.core.metrics import CHAT_SESSIONS_ACTIVE, CHAT_SESSIONS_EVICTED_TOTAL
from pickleai.infra.id_utils import generate_id
from pickleai.infra.logging import bind_session_id

from .exceptions import SessionBusy, SessionLimitReached, SessionNotFound
from .session import ChatSession

logger = logging.getLogger(__name__)

_SESSION_ID_PREFIX = "chat"


class SessionRegistry:
    def __init__(
        self,
        session_factory: Callable[[], ChatSession],
        max_sessions: int = 1000,
        idle_timeout: timedelta = timedelta(minutes=30),
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._factory = session_factory
        self._max_sessions = max_sessions
        self._idle_seconds = idle_timeout.total_seconds()
        self._clock = clock
        self._sessions: dict[str, ChatSession] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._last_active: dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def create(self) -> tuple[str, ChatSession]:
        """Open a session seeded with the welcome message."""
        self.evict_idle()
        if len(self._sessions) >= self._max_sessions:
            raise SessionLimitReached(self._max_sessions)
        session_id = generate_id(_SESSION_ID_PREFIX)
        session = self._factory()
        session.initialize_chat()
        self._sessions[session_id] = session
        self._locks[session_id] = asyncio.Lock()
        self._last_active[session_id] = self._clock()
        CHAT_SESSIONS_ACTIVE.set(len(self._sessions))
        logger.info("Opened chat session %s", session_id)
        return session_id, session

    def get(self, session_id: str) -> ChatSession:
        try:
            session = self._sessions[session_id]
        except KeyError:
            raise SessionNotFound(session_id) from None
        self._last_active[session_id] = self._clock()
        return session

    @asynccontextmanager
    async def exclusive(self, session_id: str) -> AsyncIterator[ChatSession]:
        """Hold the session for one mutation; ``SessionBusy`` if already held."""
        session = self.get(session_id)
        lock = self._locks[session_id]
        if lock.locked():
            raise SessionBusy(session_id)
        async with lock:
            try:
                with bind_session_id(session_id):
                    yield session
            finally:
                if session_id in self._last_active:
                    self._last_active[session_id] = self._clock()

    def evict_idle(self) -> list[str]:
        """Drop sessions idle past the timeout; returns the evicted ids."""
        now = self._clock()
        idle = [
            session_id
            for session_id, last_active in self._last_active.items()
            if now - last_active > self._idle_seconds
            and not self._locks[session_id].locked()
        ]
        for session_id in idle:
            self._drop(session_id)
        if idle:
            CHAT_SESSIONS_EVICTED_TOTAL.inc(len(idle))
            CHAT_SESSIONS_ACTIVE.set(len(self._sessions))
            logger.info("Evicted %d idle chat sessions", len(idle))
        return idle

    def remove(self, session_id: str) -> None:
        lock = self._locks.get(session_id)
        if lock is not None and lock.locked():
            raise SessionBusy(session_id)
        if session_id not in self._sessions:
            raise SessionNotFound(session_id)
        self._drop(session_id)
        CHAT_SESSIONS_ACTIVE.set(len(self._sessions))
        logger.info("Closed chat session %s", session_id)

    def _drop(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
        self._locks.pop(session_id, None)
        self._last_active.pop(session_id, None)

    def clear(self) -> None:
        self._sessions.clear()
        self._locks.clear()
        self._last_active.clear()
        CHAT_SESSIONS_ACTIVE.set(0)
