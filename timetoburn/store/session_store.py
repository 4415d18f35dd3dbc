"""In-memory registry of exposure sessions with async-safe access.

Design notes:
    - An asyncio.Lock guards the registry itself.  Each session keeps its
      own lock for timer and policy state; the registry lock is released
      before a removed session is stopped.
    - Sessions are built by an injected factory so configuration lives in
      one place (main.py).
    - Sessions never share state with each other.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable
from uuid import UUID

from timetoburn.core.session import ExposureSession
from timetoburn.foundation.identifiers import new_id

logger = logging.getLogger(__name__)

SessionFactory = Callable[[UUID], ExposureSession]


class SessionStore:
    """Async-safe registry of ExposureSessions keyed by session ID."""

    def __init__(self, factory: SessionFactory | None = None) -> None:
        self._factory: SessionFactory = factory or (lambda sid: ExposureSession(session_id=sid))
        self._lock = asyncio.Lock()
        self._sessions: dict[UUID, ExposureSession] = {}

    # ── Public API ───────────────────────────────────────────────────────

    async def open(self, session_id: UUID | None = None) -> ExposureSession:
        """Return the session for *session_id*, creating it if needed."""
        async with self._lock:
            sid = session_id or new_id()
            session = self._sessions.get(sid)
            if session is None:
                session = self._factory(sid)
                self._sessions[sid] = session
                logger.info("Opened session %s", sid)
            return session

    async def get(self, session_id: UUID) -> ExposureSession | None:
        async with self._lock:
            return self._sessions.get(session_id)

    async def close(self, session_id: UUID) -> bool:
        """Stop and forget a session.  Returns False if it was unknown."""
        async with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        await session.stop()
        logger.info("Closed session %s", session_id)
        return True

    async def close_all(self) -> int:
        async with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            await session.stop()
        if sessions:
            logger.info("Closed %d session(s)", len(sessions))
        return len(sessions)

    async def active_count(self) -> int:
        async with self._lock:
            return len(self._sessions)
