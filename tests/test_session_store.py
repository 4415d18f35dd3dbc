"""Tests for the SessionStore registry."""

from uuid import uuid4

import pytest

from timetoburn.core.session import ExposureSession
from timetoburn.domain.enums import TimerState
from timetoburn.store.session_store import SessionStore


@pytest.fixture
def store() -> SessionStore:
    return SessionStore()


class TestSessionStore:
    @pytest.mark.asyncio
    async def test_open_creates_session(self, store: SessionStore) -> None:
        session = await store.open()
        assert isinstance(session, ExposureSession)
        assert await store.active_count() == 1

    @pytest.mark.asyncio
    async def test_open_same_id_returns_same_session(self, store: SessionStore) -> None:
        sid = uuid4()
        first = await store.open(sid)
        second = await store.open(sid)
        assert first is second
        assert first.session_id == sid

    @pytest.mark.asyncio
    async def test_sessions_are_isolated(self, store: SessionStore) -> None:
        a = await store.open()
        b = await store.open()
        await a.observe_uv(6)
        await a.start()
        assert (await a.snapshot()).state == TimerState.RUNNING
        assert (await b.snapshot()).state == TimerState.NOT_STARTED

    @pytest.mark.asyncio
    async def test_get_returns_none_for_unknown(self, store: SessionStore) -> None:
        assert await store.get(uuid4()) is None

    @pytest.mark.asyncio
    async def test_close_stops_and_forgets(self, store: SessionStore) -> None:
        session = await store.open()
        await session.observe_uv(6)
        await session.start()
        assert await store.close(session.session_id) is True
        assert await store.get(session.session_id) is None
        assert (await session.snapshot()).state == TimerState.PAUSED
        assert await store.close(session.session_id) is False

    @pytest.mark.asyncio
    async def test_close_all(self, store: SessionStore) -> None:
        await store.open()
        await store.open()
        assert await store.close_all() == 2
        assert await store.active_count() == 0

    @pytest.mark.asyncio
    async def test_factory_is_used(self) -> None:
        built = []

        def factory(sid):
            session = ExposureSession(session_id=sid)
            built.append(session)
            return session

        store = SessionStore(factory)
        session = await store.open()
        assert built == [session]
