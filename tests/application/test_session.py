import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest
from factories import make_record

from leetsync.application.session import SessionManager
from leetsync.domain.errors import NoActiveSession, RemoteError, SessionBusy
from leetsync.domain.interfaces import CompletionStore
from leetsync.infrastructure.adapters.host_bridge import StaticHostBridge


class FakeStore(CompletionStore):
    def __init__(self, table=()):
        self.table = list(table)
        self.inserted = []
        self.deleted = []
        self.fail: Exception | None = None
        self.gate: asyncio.Event | None = None
        self.table_calls = 0

    async def insert_row(self, username, record):
        if self.fail:
            raise self.fail
        self.inserted.append((username, record))
        return {"ok": True}

    async def delete_row(self, username, problem_id):
        if self.fail:
            raise self.fail
        self.deleted.append((username, problem_id))
        return {"ok": True}

    async def get_table(self, username):
        self.table_calls += 1
        if self.gate:
            await self.gate.wait()
        if self.fail:
            raise self.fail
        return list(self.table)


@pytest.fixture
def store():
    return FakeStore(
        [make_record("march", "2024-03-01"), make_record("january", "2024-01-01")]
    )


@pytest.fixture
def manager(store):
    return SessionManager(store, StaticHostBridge("alice"))


@pytest.mark.asyncio
async def test_ensure_loads_sorted_table(manager, store):
    session = await manager.ensure()

    assert session.username == "alice"
    assert [r.id for r in session.cache] == ["january", "march"]
    assert store.table_calls == 1


@pytest.mark.asyncio
async def test_ensure_reuses_session_unless_refreshed(manager, store):
    first = await manager.ensure()
    again = await manager.ensure()
    refreshed = await manager.ensure(should_refresh=True)

    assert again is first
    assert refreshed is not first
    assert store.table_calls == 2


@pytest.mark.asyncio
async def test_ensure_without_username_is_no_user_state(store):
    manager = SessionManager(store, StaticHostBridge(None))

    session = await manager.ensure()

    assert session.username is None
    assert not session.is_active
    assert store.table_calls == 0


@pytest.mark.asyncio
async def test_ensure_failure_keeps_previous_session(manager, store):
    previous = await manager.ensure()
    store.fail = RemoteError("boom", status=500)

    with pytest.raises(RemoteError):
        await manager.ensure(should_refresh=True)

    assert manager.session is previous


@pytest.mark.asyncio
async def test_ensure_failure_for_new_user_drops_old_session(store):
    host = AsyncMock()
    host.request_username.side_effect = ["alice", "bob"]
    manager = SessionManager(store, host)
    await manager.ensure()
    store.fail = RemoteError("boom", status=500)

    with pytest.raises(RemoteError):
        await manager.ensure(should_refresh=True)

    assert manager.session.username == "bob"
    assert len(manager.session.cache) == 0

    store.fail = None
    await manager.record_completion(make_record("bobs-problem"))
    await manager.remove_completion("bobs-problem")

    assert store.inserted == [("bob", make_record("bobs-problem"))]
    assert store.deleted == [("bob", "bobs-problem")]


@pytest.mark.asyncio
async def test_ensure_asks_host_for_username_on_refresh(store):
    host = AsyncMock()
    host.request_username.side_effect = ["alice", "bob"]
    manager = SessionManager(store, host)

    await manager.ensure()
    session = await manager.ensure(should_refresh=True)

    assert session.username == "bob"
    assert host.request_username.await_count == 2


@pytest.mark.asyncio
async def test_record_completion_applies_after_remote_success(manager, store):
    await manager.ensure()
    record = make_record("february", "2024-02-01")

    await manager.record_completion(record)

    assert store.inserted == [("alice", record)]
    assert [r.id for r in manager.session.cache] == ["january", "february", "march"]


@pytest.mark.asyncio
async def test_record_completion_remote_failure_leaves_cache_untouched(manager, store):
    await manager.ensure()
    before = manager.session.cache.records()
    store.fail = RemoteError("HTTP error! status: 500", status=500)

    with pytest.raises(RemoteError):
        await manager.record_completion(make_record("february", "2024-02-01"))

    assert "february" not in manager.session.cache
    assert manager.session.cache.records() == before


@pytest.mark.asyncio
async def test_remove_completion(manager, store):
    await manager.ensure()

    await manager.remove_completion("march")

    assert store.deleted == [("alice", "march")]
    assert "march" not in manager.session.cache


@pytest.mark.asyncio
async def test_remove_completion_remote_failure_keeps_entry(manager, store):
    await manager.ensure()
    store.fail = RemoteError("nope", status=404)

    with pytest.raises(RemoteError):
        await manager.remove_completion("march")

    assert "march" in manager.session.cache


@pytest.mark.asyncio
async def test_mutations_require_active_session(store):
    manager = SessionManager(store, StaticHostBridge(None))

    with pytest.raises(NoActiveSession):
        await manager.record_completion(make_record())

    await manager.ensure()
    with pytest.raises(NoActiveSession):
        await manager.remove_completion("two-sum")

    assert store.inserted == []
    assert store.deleted == []


@pytest.mark.asyncio
async def test_insert_queued_behind_refresh_is_not_lost(manager, store):
    await manager.ensure()
    store.gate = asyncio.Event()

    refresh = asyncio.create_task(manager.ensure(should_refresh=True))
    await asyncio.sleep(0)
    insert = asyncio.create_task(manager.record_completion(make_record("late", "2024-02-15")))
    await asyncio.sleep(0)

    assert store.inserted == []
    store.gate.set()
    await asyncio.gather(refresh, insert)

    assert "late" in manager.session.cache
    assert [r.id for r in manager.session.cache] == ["january", "late", "march"]


@pytest.mark.asyncio
async def test_reject_policy_raises_busy(store):
    manager = SessionManager(store, StaticHostBridge("alice"), busy_policy="reject")
    await manager.ensure()
    store.gate = asyncio.Event()

    refresh = asyncio.create_task(manager.ensure(should_refresh=True))
    await asyncio.sleep(0)

    with pytest.raises(SessionBusy):
        await manager.record_completion(make_record("late"))

    store.gate.set()
    await refresh
    assert "late" not in manager.session.cache


@pytest.mark.asyncio
async def test_was_completed_recently(manager, store):
    assert manager.was_completed_recently("january", timedelta(hours=24)) is False

    store.table = [make_record("today", last_completion_date=datetime.now(timezone.utc))]
    await manager.ensure()

    assert manager.was_completed_recently("today", timedelta(hours=24)) is True
    assert manager.was_completed_recently("absent", timedelta(hours=24)) is False
