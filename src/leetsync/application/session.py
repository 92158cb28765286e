"""
Session lifecycle: the active user and their completion cache.

The SessionManager owns the only mutable shared state in the agent. Every
lifecycle operation runs under a single-slot guard so a refresh can never
interleave with an insert or delete at an await point.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Literal

from leetsync.domain.cache import CompletionCache
from leetsync.domain.errors import LeetsyncError, NoActiveSession, SessionBusy
from leetsync.domain.interfaces import CompletionStore, HostBridge
from leetsync.domain.models import Record

logger = logging.getLogger(__name__)

BusyPolicy = Literal["queue", "reject"]


@dataclass
class Session:
    """A username bound to its cache. `username=None` is the "no user" state."""

    username: str | None
    cache: CompletionCache = field(default_factory=CompletionCache)

    @property
    def is_active(self) -> bool:
        return self.username is not None


class SessionManager:
    """Creates, refreshes and mutates the Session on behalf of the host."""

    def __init__(
        self,
        store: CompletionStore,
        host: HostBridge,
        busy_policy: BusyPolicy = "queue",
    ):
        self.store = store
        self.host = host
        self.busy_policy = busy_policy
        self._session: Session | None = None
        self._lock = asyncio.Lock()

    @property
    def session(self) -> Session | None:
        return self._session

    @asynccontextmanager
    async def _exclusive(self, operation: str) -> AsyncIterator[None]:
        if self.busy_policy == "reject" and self._lock.locked():
            raise SessionBusy(f"Cannot {operation}: another session operation is in flight")
        async with self._lock:
            yield

    def _require_active(self) -> Session:
        if self._session is None or not self._session.is_active:
            raise NoActiveSession("No user is signed in")
        return self._session

    async def ensure(self, should_refresh: bool = False) -> Session:
        """
        Return the current session, building it first if needed.

        With no session yet, or when `should_refresh` is set, the host is
        asked for the username and the cache is rebuilt from the remote
        table. If the table fetch fails the error propagates; the previous
        session stays in place only when the host still reports the same
        user, otherwise the new user is bound with an empty cache.
        """
        async with self._exclusive("refresh the session"):
            if self._session is not None and not should_refresh:
                return self._session

            username = await self.host.request_username()
            if not username:
                logger.info("No username from host; session has no user")
                self._session = Session(username=None)
                return self._session

            logger.info(f"Initializing user: {username}")
            try:
                records = await self.store.get_table(username)
            except LeetsyncError:
                # A different user must never keep writing through the old session.
                if self._session is None or self._session.username != username:
                    self._session = Session(username=username)
                raise
            session = Session(username=username)
            session.cache.replace_all(records)
            self._session = session
            logger.debug(f"Loaded {len(session.cache)} records for {username}")
            return session

    async def record_completion(self, record: Record) -> Record:
        """Insert `record` remotely, then locally. A remote failure leaves the cache as it was."""
        async with self._exclusive("record a completion"):
            session = self._require_active()
            await self.store.insert_row(session.username, record)
            session.cache.insert_or_replace(record)
            logger.info(f"Recorded {record.id} for {session.username}")
            return record

    async def remove_completion(self, problem_id: str) -> None:
        async with self._exclusive("remove a completion"):
            session = self._require_active()
            await self.store.delete_row(session.username, problem_id)
            session.cache.delete(problem_id)
            logger.info(f"Removed {problem_id} for {session.username}")

    def was_completed_recently(self, problem_id: str, window: timedelta) -> bool:
        if self._session is None or not self._session.is_active:
            return False
        return self._session.cache.was_completed_within(problem_id, window)
