"""
Search orchestration: the single owner of the current query, the recent
searches list and the state of the latest weather lookup.

Every fetch is tagged with a sequence number when it starts. When a fetch
completes, its outcome is applied only if no newer fetch was started in the
meantime; otherwise the completion is dropped. Superseded fetches are not
cancelled, they just run to completion and get ignored.

History is written to the store in the background. Writes are serialized,
each one carries the full list, and a failed write is logged and forgotten:
the in-memory list stays authoritative for the life of the process.
"""
from __future__ import annotations
import asyncio
import logging
from typing import Callable, Optional, Set, Tuple

from citycast.errors import LookupFailed, PersistenceError
from citycast.services.history import HISTORY_KEY, promote, sanitize, without
from citycast.services.validators import normalize_query
from citycast.state import Failed, FetchState, Idle, Loading, Success

logger = logging.getLogger(__name__)


class SearchOrchestrator:
    def __init__(self, gateway, store):
        self._gateway = gateway
        self._store = store
        self._state: FetchState = Idle()
        self._history: Tuple[str, ...] = ()
        self._query = ""
        self._seq = 0
        self._cleared_seq = -1
        self._inflight: Set[asyncio.Task] = set()
        self._writes: Set[asyncio.Task] = set()
        self._write_lock = asyncio.Lock()

    @property
    def state(self) -> FetchState:
        return self._state

    @property
    def history(self) -> Tuple[str, ...]:
        return self._history

    @property
    def query(self) -> str:
        return self._query

    def restore(self) -> Tuple[str, ...]:
        """Seed history from the store. Meant to be called once, at startup."""
        self._history = sanitize(self._store.get(HISTORY_KEY))
        return self._history

    def submit(self, query: str) -> asyncio.Task:
        """
        Start a lookup for query and return the task running it.

        Raises ValidationError right away, with no state change, if query is
        blank. Otherwise the state is Loading(query) by the time this returns.
        Awaiting the task gives the state it applied, or None if a newer
        lookup superseded it or the result was cleared while it ran.
        """
        text = normalize_query(query)
        self._seq += 1
        self._query = text
        self._state = Loading(text)
        task = asyncio.create_task(self._run(self._seq, text))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return task

    def replay(self, entry: str) -> asyncio.Task:
        # Same path as submit: a successful replay moves the entry to the front.
        return self.submit(entry)

    def refresh(self) -> Optional[asyncio.Task]:
        """Re-run the last completed lookup. No-op while idle or loading."""
        if isinstance(self._state, (Success, Failed)):
            return self.submit(self._state.query)
        return None

    def clear_result(self) -> None:
        # A lookup still running keeps its history effect but not its result.
        self._cleared_seq = self._seq
        self._state = Idle()
        self._query = ""

    def clear_history(self) -> None:
        self._history = ()
        logger.info("Search history cleared")
        self._schedule_write(self._store.remove, HISTORY_KEY)

    def forget(self, entry: str) -> bool:
        remaining = without(self._history, entry)
        if remaining == self._history:
            return False
        self._history = remaining
        self._persist()
        return True

    async def drain(self) -> None:
        """Wait for outstanding lookups and history writes."""
        while self._inflight or self._writes:
            await asyncio.gather(*self._inflight, *self._writes, return_exceptions=True)

    async def _run(self, seq: int, query: str) -> Optional[FetchState]:
        try:
            payload = await self._gateway.fetch(query)
        except LookupFailed as e:
            outcome: FetchState = Failed(query, str(e))
        else:
            outcome = Success(query, payload)

        if seq != self._seq:
            logger.debug("Dropping stale completion #%d for %r (latest is #%d)", seq, query, self._seq)
            return None

        if isinstance(outcome, Success):
            self._history = promote(self._history, query)
            self._persist()
        if seq == self._cleared_seq:
            return None
        self._state = outcome
        return outcome

    def _persist(self) -> None:
        self._schedule_write(self._store.set, HISTORY_KEY, list(self._history))

    def _schedule_write(self, op: Callable, *args) -> None:
        task = asyncio.create_task(self._write(op, *args))
        self._writes.add(task)
        task.add_done_callback(self._writes.discard)

    async def _write(self, op: Callable, *args) -> None:
        async with self._write_lock:
            try:
                await asyncio.to_thread(op, *args)
            except PersistenceError as e:
                logger.warning("History was not saved: %s", e)
            except Exception:
                logger.exception("History store failed unexpectedly")
