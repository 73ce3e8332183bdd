from __future__ import annotations

from asyncio import Lock
from collections.abc import AsyncIterator, Hashable
from contextlib import asynccontextmanager


class KeyedLock:
    """A set of asyncio locks addressed by key.

    Locks are created on demand and dropped once nobody holds or waits on
    them, so the table only grows with the number of keys in flight. The
    bookkeeping never awaits, which keeps it atomic within one event loop.
    """

    def __init__(self) -> None:
        self._locks: dict[Hashable, tuple[Lock, int]] = {}

    def _checkout(self, key: Hashable) -> Lock:
        lock, users = self._locks.get(key, (None, 0))
        if lock is None:
            lock = Lock()
        self._locks[key] = (lock, users + 1)
        return lock

    def _release(self, key: Hashable) -> None:
        lock, users = self._locks[key]
        if users <= 1:
            del self._locks[key]
        else:
            self._locks[key] = (lock, users - 1)

    @asynccontextmanager
    async def hold(self, *keys: Hashable) -> AsyncIterator[None]:
        """Hold every lock in ``keys``.

        Keys are deduplicated and taken in sorted order so two callers asking
        for overlapping sets cannot deadlock.
        """

        ordered = sorted(set(keys), key=repr)
        acquired: list[tuple[Hashable, Lock]] = []
        try:
            for key in ordered:
                lock = self._checkout(key)
                try:
                    await lock.acquire()
                except BaseException:
                    self._release(key)
                    raise
                acquired.append((key, lock))
            yield
        finally:
            for key, lock in reversed(acquired):
                lock.release()
                self._release(key)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._locks

    def __len__(self) -> int:
        return len(self._locks)


# (player_id, ranking_id) -> ledger entry mutations
ledger_locks = KeyedLock()
# match_id -> status transitions
match_locks = KeyedLock()
