from __future__ import annotations

import asyncio
import weakref
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class RoomLocks:
    """
    One asyncio.Lock per draft room.

    Joins and pick commits for the same room run one at a time inside this process; rooms never
    wait on each other. Cross-process serialization comes from SELECT ... FOR UPDATE on the room
    row and the ledger's unique constraints.
    """

    def __init__(self) -> None:
        # Locks disappear once no coroutine holds or waits on them.
        self._locks: weakref.WeakValueDictionary[int, asyncio.Lock] = weakref.WeakValueDictionary()

    def get_or_create(self, room_id: int) -> asyncio.Lock:
        # No await between lookup and insert, so two coroutines can't create separate locks.
        lock = self._locks.get(room_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[room_id] = lock
        return lock

    @asynccontextmanager
    async def hold(self, room_id: int) -> AsyncIterator[None]:
        async with self.get_or_create(room_id):
            yield


room_locks = RoomLocks()
