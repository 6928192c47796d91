"""Per-user mutual exclusion for ledger mutations."""

import asyncio
from weakref import WeakValueDictionary


class UserLockRegistry:
    """
    Hands out one asyncio.Lock per user id.

    Locks are held weakly and disappear once no coroutine holds or
    waits on them. One registry must be shared by every service
    instance in the process.
    """

    def __init__(self):
        self._locks: "WeakValueDictionary[str, asyncio.Lock]" = WeakValueDictionary()

    def lock_for(self, user_id: str) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        return lock

    def __len__(self) -> int:
        return len(self._locks)
