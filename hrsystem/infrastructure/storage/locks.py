"""
Per-key asyncio locks shared by the storage adapters.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Hashable
from weakref import WeakValueDictionary


class KeyLocks:
    """
    Lazily created lock per key.

    Locks are held weakly, so keys nobody is waiting on do not accumulate.
    """

    def __init__(self) -> None:
        self._locks: "WeakValueDictionary[Hashable, asyncio.Lock]" = WeakValueDictionary()

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        """Hold the lock for ``key`` for the duration of the block."""
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        async with lock:
            yield
