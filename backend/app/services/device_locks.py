import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator


class DeviceLockRegistry:
    """One asyncio.Lock per device id, created on first use.

    A lock discarded while an execution holds or awaits it is dropped when
    the last of those executions leaves ``hold``.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}
        self._retired: set[str] = set()

    def lock_for(self, device_id: str) -> asyncio.Lock:
        lock = self._locks.get(device_id)
        if lock is None:
            lock = self._locks[device_id] = asyncio.Lock()
        return lock

    @asynccontextmanager
    async def hold(self, device_id: str) -> AsyncIterator[asyncio.Lock]:
        lock = self.lock_for(device_id)
        self._users[device_id] = self._users.get(device_id, 0) + 1
        try:
            async with lock:
                yield lock
        finally:
            self._users[device_id] -= 1
            if not self._users[device_id]:
                del self._users[device_id]
                if device_id in self._retired:
                    self._retired.discard(device_id)
                    self._locks.pop(device_id, None)

    def discard(self, device_id: str) -> None:
        if self._users.get(device_id):
            self._retired.add(device_id)
        else:
            self._locks.pop(device_id, None)

    def __len__(self) -> int:
        return len(self._locks)
