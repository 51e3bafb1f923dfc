"""Per-order lock registry

Serializes status-changing work on the same purchase order inside one
process. Orders never share a lock, so work on different orders does not
contend. Cross-process safety comes from row locks and the order version.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict


class OrderLockRegistry:
    def __init__(self):
        self._locks: Dict[int, asyncio.Lock] = {}
        self._waiters: Dict[int, int] = {}

    @asynccontextmanager
    async def hold(self, order_id: int) -> AsyncIterator[None]:
        lock = self._locks.setdefault(order_id, asyncio.Lock())
        self._waiters[order_id] = self._waiters.get(order_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[order_id] -= 1
            if self._waiters[order_id] == 0:
                del self._waiters[order_id]
                del self._locks[order_id]

    def __len__(self) -> int:
        return len(self._locks)
