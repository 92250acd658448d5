import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from typing import Dict

logger = logging.getLogger(__name__)


class HouseLockRegistry:
    """Per-house asyncio locks serialising occupancy changes inside one process."""

    def __init__(self):
        self._locks: Dict[uuid.UUID, asyncio.Lock] = {}
        self._waiters: Dict[uuid.UUID, int] = {}

    @asynccontextmanager
    async def hold(self, house_id: uuid.UUID):
        lock = self._locks.setdefault(house_id, asyncio.Lock())
        self._waiters[house_id] = self._waiters.get(house_id, 0) + 1
        try:
            async with lock:
                logger.debug("Acquired house lock %s", house_id)
                yield
        finally:
            self._waiters[house_id] -= 1
            if self._waiters[house_id] == 0:
                self._waiters.pop(house_id, None)
                self._locks.pop(house_id, None)

    def is_locked(self, house_id: uuid.UUID) -> bool:
        lock = self._locks.get(house_id)
        return bool(lock and lock.locked())


house_locks = HouseLockRegistry()
