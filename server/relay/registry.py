"""
Connection registry.

The set of live connections eligible for broadcast. Every mutation and every
snapshot is taken under one asyncio lock, so a broadcast never observes a
half-applied add or remove.
"""

import asyncio
from typing import List, Set, Tuple


class ConnectionRegistry:
    """Lock-guarded set of live connections."""

    def __init__(self):
        self._connections: Set = set()
        self._lock = asyncio.Lock()

    async def add(self, connection) -> bool:
        """Register a connection. Returns False if it was already present."""
        async with self._lock:
            if connection in self._connections:
                return False
            self._connections.add(connection)
            return True

    async def remove(self, connection) -> bool:
        """Unregister a connection. Removing an absent connection is a no-op."""
        async with self._lock:
            if connection not in self._connections:
                return False
            self._connections.discard(connection)
            return True

    async def contains(self, connection) -> bool:
        async with self._lock:
            return connection in self._connections

    async def snapshot(self) -> Tuple:
        """Point-in-time copy of the registered connections."""
        async with self._lock:
            return tuple(self._connections)

    async def clear(self) -> List:
        """Remove every connection and return what was removed."""
        async with self._lock:
            drained = list(self._connections)
            self._connections.clear()
            return drained

    def __len__(self) -> int:
        return len(self._connections)
