"""
Connection registry module.

Tracks which connections are currently registered for fan-out and the
display identifier of each. Every mutation and every fan-out iteration
serializes on one asyncio lock.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple


class RegistryError(Exception):
    """Raised when a connection is registered twice."""


class ConnectionRegistry:
    """Lock-guarded mapping of connection -> identifier.

    Connections are keyed by identity. Registering a connection that is
    already present raises RegistryError instead of overwriting the entry.
    Unregistering an absent connection is a no-op.

    ``for_each`` runs its callback while holding the lock. The callback must
    not call back into the registry: asyncio locks are not re-entrant and the
    call would deadlock.
    """

    def __init__(self):
        self._entries: Dict[Any, str] = {}
        self.lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, conn) -> bool:
        return conn in self._entries

    async def register(self, conn, identifier: str):
        """Add a connection. Raises RegistryError if it is already present."""
        async with self.lock:
            if conn in self._entries:
                raise RegistryError(f"{identifier} is already registered")
            self._entries[conn] = identifier

    async def unregister(self, conn) -> bool:
        """Remove a connection if present. Returns True if an entry was removed."""
        async with self.lock:
            return self._entries.pop(conn, None) is not None

    async def for_each(self, visit: Callable[[Any, str], Awaitable[None]]):
        """Await ``visit(conn, identifier)`` for every entry while holding the lock."""
        async with self.lock:
            for conn, identifier in self._entries.items():
                await visit(conn, identifier)

    async def snapshot(self) -> List[Tuple[Any, str]]:
        """Return a copy of the current entries taken under the lock."""
        async with self.lock:
            return list(self._entries.items())

    def identifier_of(self, conn) -> Optional[str]:
        return self._entries.get(conn)
