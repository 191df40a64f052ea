"""
Relay connection handle.

Wraps a websockets server connection behind the small surface the relay uses.
"""

from websockets.asyncio.server import ServerConnection
from websockets.protocol import State


class Connection:
    """One accepted WebSocket channel."""

    def __init__(self, websocket: ServerConnection):
        self.websocket = websocket

    @property
    def remote_address(self):
        return self.websocket.remote_address

    @property
    def is_open(self) -> bool:
        """Whether the channel is still writable."""
        return self.websocket.state is State.OPEN

    async def send(self, data: str):
        await self.websocket.send(data)

    async def close(self, code: int = 1001, reason: str = 'server shutting down'):
        await self.websocket.close(code, reason)

    def __repr__(self):
        return f"Connection({self.remote_address})"
